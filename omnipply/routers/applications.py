import logging

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status

from omnipply.dependencies import (
    ApplicationsServiceDep,
    AttachmentServiceDep,
    CurrentUserDep,
    ProgramsServiceDep,
    SchemaLoaderDep,
)
from omnipply.exceptions import NotFoundError
from omnipply.schemas.api.applications import AnswersPayload, ApplicationView, StartApplicationRequest, SubmitResponse
from omnipply.schemas.applications import AttachmentInfo
from omnipply.services.answers import reconcile_answers, render_answers, word_counts
from omnipply.services.applications import MissingRequiredAnswersError, WordLimitExceededError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/applications", tags=["applications"])


def _view(application, schema) -> ApplicationView:
    return ApplicationView(
        application=application.model_dump(mode="json"),
        schema=schema["fields"],
        answers=reconcile_answers(schema, application.answers),
        rendered=render_answers(schema, application.answers),
        word_counts=word_counts(schema, application.answers),
    )


@router.post("", response_model=ApplicationView, summary="Start or resume an application")
def start_application(
    body: StartApplicationRequest,
    user: CurrentUserDep,
    service: ApplicationsServiceDep,
    programs: ProgramsServiceDep,
    loader: SchemaLoaderDep,
):
    try:
        program = programs.fetch_program(body.program_id)
    except NotFoundError:
        program = {"id": body.program_id}

    application = service.start_with_profile(program)
    schema = loader.load_application_schema(program)
    logger.info(f"Application {application.id} opened by {user['id']} for program {body.program_id}")
    return _view(application, schema)


@router.get("/{application_id}", response_model=ApplicationView)
def get_application(application_id: str, user: CurrentUserDep, service: ApplicationsServiceDep, loader: SchemaLoaderDep):
    application = service.get(application_id)
    schema = loader.load_application_schema_by_id(application.program_id)
    return _view(application, schema)


@router.put("/{application_id}", summary="Save draft answers")
def save_application(application_id: str, body: AnswersPayload, user: CurrentUserDep, service: ApplicationsServiceDep):
    service.save(application_id, body.answers)
    return {"saved": True}


@router.post("/{application_id}/submit", response_model=SubmitResponse)
def submit_application(
    application_id: str,
    body: AnswersPayload,
    user: CurrentUserDep,
    service: ApplicationsServiceDep,
    loader: SchemaLoaderDep,
):
    application = service.get(application_id)
    schema = loader.load_application_schema_by_id(application.program_id)
    try:
        result = service.submit(application_id, body.answers, schema)
    except MissingRequiredAnswersError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(e), "missing": e.missing},
        )
    except WordLimitExceededError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": str(e), "over_limit": e.fields},
        )
    return SubmitResponse(submitted=True, result=result)


@router.post("/{application_id}/attachments", response_model=AttachmentInfo, status_code=status.HTTP_201_CREATED)
async def upload_attachment(
    application_id: str,
    user: CurrentUserDep,
    attachments: AttachmentServiceDep,
    field_id: str = Form(..., description="Question the file answers"),
    file: UploadFile = File(...),
):
    data = await file.read()
    return attachments.upload(
        user_id=user["id"],
        application_id=application_id,
        field_id=field_id,
        file_name=file.filename or "upload",
        content_type=file.content_type,
        data=data,
    )
