import logging
from typing import List, Optional

from fastapi import APIRouter, Query

from omnipply.dependencies import ProgramsServiceDep, SchemaLoaderDep
from omnipply.schemas.programs import ProgramType, ProgramWindow, PublicProgram
from omnipply.services.answers import normalize_schema
from omnipply.services.programs import program_window

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/programs", tags=["programs"])


@router.get("", response_model=List[PublicProgram])
def list_programs(
    service: ProgramsServiceDep,
    type: Optional[ProgramType] = Query(None, description="Restrict to one program type"),
    search: Optional[str] = Query(None),
    coalition_id: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    return service.public_list_programs(
        program_type=type, search=search, coalition_id=coalition_id, limit=limit, offset=offset
    )


@router.get("/{program_id}", response_model=PublicProgram)
def get_program(program_id: str, service: ProgramsServiceDep):
    return service.fetch_public_program(program_id)


@router.get("/{program_id}/window", response_model=ProgramWindow, summary="Open/closed state and deadline messages")
def get_program_window(program_id: str, service: ProgramsServiceDep):
    program = service.fetch_public_program(program_id)
    return program_window(program.model_dump())


@router.get("/{program_id}/schema", summary="Normalized application questions for a program")
def get_program_schema(program_id: str, loader: SchemaLoaderDep):
    schema = loader.load_application_schema_by_id(program_id)
    return {"fields": [field.model_dump(exclude_none=True) for field in normalize_schema(schema)]}
