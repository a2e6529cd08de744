from omnipply.schemas.api.applications import AnswersPayload, ApplicationView, StartApplicationRequest, SubmitResponse
from omnipply.schemas.api.forms import FormUpdateRequest
from omnipply.schemas.api.health import PingResponse
from omnipply.schemas.api.users import UsersResponse, UserWithRoles

__all__ = [
    "PingResponse",
    "StartApplicationRequest",
    "AnswersPayload",
    "ApplicationView",
    "SubmitResponse",
    "FormUpdateRequest",
    "UsersResponse",
    "UserWithRoles",
]
