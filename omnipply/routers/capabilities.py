from fastapi import APIRouter

from omnipply.dependencies import CapabilitiesDep
from omnipply.schemas.capabilities import Capabilities

router = APIRouter(prefix="/capabilities", tags=["capabilities"])


@router.get("", response_model=Capabilities, summary="What the signed-in user can manage")
def get_capabilities(capabilities: CapabilitiesDep):
    return capabilities
