from fastapi import APIRouter

from omnipply.dependencies import SettingsDep
from omnipply.schemas.api.health import PingResponse

router = APIRouter(tags=["health"])


@router.get("/ping", response_model=PingResponse)
async def ping(settings: SettingsDep):
    return PingResponse(status="ok", version=settings.app_version)
