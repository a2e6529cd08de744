from pydantic import BaseModel, Field


class PingResponse(BaseModel):
    """Liveness probe response."""

    status: str = Field("ok", description="Always 'ok' when the API is serving")
    version: str = Field(..., description="Deployed application version")
