import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from omnipply.config import get_settings
from omnipply.db.redis.redis import close_redis_pool
from omnipply.exceptions import (
    AuthenticationError,
    BackendException,
    NotFoundError,
    UploadRejectedError,
    is_backend_updating_error,
)
from omnipply.middlewares import log_error, request_logging
from omnipply.routers import (
    advertise,
    applications,
    capabilities,
    forms,
    notifications,
    organizations,
    ping,
    programs,
    reviews,
    users,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan for the API.
    """
    logger.info("Starting Omnipply API...")

    settings = get_settings()
    app.state.settings = settings
    logger.info(f"Backend: {settings.backend_url}, redis: {settings.redis_host}:{settings.redis_port}")

    logger.info("API ready")
    yield

    await close_redis_pool()
    logger.info("API shutdown complete")


settings = get_settings()

app = FastAPI(
    title="Omnipply",
    description="Applications, reviews and featured placements for arts organizations.",
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.middleware("http")(request_logging)


def _error_response(request: Request, exc: Exception, status_code: int) -> JSONResponse:
    log_error(str(exc), request.method, request.url.path)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND)


@app.exception_handler(AuthenticationError)
async def authentication_handler(request: Request, exc: AuthenticationError):
    return _error_response(request, exc, status.HTTP_401_UNAUTHORIZED)


@app.exception_handler(UploadRejectedError)
async def upload_rejected_handler(request: Request, exc: UploadRejectedError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST)


@app.exception_handler(BackendException)
async def backend_error_handler(request: Request, exc: BackendException):
    if is_backend_updating_error(exc):
        # schema cache reload; clients retry
        return _error_response(request, exc, status.HTTP_503_SERVICE_UNAVAILABLE)
    return _error_response(request, exc, status.HTTP_502_BAD_GATEWAY)


app.include_router(ping.router, prefix="/api/v1")
app.include_router(capabilities.router, prefix="/api/v1")
app.include_router(programs.router, prefix="/api/v1")
app.include_router(applications.router, prefix="/api/v1")
app.include_router(reviews.router, prefix="/api/v1")
app.include_router(advertise.router, prefix="/api/v1")
app.include_router(forms.router, prefix="/api/v1")
app.include_router(users.router, prefix="/api/v1")
app.include_router(organizations.router, prefix="/api/v1")
app.include_router(notifications.router, prefix="/api/v1")


if __name__ == "__main__":
    uvicorn.run(app, port=8000, host="0.0.0.0")
