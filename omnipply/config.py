import os
from functools import lru_cache

from pydantic import BaseModel


def _env_list(name: str, default: str) -> list[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings(BaseModel):
    app_version: str = os.getenv("APP_VERSION", "0.1.0")

    # Hosted backend (auth, REST RPC, storage)
    backend_url: str = os.getenv("SUPABASE_URL", "http://localhost:54321")
    backend_anon_key: str = os.getenv("SUPABASE_ANON_KEY", "")
    backend_service_key: str = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
    backend_timeout: float = float(os.getenv("SUPABASE_TIMEOUT", "10"))

    # Redis (organization cache)
    redis_host: str = os.getenv("REDIS_HOST", "localhost")
    redis_port: int = int(os.getenv("REDIS_PORT", "6379"))
    redis_org_cache_version: int = int(os.getenv("REDIS_ORG_CACHE_VERSION", "1"))
    redis_org_cache_ttl_seconds: int = int(os.getenv("REDIS_ORG_CACHE_TTL_SECONDS", "600"))

    # Process-local caches
    effective_roles_ttl_seconds: float = float(os.getenv("EFFECTIVE_ROLES_TTL_SECONDS", "30"))
    capabilities_ttl_seconds: float = float(os.getenv("CAPABILITIES_TTL_SECONDS", "5"))
    user_cache_ttl_seconds: float = float(os.getenv("USER_CACHE_TTL_SECONDS", "60"))

    # Attachments
    attachments_bucket: str = os.getenv("ATTACHMENTS_BUCKET", "application-files")
    max_upload_mb: int = int(os.getenv("MAX_UPLOAD_MB", "50"))
    upload_rate_limit: int = int(os.getenv("UPLOAD_RATE_LIMIT", "10"))
    upload_rate_window_seconds: float = float(os.getenv("UPLOAD_RATE_WINDOW_SECONDS", "60"))

    # Outbound email
    resend_api_key: str = os.getenv("RESEND_API_KEY", "")
    resend_api_url: str = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")
    resend_from_email: str = os.getenv("RESEND_FROM_EMAIL", "onboarding@resend.dev")
    resend_reply_to: str = os.getenv("RESEND_REPLY_TO", "omnipply@gmail.com")
    resend_timeout: float = float(os.getenv("RESEND_TIMEOUT", "10"))
    notification_webhook_secret: str = os.getenv("NOTIFICATION_WEBHOOK_SECRET", "")

    site_base_url: str = os.getenv("SITE_BASE_URL", "https://omnipply.com")
    cors_allow_origins: list[str] = _env_list("CORS_ALLOW_ORIGINS", "http://localhost:8501")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
