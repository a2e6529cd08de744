from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from omnipply.utils.validation import is_valid_slug, require_text


class Organization(BaseModel):
    id: str
    name: str
    slug: str
    description: Optional[str] = None


class OrganizationCacheEntry(BaseModel):
    organization: Organization
    cache_version: int = 1
    hit_count: int = 0
    cached_at: datetime
    expires_at: datetime


class OrganizationCacheStatus(BaseModel):
    slug: str
    is_cached: bool
    hit_count: int | None = None
    cached_at: datetime | None = None
    expires_at: datetime | None = None
    ttl_seconds: int | None = None


class OrganizationSettingsUpdate(BaseModel):
    name: str
    slug: str
    description: Optional[str] = None
    logo_url: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_required(cls, value: str) -> str:
        return require_text(value, "Organization name")

    @field_validator("slug")
    @classmethod
    def valid_slug(cls, value: str) -> str:
        value = value.strip()
        if not is_valid_slug(value):
            raise ValueError("Slug can only contain lowercase letters, numbers, hyphens, and underscores")
        return value


class SlugRequest(BaseModel):
    name: str


class SlugResponse(BaseModel):
    slug: str
