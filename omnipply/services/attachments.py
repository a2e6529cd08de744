import logging
import re
import threading
import time
from datetime import datetime
from typing import Callable, Dict, List, Optional

from omnipply.exceptions import BackendRPCError, UploadRejectedError
from omnipply.schemas.applications import AttachmentInfo
from omnipply.services.backend.client import BackendClient
from omnipply.utils.dates import utcnow

logger = logging.getLogger(__name__)

ALLOWED_TYPES = (
    "image/png",
    "image/jpeg",
    "image/heic",
    "video/mp4",
    "audio/mpeg",
    "application/pdf",
)
MAX_FILE_NAME_LENGTH = 100
CACHE_CONTROL_SECONDS = "3600"

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")
_REPEATED_DOTS = re.compile(r"\.{2,}")


def sanitize_file_name(name: str) -> str:
    """Storage-safe file name with no path separators or dot runs."""
    name = _UNSAFE_CHARS.sub("_", name or "")
    name = _REPEATED_DOTS.sub(".", name)
    return name.strip(".")[:MAX_FILE_NAME_LENGTH]


def build_storage_path(application_id: str, field_id: str, file_name: str, now: Optional[datetime] = None) -> str:
    millis = int((now or utcnow()).timestamp() * 1000)
    return f"applications/{application_id}/{field_id}/{millis}_{file_name}"


class UploadRateLimiter:
    """Sliding-window upload counter per user."""

    def __init__(self, max_uploads: int = 10, window_seconds: float = 60.0, clock: Callable[[], float] = time.monotonic):
        self.max_uploads = max_uploads
        self.window_seconds = window_seconds
        self._clock = clock
        self._uploads: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    def can_upload(self, user_id: str) -> bool:
        """Record an upload for ``user_id`` unless the window is already full."""
        with self._lock:
            now = self._clock()
            recent = [t for t in self._uploads.get(user_id, []) if now - t < self.window_seconds]
            if len(recent) >= self.max_uploads:
                self._uploads[user_id] = recent
                return False
            recent.append(now)
            self._uploads[user_id] = recent
            return True


class AttachmentService:
    def __init__(
        self,
        backend: BackendClient,
        rate_limiter: UploadRateLimiter,
        bucket: str = "application-files",
        max_size_mb: int = 50,
    ):
        self._backend = backend
        self._rate_limiter = rate_limiter
        self._bucket = bucket
        self._max_size_mb = max_size_mb

    @property
    def max_bytes(self) -> int:
        return self._max_size_mb * 1024 * 1024

    def validate(self, content_type: Optional[str], size: int) -> None:
        if content_type not in ALLOWED_TYPES:
            raise UploadRejectedError(f"Unsupported file type: {content_type or 'unknown'}")
        if size > self.max_bytes:
            raise UploadRejectedError(f"File too large. Max {self._max_size_mb} MB.")

    def upload(
        self,
        user_id: str,
        application_id: str,
        field_id: str,
        file_name: str,
        content_type: Optional[str],
        data: bytes,
        now: Optional[datetime] = None,
    ) -> AttachmentInfo:
        if not self._rate_limiter.can_upload(user_id):
            raise UploadRejectedError("Too many uploads. Please wait before trying again.")
        self.validate(content_type, len(data))

        safe_name = sanitize_file_name(file_name)
        now = now or utcnow()
        path = build_storage_path(application_id, field_id, safe_name, now)
        try:
            self._backend.upload_object(
                self._bucket, path, data, content_type, upsert=False, cache_control=CACHE_CONTROL_SECONDS
            )
        except BackendRPCError as e:
            raise UploadRejectedError(f"Upload failed: {e.message}") from e

        logger.info(f"Stored attachment {path} ({len(data)} bytes) for user {user_id}")
        return AttachmentInfo(
            fileName=safe_name,
            filePath=path,
            fileSize=len(data),
            contentType=content_type,
            uploadedAt=now.isoformat().replace("+00:00", "Z"),
            uploadedBy=user_id,
        )

    def signed_url(self, path: str, expires_in: int = 3600) -> str:
        return self._backend.create_signed_url(self._bucket, path, expires_in)
