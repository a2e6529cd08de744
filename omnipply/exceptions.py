from typing import Any, Optional


class BackendException(Exception):
    """Base exception for failures talking to the hosted backend."""


class BackendConnectionError(BackendException):
    """Backend could not be reached."""


class BackendTimeoutError(BackendException):
    """Backend did not answer in time."""


class BackendRPCError(BackendException):
    """Backend answered with an error payload."""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        status: Optional[int] = None,
        details: Any = None,
        hint: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.details = details
        self.hint = hint


class OperationFailedError(BackendException):
    """A backend operation completed without the expected result."""


class NotFoundError(BackendException):
    """Requested row does not exist or is not visible to the caller."""


class AuthenticationError(BackendException):
    """Caller has no valid session."""


class UploadRejectedError(Exception):
    """Attachment failed type, size or rate checks."""


class NotificationDeliveryError(Exception):
    """Email for a notification could not be delivered."""


def is_backend_updating_error(error: Any) -> bool:
    """True when the backend is reloading its schema cache."""
    return getattr(error, "code", None) == "PGRST302" or getattr(error, "status", None) == 404
