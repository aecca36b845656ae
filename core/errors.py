"""
Error taxonomy for the class review backend.

Every error raised by the service layer derives from ClassReviewError so the
transport layer (exception handlers in main.py) can map it to a stable HTTP
status without inspecting messages.
"""
from __future__ import annotations

from typing import Any, Optional


class ClassReviewError(Exception):
    status_code: int = 500
    default_message: str = "An internal error occurred"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ClassReviewError):
    """Caller input is malformed. Recoverable by resubmitting."""

    status_code = 400
    default_message = "invalid input"


class MissingCourseReference(ValidationError):
    # Folded into the same message as an empty body
    default_message = "review content is required"


class EmptyBody(ValidationError):
    default_message = "review content is required"


class InvalidRating(ValidationError):
    default_message = "rating must be an integer between 1 and 5"


class Unauthenticated(ClassReviewError):
    status_code = 401
    default_message = "login required"


class PermissionDenied(ClassReviewError):
    status_code = 403
    default_message = "admin rights required"


class NotFound(ClassReviewError):
    status_code = 404
    default_message = "not found"


class ConfigurationError(ClassReviewError):
    status_code = 500
    default_message = "Server configuration error"


class UpstreamError(ClassReviewError):
    """The Supabase backend failed or could not be reached."""

    status_code = 500
    default_message = "upstream request failed"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        code: Optional[str] = None,
        status: Optional[int] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status = status
        self.details = details

    def to_dict(self) -> dict:
        return {"message": self.message, "code": self.code, "details": self.details}


class UpstreamFetchError(UpstreamError):
    default_message = "failed to fetch from upstream"


class UpstreamWriteError(UpstreamError):
    default_message = "failed to write to upstream"
