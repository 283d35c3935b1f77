"""Structured rejections for task mutations.

Every mutating operation either returns the accepted task or raises
``TaskRejectedError`` carrying a ``Rejection`` the caller can surface to the
end user. All rejection codes are recoverable: the caller decides whether to
retry with corrected input.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from src.core.config import constants


class ErrorSeverity(Enum):
    """Severity levels for rejections."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ErrorCode:
    """Error codes for rejected task mutations."""

    # Input errors
    INVALID_INPUT = "INVALID_INPUT"

    # Workflow gates
    WIP_LIMIT_EXCEEDED = "WIP_LIMIT_EXCEEDED"
    TIME_VALIDATION_REQUIRED = "TIME_VALIDATION_REQUIRED"
    TIME_VALIDATION_INVALID = "TIME_VALIDATION_INVALID"


_HTTP_STATUS_BY_CODE: dict[str, int] = {
    ErrorCode.INVALID_INPUT: constants.HTTP_UNPROCESSABLE,
    ErrorCode.TIME_VALIDATION_INVALID: constants.HTTP_UNPROCESSABLE,
    ErrorCode.WIP_LIMIT_EXCEEDED: constants.HTTP_CONFLICT,
    ErrorCode.TIME_VALIDATION_REQUIRED: constants.HTTP_CONFLICT,
}

_SEVERITY_BY_CODE: dict[str, ErrorSeverity] = {
    ErrorCode.INVALID_INPUT: ErrorSeverity.LOW,
    ErrorCode.TIME_VALIDATION_INVALID: ErrorSeverity.LOW,
    ErrorCode.TIME_VALIDATION_REQUIRED: ErrorSeverity.LOW,
    ErrorCode.WIP_LIMIT_EXCEEDED: ErrorSeverity.MEDIUM,
}


class Rejection(BaseModel):
    """Structured rejection returned to the caller instead of an accepted task."""

    code: str = Field(..., description="One of the ErrorCode values")
    message: str = Field(..., description="User-facing message")
    details: dict[str, Any] = Field(default_factory=dict, description="Machine-readable context")
    suggestion: str | None = Field(default=None, description="What the user can do to recover")

    @property
    def severity(self) -> ErrorSeverity:
        return _SEVERITY_BY_CODE.get(self.code, ErrorSeverity.MEDIUM)


class TaskRejectedError(Exception):
    """Raised when a task mutation is rejected by a validation gate."""

    def __init__(self, rejection: Rejection):
        super().__init__(rejection.message)
        self.rejection = rejection

    @property
    def code(self) -> str:
        return self.rejection.code


def reject(
    code: str,
    message: str,
    *,
    suggestion: str | None = None,
    **details: Any,
) -> TaskRejectedError:
    """Build a TaskRejectedError ready to be raised.

    Usage:
        raise reject(ErrorCode.INVALID_INPUT, "Day index out of range", day_index=12)
    """
    return TaskRejectedError(Rejection(code=code, message=message, details=details, suggestion=suggestion))


def http_status_for(code: str) -> int:
    """Map a rejection code to the HTTP status the interface layer responds with."""
    return _HTTP_STATUS_BY_CODE.get(code, constants.HTTP_BAD_REQUEST)
