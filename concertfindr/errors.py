"""Error codes for the concertfindr package."""

from enum import Enum


class ErrorCode(Enum):
    """Error codes."""

    VALIDATION_FAILED = "VALIDATION_FAILED"
    SESSION_TOKEN_MISSING = "SESSION_TOKEN_MISSING"
    UPSTREAM_FAILED = "UPSTREAM_FAILED"
    PLACE_RESOLUTION_FAILED = "PLACE_RESOLUTION_FAILED"


class ConcertFindrError(Exception):
    """Base error with code and user-safe message."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class ValidationError(ConcertFindrError):
    """Raised when user input is missing or invalid. No network call is made."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(code=ErrorCode.VALIDATION_FAILED, message=message)
        self.field = field


class MissingSessionTokenError(ConcertFindrError):
    """Raised when a call that needs a session token is made without one.

    This is a programming error in the caller, not something to show the user.
    """

    def __init__(self, operation: str) -> None:
        super().__init__(
            code=ErrorCode.SESSION_TOKEN_MISSING,
            message=f"No session token available for {operation}",
        )
        self.operation = operation


class UpstreamError(ConcertFindrError):
    """Raised when an upstream API fails or returns an unusable body."""

    def __init__(
        self,
        service: str,
        detail: str,
        status: int | None = None,
        code: ErrorCode = ErrorCode.UPSTREAM_FAILED,
    ) -> None:
        if status is not None:
            message = f"{service} error {status}: {detail}"
        else:
            message = f"{service} error: {detail}"
        super().__init__(code=code, message=message)
        self.service = service
        self.detail = detail
        self.status = status


class PlaceResolutionError(UpstreamError):
    """Raised when a place id cannot be turned into coordinates."""

    def __init__(self, place_id: str, detail: str, status: int | None = None) -> None:
        super().__init__(
            service="Mapbox Retrieve",
            detail=detail,
            status=status,
            code=ErrorCode.PLACE_RESOLUTION_FAILED,
        )
        self.place_id = place_id
