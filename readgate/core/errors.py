"""Domain errors for page gating.

Every error carries the HTTP status it is rendered with, so routes can let
them propagate and the app-level handler turns them into JSON responses.
"""
from typing import Optional
from fastapi import Request, status
from fastapi.responses import JSONResponse


class ReadGateError(Exception):
    """Base class for all page gating errors."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ReadGateError):
    status_code = status.HTTP_404_NOT_FOUND


class InvalidPageCountError(ReadGateError):
    status_code = status.HTTP_400_BAD_REQUEST


class InvalidTimeError(ReadGateError):
    status_code = 422


class OutOfRangeError(ReadGateError):
    status_code = status.HTTP_400_BAD_REQUEST


class SequenceViolationError(ReadGateError):
    status_code = status.HTTP_409_CONFLICT


class ThresholdNotMetError(ReadGateError):
    """Completion requested before the minimum dwell time."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str, remaining_seconds: int = 0):
        super().__init__(message)
        self.remaining_seconds = remaining_seconds


class MaximumExceededError(ReadGateError):
    """Completion requested after the maximum time ceiling.

    There is no recovery path: the page stays blocked.
    """

    status_code = status.HTTP_409_CONFLICT


class NetworkError(ReadGateError):
    """Transient transport failure talking to the progress API."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


ERRORS_BY_NAME = {
    cls.__name__: cls
    for cls in (
        NotFoundError,
        InvalidPageCountError,
        InvalidTimeError,
        OutOfRangeError,
        SequenceViolationError,
        ThresholdNotMetError,
        MaximumExceededError,
        NetworkError,
    )
}


def error_from_name(name: Optional[str], message: str) -> ReadGateError:
    """Rebuild a domain error from its rendered class name."""
    cls = ERRORS_BY_NAME.get(name or "", ReadGateError)
    return cls(message)


async def readgate_error_handler(request: Request, exc: ReadGateError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )
