"""Global exception handlers — map form engine exceptions to HTTP status codes.

Routes stay on the happy path and let exceptions propagate:

  - ``FormError`` subclasses carry their own client-safe ``user_message``
    and map to a fixed status (404 / 410 / 422 / 502 / 409)
  - ``ValueError`` is mapped by keywords in its message (404 / 409 / 400)
  - ``KeyError`` means an unknown id (404)
  - anything else is a 500

Raw exception text is logged server-side and never returned.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from holoforms.errors import (
    FormClosed,
    FormError,
    FormNotFound,
    PersistenceFailed,
    StateLockedError,
    SubmissionInProgress,
    UploadFailed,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

# --- FormError subclasses and their HTTP status codes ---
# Checked in order; first isinstance match wins.
_FORM_ERROR_STATUS: list[tuple[type[FormError], int]] = [
    (FormNotFound, 404),
    (FormClosed, 410),
    (ValidationFailed, 422),
    (UploadFailed, 502),
    (PersistenceFailed, 502),
    (SubmissionInProgress, 409),
    (StateLockedError, 409),
]

# --- Keyword patterns in ValueError messages and their HTTP status codes ---
_VALUE_ERROR_PATTERNS: list[tuple[str, int]] = [
    ("already exists", 409),
    ("not found", 404),
]

_SAFE_MESSAGES: dict[int, str] = {
    404: "Resource not found",
    409: "Resource already exists",
    400: "Invalid request",
}


def form_error_status(exc: FormError) -> int:
    for cls, code in _FORM_ERROR_STATUS:
        if isinstance(exc, cls):
            return code
    return 400


async def form_error_handler(request: Request, exc: FormError) -> JSONResponse:
    """Return the error's ``user_message``; validation errors also list fields."""
    status = form_error_status(exc)
    logger.warning("%s [%d] at %s: %s", type(exc).__name__, status, request.url, exc)
    content: dict = {"detail": exc.user_message}
    if isinstance(exc, ValidationFailed):
        content["errors"] = exc.errors
    return JSONResponse(status_code=status, content=content)


async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Map ``ValueError`` to 404 / 409 / 400 by message keyword."""
    msg = str(exc)
    status = 400
    for pattern, code in _VALUE_ERROR_PATTERNS:
        if pattern in msg.lower():
            status = code
            break

    logger.warning("ValueError [%d] at %s: %s", status, request.url, msg)
    return JSONResponse(
        status_code=status,
        content={"detail": _SAFE_MESSAGES.get(status, "Invalid request")},
    )


async def key_error_handler(request: Request, exc: KeyError) -> JSONResponse:
    logger.warning("KeyError at %s: %s", request.url, exc)
    return JSONResponse(status_code=404, content={"detail": "Resource not found"})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions — log full traceback, return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
