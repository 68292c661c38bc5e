"""Contact API exceptions and the FastAPI handlers that render them."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger("phonebook")

GENERIC_ERROR_MESSAGE = "Something broke!"


# ----------------------------
# Custom Exceptions
# ----------------------------

class ContactError(Exception):
    """Base class for errors the contacts API translates into a response."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ContactValidationError(ContactError):
    """Raised by the validation pipeline; carries every failing field."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, errors: list[dict[str, Any]]):
        self.errors = errors
        super().__init__(", ".join(e["msg"] for e in errors))


class ConstraintError(ContactError):
    """A write rejected by the persistence layer (field rule, duplicate phone number)."""
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, fields: dict[str, str] | None = None):
        self.fields = fields or {}
        super().__init__(message)


class NotFoundError(ContactError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Contact not found"):
        super().__init__(message)


class StorageError(ContactError):
    """Connectivity loss or an unexpected database failure."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# ----------------------------
# Exception Handlers
# ----------------------------

async def validation_error_handler(request: Request, exc: ContactValidationError):
    logger.info(
        "contact_validation_failed",
        extra={"path": request.url.path, "fields": [e["path"] for e in exc.errors]},
    )
    return JSONResponse(status_code=exc.status_code, content={"errors": exc.errors})


async def contact_error_handler(request: Request, exc: ContactError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def unhandled_error_handler(request: Request, exc: Exception):
    # the server re-logs the traceback once the exception is re-raised
    logger.error(
        "unhandled_error",
        extra={
            "method": request.method,
            "path": request.url.path,
            "error_type": type(exc).__name__,
            "error": str(exc),
        },
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": GENERIC_ERROR_MESSAGE},
    )


# ----------------------------
# Registration Function
# ----------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app"""
    app.add_exception_handler(ContactValidationError, validation_error_handler)
    app.add_exception_handler(ContactError, contact_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
