"""Error classification for the calboard API.

Route handlers raise domain errors; `classify_error` turns any exception into
a tagged result (validation, not_found, internal) and the transport maps the
tag to a status code. Internal errors are logged in full and reach the client
only as a generic message.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


class NotFoundError(Exception):
    """A referenced resource does not exist."""


class ValidationFailure(Exception):
    """A request is well-formed JSON but semantically invalid."""


class ErrorKind(str, Enum):
    """Client-facing error categories."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
}


@dataclass(frozen=True)
class ClassifiedError:
    """Tagged error result, independent of the web framework."""
    kind: ErrorKind
    message: str

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


def _validation_message(errors) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request"


def classify_error(exc: Exception) -> ClassifiedError:
    """Classify an exception into a client-safe tagged error."""
    if isinstance(exc, NotFoundError):
        return ClassifiedError(ErrorKind.NOT_FOUND, str(exc) or "Not found")
    if isinstance(exc, ValidationFailure):
        return ClassifiedError(ErrorKind.VALIDATION, str(exc) or "Invalid request")
    if isinstance(exc, (RequestValidationError, ValidationError)):
        return ClassifiedError(ErrorKind.VALIDATION, _validation_message(exc.errors()))
    return ClassifiedError(ErrorKind.INTERNAL, INTERNAL_ERROR_MESSAGE)


def error_response(classified: ClassifiedError) -> JSONResponse:
    return JSONResponse(status_code=classified.status_code, content={"error": classified.message})


async def _handle_domain_error(request: Request, exc: Exception) -> JSONResponse:
    classified = classify_error(exc)
    if classified.kind == ErrorKind.INTERNAL:
        logger.error(f"Unhandled error in {request.method} {request.url.path}", exc_info=exc)
    else:
        logger.debug(f"{request.method} {request.url.path} -> {classified.status_code}: {classified.message}")
    return error_response(classified)


async def _handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Framework errors (unknown route, wrong method) use the same envelope
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def register_error_handlers(app: FastAPI) -> None:
    """Install the error envelope on an app."""
    app.add_exception_handler(NotFoundError, _handle_domain_error)
    app.add_exception_handler(ValidationFailure, _handle_domain_error)
    app.add_exception_handler(RequestValidationError, _handle_domain_error)
    app.add_exception_handler(ValidationError, _handle_domain_error)
    app.add_exception_handler(StarletteHTTPException, _handle_http_error)
    app.add_exception_handler(Exception, _handle_domain_error)
