"""
Application-wide exception handlers.

Every error body carries `error` (human readable) and `code` (stable, for
clients to branch on). Route-level HTTPExceptions put the same pair in
`detail`.
"""
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request
from starlette.responses import JSONResponse

from skillharbor.features.auth.exceptions import AuthenticationFailure
from skillharbor.utils import get_logger


log = get_logger(__name__)


def field_errors(exc: RequestValidationError) -> dict[str, str]:
    """Flatten pydantic errors to {field: message}; the last path element names the field."""
    fields = {}
    for error in exc.errors():
        location = error.get("loc") or ()
        if not location or "msg" not in error:
            continue
        fields[str(location[-1])] = error["msg"]
    return fields


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = field_errors(exc)
    log.info(f"Rejected {request.method} {request.url.path}: {fields}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "code": "VALIDATION_ERROR", "fields": fields},
    )


async def authentication_failure_handler(_request: Request, exc: AuthenticationFailure) -> JSONResponse:
    return JSONResponse(status_code=401, content={"error": exc.message, "code": exc.code})


async def rate_limit_handler(request: Request, _exc: RateLimitExceeded) -> JSONResponse:
    log.warning(f"Rate limit hit on {request.url.path}")
    return JSONResponse(status_code=429, content={"error": "You are going too fast", "code": "RATE_LIMITED"})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(AuthenticationFailure, authentication_failure_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
