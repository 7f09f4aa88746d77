"""Domain errors and their FastAPI exception handlers.

Services raise these without touching HTTP; the handlers below render every
one of them as ``{"msg": ...}`` with the matching status code.

    UserAPIError
    ├── ValidationError   400  bad or missing input
    ├── ConflictError     400  duplicate email, reused password
    ├── AuthError         401  wrong or missing credentials
    ├── NotFoundError     404
    └── ServerError       500  collaborator failure, cause logged only
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("user_accounts")

SERVER_ERROR_MSG = "Server error"


class UserAPIError(Exception):
    """Base class for errors shown to API clients."""

    status_code = 400

    def __init__(self, msg: str) -> None:
        self.msg = msg
        super().__init__(msg)


class ValidationError(UserAPIError):
    status_code = 400


class ConflictError(UserAPIError):
    status_code = 400


class AuthError(UserAPIError):
    status_code = 401


class NotFoundError(UserAPIError):
    status_code = 404


class ServerError(UserAPIError):
    """Wraps an unexpected collaborator failure. The cause is logged, never returned."""

    status_code = 500

    def __init__(self, cause: BaseException | None = None) -> None:
        self.cause = cause
        super().__init__(SERVER_ERROR_MSG)


def _format_validation_errors(exc: RequestValidationError) -> list[dict]:
    """Flatten pydantic errors to field-level descriptors."""
    errors = []
    for error in exc.errors():
        loc = error.get("loc", ())
        errors.append(
            {
                "msg": error.get("msg", "Invalid value"),
                "param": ".".join(str(part) for part in loc[1:]) if len(loc) > 1 else "",
                "location": str(loc[0]) if loc else "body",
            }
        )
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the domain, validation and catch-all handlers to the app."""

    @app.exception_handler(UserAPIError)
    async def user_api_error_handler(request: Request, exc: UserAPIError) -> JSONResponse:
        if isinstance(exc, ServerError):
            logger.error(
                "Server error on %s %s",
                request.method,
                request.url.path,
                exc_info=(type(exc.cause), exc.cause, exc.cause.__traceback__) if exc.cause else None,
            )
        return JSONResponse(status_code=exc.status_code, content={"msg": exc.msg})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"errors": _format_validation_errors(exc)})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"msg": SERVER_ERROR_MSG})
