"""HTTP translation of validation results for FastAPI applications.

FieldError / FieldErrors become a 422 response carrying one field violation
per failure, in order:

    {
        "code": "INVALID_ARGUMENT",
        "message": "fields are invalid: Name, Email",
        "fieldViolations": [
            {"field": "Name", "description": "Name is required"},
            {"field": "Email", "description": "Email is not a valid email"}
        ]
    }

Anything else is an internal failure (500).

Usage:
    app = FastAPI()
    register_exception_handlers(app)

    @app.post("/users")
    async def create_user(user: UserIn):
        errs = validate(user)
        if errs:
            raise errs
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from structval.types import FieldError, FieldErrors, UsageError

logger = logging.getLogger(__name__)

INVALID_ARGUMENT = "INVALID_ARGUMENT"
INTERNAL = "INTERNAL"

INTERNAL_ERROR_MESSAGE = "something went wrong, please try again later"


def field_violations(err: FieldError | FieldErrors) -> list[dict[str, str]]:
    """Return one {"field", "description"} entry per failure, in order."""
    if isinstance(err, FieldErrors):
        return err.to_list()
    return [err.to_dict()]


def _internal_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"code": INTERNAL, "message": message},
    )


def validation_error_response(err: BaseException | None) -> JSONResponse | None:
    """Translate a validation outcome into an HTTP response.

    Args:
        err: The result of validate/validate_field, or any other error

    Returns:
        None when there is nothing to report (None or an empty FieldErrors),
        a 422 response for FieldError/FieldErrors, a 500 response otherwise
    """
    if err is None:
        return None

    if not isinstance(err, (FieldError, FieldErrors)):
        logger.error("Unexpected error type in validation result: %r", err)
        return _internal_response(f"unexpected error type: {err}")

    if isinstance(err, FieldErrors) and len(err) == 0:
        return None

    content: dict[str, Any] = {
        "code": INVALID_ARGUMENT,
        "message": str(err),
        "fieldViolations": field_violations(err),
    }
    return JSONResponse(status_code=422, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers mapping raised validation errors to responses.

    - FieldError / FieldErrors: 422 with field violations
    - UsageError: 500 with a generic message; the details are logged only
    """

    async def _field_errors_handler(request: Request, exc: Exception) -> JSONResponse:
        response = validation_error_response(exc)
        if response is None:
            # An empty FieldErrors was raised; nothing was actually invalid
            logger.error("Empty FieldErrors raised on %s %s", request.method, request.url.path)
            return _internal_response(INTERNAL_ERROR_MESSAGE)
        return response

    async def _usage_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Validation usage error on %s %s: %s",
            request.method,
            request.url.path,
            exc,
        )
        return _internal_response(INTERNAL_ERROR_MESSAGE)

    app.add_exception_handler(FieldError, _field_errors_handler)
    app.add_exception_handler(FieldErrors, _field_errors_handler)
    app.add_exception_handler(UsageError, _usage_error_handler)
