"""FastAPI integration for structval."""

from structval.api.errors import (
    field_violations,
    register_exception_handlers,
    validation_error_response,
)

__all__ = [
    "field_violations",
    "register_exception_handlers",
    "validation_error_response",
]
