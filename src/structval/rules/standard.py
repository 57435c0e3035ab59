"""Presence and bound rules.

- required: value must not be the zero/empty form of its kind
- optional: same check, but a failure stops the chain without an error
- gte/lte: inclusive bounds on text length, collection size or number
- gender: text from a fixed set
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from structval.records import Kind, kind_of
from structval.types import InvalidParamError, Tag, UnsupportedTypeError

VALID_GENDERS = ("male", "female", "genderqueer")

_SIZED_KINDS = (Kind.SEQUENCE, Kind.MAPPING)


# =============================================================================
# Parameter Parsing
# =============================================================================


def as_int(param: str) -> int:
    """Parse an integer parameter.

    Accepts 0x/0o/0b prefixes, and a bare leading zero means octal
    (``"010"`` is 8).
    """
    try:
        return int(param, 0)
    except ValueError:
        pass
    digits = param.lstrip("+-")
    if len(digits) > 1 and digits.startswith("0") and digits.isdigit():
        try:
            return int(param, 8)
        except ValueError:
            pass
    raise InvalidParamError(f"cannot cast {param!r} to int")


def as_float(param: str) -> float:
    try:
        return float(param)
    except ValueError:
        raise InvalidParamError(f"cannot cast {param!r} to float") from None


def as_decimal(param: str) -> Decimal:
    try:
        return Decimal(param)
    except InvalidOperation:
        raise InvalidParamError(f"cannot cast {param!r} to decimal") from None


def _measure(tag_name: str, value: Any, param: str) -> tuple[Any, Any]:
    """Return the (measured value, bound) pair compared by gte and lte."""
    kind = kind_of(value)
    if kind == Kind.TEXT or kind in _SIZED_KINDS:
        return len(value), as_int(param)
    if kind == Kind.INTEGER:
        return value, as_int(param)
    if kind == Kind.FLOAT:
        if isinstance(value, Decimal):
            return value, as_decimal(param)
        return value, as_float(param)
    raise UnsupportedTypeError(tag_name, value)


# =============================================================================
# Required / Optional
# =============================================================================


def required(value: Any, _param: str = "") -> bool:
    """Test whether a value differs from its kind's zero/empty form.

    Absent values, empty text and collections, numeric zero and False fail.
    Records, dates and any other object (a UUID, an enum member, a Path)
    have no empty form and are always present.
    """
    kind = kind_of(value)
    if kind == Kind.ABSENT:
        return False
    if kind == Kind.TEXT or kind in _SIZED_KINDS:
        return len(value) != 0
    if kind in (Kind.INTEGER, Kind.FLOAT):
        return value != 0
    if kind == Kind.BOOLEAN:
        return value
    return True


def required_err(field: str, _value: Any, _tag: Tag) -> str:
    return f"{field} is required"


def optional(value: Any, _param: str = "") -> bool:
    """Same as required; the rule has no formatter so a failure ends the chain quietly."""
    return required(value)


# =============================================================================
# Bounds
# =============================================================================


def gte(value: Any, param: str) -> bool:
    """Test value >= param: length for text, size for collections, value for numbers."""
    measured, bound = _measure("gte", value, param)
    return measured >= bound


def gte_err(field: str, value: Any, tag: Tag) -> str:
    kind = kind_of(value)
    if kind in _SIZED_KINDS:
        return f"{field} must contain at least {tag.param} elements"
    if kind == Kind.TEXT:
        return f"{field} must be at least {tag.param} characters long"
    return f"{field} must be at least {tag.param}"


def lte(value: Any, param: str) -> bool:
    """Test value <= param: length for text, size for collections, value for numbers."""
    measured, bound = _measure("lte", value, param)
    return measured <= bound


def lte_err(field: str, value: Any, tag: Tag) -> str:
    kind = kind_of(value)
    if kind in _SIZED_KINDS:
        return f"{field} may not contain more than {tag.param} elements"
    if kind == Kind.TEXT:
        return f"{field} must be at most {tag.param} characters long"
    return f"{field} maximum value is {tag.param}"


# =============================================================================
# Gender
# =============================================================================


def gender(value: Any, _param: str = "") -> bool:
    kind = kind_of(value)
    if kind == Kind.ABSENT:
        return True
    if kind != Kind.TEXT:
        raise UnsupportedTypeError("gender", value)
    return value == "" or value in VALID_GENDERS


def gender_err(field: str, _value: Any, _tag: Tag) -> str:
    return f"{field} must be either {', '.join(VALID_GENDERS)}"
