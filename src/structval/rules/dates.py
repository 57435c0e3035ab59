"""Calendar date rules.

- isodate: a whole date; text must be exactly YYYY-MM-DD
- mindate/maxdate: inclusive bounds, ``now`` meaning today's UTC date

Text, ``date`` and ``datetime`` values are accepted. Empty text and absent
values pass; combine with ``required`` to demand a value.
"""

import re
from datetime import date, datetime, time, timezone
from typing import Any

from structval.records import Kind, kind_of
from structval.types import InvalidParamError, Tag, UnsupportedTypeError

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")

# Set a datetime field to this value to mark input that failed to parse.
INVALID_TIME = datetime(1970, 1, 1, tzinfo=timezone.utc)

NOW = "now"


def parse_iso_date(text: str) -> date | None:
    """Parse strict YYYY-MM-DD text; None if it is not a valid date."""
    if not DATE_PATTERN.fullmatch(text):
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def resolve_bound(param: str) -> date:
    """Resolve a mindate/maxdate parameter to a date.

    Raises:
        InvalidParamError: If the parameter is neither ``now`` nor YYYY-MM-DD
    """
    if param == NOW:
        return today_utc()
    bound = parse_iso_date(param)
    if bound is None:
        raise InvalidParamError(f"cannot cast {param!r} to date (YYYY-MM-DD)")
    return bound


def is_invalid_time(value: datetime) -> bool:
    if value.tzinfo is None:
        return value == INVALID_TIME.replace(tzinfo=None)
    return value == INVALID_TIME


def _calendar_date(value: date) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def _to_date(tag_name: str, value: Any) -> date | bool:
    """Normalize a value for the bound rules.

    Returns True when the value is empty (passes), False when it is text
    that is not a date (fails), otherwise the calendar date to compare.
    """
    kind = kind_of(value)
    if kind == Kind.ABSENT:
        return True
    if kind == Kind.TEXT:
        if value == "":
            return True
        return parse_iso_date(value) or False
    if kind == Kind.DATE:
        return _calendar_date(value)
    raise UnsupportedTypeError(tag_name, value)


# =============================================================================
# ISO Date
# =============================================================================


def isodate(value: Any, _param: str = "") -> bool:
    kind = kind_of(value)
    if kind == Kind.ABSENT:
        return True
    if kind == Kind.TEXT:
        return value == "" or parse_iso_date(value) is not None
    if kind == Kind.DATE:
        if isinstance(value, datetime):
            return not is_invalid_time(value) and value.time() == time(0)
        return True
    raise UnsupportedTypeError("isodate", value)


def isodate_err(field: str, _value: Any, _tag: Tag) -> str:
    return f"{field} is not a valid date (YYYY-MM-DD)"


# =============================================================================
# Min / Max Date
# =============================================================================


def mindate(value: Any, param: str) -> bool:
    normalized = _to_date("mindate", value)
    if isinstance(normalized, bool):
        return normalized
    return normalized >= resolve_bound(param)


def mindate_err(field: str, _value: Any, tag: Tag) -> str:
    return f"{field} minimum date is {resolve_bound(tag.param).isoformat()}"


def maxdate(value: Any, param: str) -> bool:
    normalized = _to_date("maxdate", value)
    if isinstance(normalized, bool):
        return normalized
    return normalized <= resolve_bound(param)


def maxdate_err(field: str, _value: Any, tag: Tag) -> str:
    return f"{field} maximum date is {resolve_bound(tag.param).isoformat()}"
