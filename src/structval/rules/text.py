"""Text format rules.

Pattern rules (az_, aZ09_, name, email, resourcename, resourcepattern)
accept a string or a list of strings; every element must match. Empty
strings pass. The remaining rules (zoneinfo, locale, url) accept a single
string.
"""

import re
import unicodedata
from typing import Any, Callable
from urllib.parse import urlsplit
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import langcodes

from structval.records import Kind, kind_of
from structval.types import Tag, UnsupportedTypeError


# =============================================================================
# Patterns
# =============================================================================

AZ_PATTERN = re.compile(r"[a-z][a-z_]*")

AZ09_PATTERN = re.compile(r"[a-zA-Z0-9][a-zA-Z0-9_]*")

# \w also admits numerics such as "²", so is_name checks letter categories too
NAME_PATTERN = re.compile(
    r"(?:[^\W\d_]|[,.'-])(?:[^\W\d_]|[ ,.'-])*(?:[^\W\d_]|[,.'-])"
)

NAME_PUNCTUATION = " ,.'-"

RESOURCE_NAME_PATTERN = re.compile(r"mtx:[a-z0-9\-/]+(?::[a-z0-9\-/]+)*")

RESOURCE_PATTERN_PATTERN = re.compile(r"mtx:[a-z0-9\-*/]+(?::[a-z0-9\-*/]+)*")

# Email: RFC 5322 dot-atom or quoted local part, internationalized domain
_UCS = "\u00a0-\ud7ff\uf900-\ufdcf\ufdf0-\uffef"
_ATEXT = "[a-zA-Z0-9!#$%&'*+\\-/=?^_`{|}~" + _UCS + "]"
_FWS = r"(?:(?:[\x20\x09]*\x0d\x0a)?[\x20\x09]+)"
_QTEXT = r"[\x01-\x08\x0b\x0c\x0e-\x1f\x7f\x21\x23-\x5b\x5d-\x7e" + _UCS + "]"
_QPAIR = r"\\[\x01-\x09\x0b\x0c\x0d-\x7f" + _UCS + "]"
_LABEL_END = "[a-zA-Z0-9" + _UCS + "]"
_LABEL_MID = "[a-zA-Z0-9\\-.~" + _UCS + "]"
_TLD_END = "[a-zA-Z" + _UCS + "]"

EMAIL_PATTERN = re.compile(
    "(?:"
    + f"{_ATEXT}+(?:\\.{_ATEXT}+)*"
    + f"|\\x22(?:{_FWS}?(?:{_QTEXT}|{_QPAIR}))*{_FWS}?\\x22"
    + ")@"
    + f"(?:(?:{_LABEL_END}|{_LABEL_END}{_LABEL_MID}*{_LABEL_END})\\.)+"
    + f"(?:{_TLD_END}|{_TLD_END}{_LABEL_MID}*{_TLD_END})\\.?"
)

def is_name(text: str) -> bool:
    """Check a personal name: unicode letters and -,.' with inner spaces."""
    if NAME_PATTERN.fullmatch(text) is None:
        return False
    return all(
        char in NAME_PUNCTUATION or unicodedata.category(char).startswith("L")
        for char in text
    )


def match_pattern(tag_name: str, matches: Callable[[str], Any], value: Any) -> bool:
    """Check a string, or every string in a sequence, with a matcher.

    Args:
        tag_name: Rule name reported on unsupported values
        matches: Called with the text; a truthy result means it matches
            (e.g. a compiled pattern's ``fullmatch``)
        value: Text, a sequence of text, or None

    Raises:
        UnsupportedTypeError: For values that are neither text nor a sequence of text
    """
    kind = kind_of(value)
    if kind == Kind.ABSENT:
        return True
    if kind == Kind.TEXT:
        return value == "" or bool(matches(value))
    if kind == Kind.SEQUENCE and not isinstance(value, (bytes, bytearray)):
        return all(match_pattern(tag_name, matches, item) for item in value)
    raise UnsupportedTypeError(tag_name, value)


def _text(tag_name: str, value: Any) -> str:
    kind = kind_of(value)
    if kind == Kind.ABSENT:
        return ""
    if kind != Kind.TEXT:
        raise UnsupportedTypeError(tag_name, value)
    return value


# =============================================================================
# Identifiers and Names
# =============================================================================


def az(value: Any, _param: str = "") -> bool:
    return match_pattern("az_", AZ_PATTERN.fullmatch, value)


def az_err(field: str, _value: Any, _tag: Tag) -> str:
    return f"{field} must contain a-z, _ and not start with a _"


def az09(value: Any, _param: str = "") -> bool:
    return match_pattern("aZ09_", AZ09_PATTERN.fullmatch, value)


def az09_err(field: str, _value: Any, _tag: Tag) -> str:
    return f"{field} must contain 0-9, A-Z, _ and not start with a _"


def name(value: Any, _param: str = "") -> bool:
    return match_pattern("name", is_name, value)


def name_err(field: str, _value: Any, _tag: Tag) -> str:
    return f"{field} must contain unicode letters -,.' and not start or end with a space"


def resource_name(value: Any, _param: str = "") -> bool:
    return match_pattern("resourcename", RESOURCE_NAME_PATTERN.fullmatch, value)


def resource_name_err(field: str, _value: Any, _tag: Tag) -> str:
    return f"{field} must start with 'mtx:' and may contain: a-z, 0-9, -, /, and :"


def resource_pattern(value: Any, _param: str = "") -> bool:
    return match_pattern("resourcepattern", RESOURCE_PATTERN_PATTERN.fullmatch, value)


def resource_pattern_err(field: str, _value: Any, _tag: Tag) -> str:
    return f"{field} must start with 'mtx:' and may contain: a-z, 0-9, -, /, *, and :"


def email(value: Any, _param: str = "") -> bool:
    return match_pattern("email", EMAIL_PATTERN.fullmatch, value)


def email_err(field: str, _value: Any, _tag: Tag) -> str:
    return f"{field} is not a valid email"


# =============================================================================
# Zoneinfo, Locale, URL
# =============================================================================


def zoneinfo(value: Any, _param: str = "") -> bool:
    """Check the value is empty or a key in the IANA time zone database."""
    key = _text("zoneinfo", value)
    if key == "":
        return True
    try:
        ZoneInfo(key)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return False
    return True


def zoneinfo_err(field: str, _value: Any, _tag: Tag) -> str:
    return f"{field} is not a valid zoneinfo string (example: 'Europe/Amsterdam')"


def locale(value: Any, _param: str = "") -> bool:
    """Check the value is empty or space-separated BCP 47 language tags.

    Each tag must be well formed and use registered subtags; "_" is
    accepted as a separator.
    """
    text = _text("locale", value)
    if text == "":
        return True
    return all(
        tag != "" and langcodes.tag_is_valid(tag.replace("_", "-"))
        for tag in text.split(" ")
    )


def locale_err(field: str, _value: Any, _tag: Tag) -> str:
    return f"{field} must contain BCP47 language tags separated by spaces"


def url(value: Any, _param: str = "") -> bool:
    """Check the value is empty or an absolute URI; any #fragment is ignored."""
    text = _text("url", value)
    if text == "":
        return True
    text = text.split("#", 1)[0]
    if text[:1].isspace() or any(ord(c) < 0x20 or ord(c) == 0x7F for c in text):
        return False
    try:
        parsed = urlsplit(text)
        parsed.port  # raises ValueError for a malformed port
    except ValueError:
        return False
    if not parsed.scheme:
        return False
    return not any(c.isspace() for c in parsed.netloc)


def url_err(field: str, _value: Any, _tag: Tag) -> str:
    return f"{field} is not a valid url"
