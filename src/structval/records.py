"""Value shapes understood by the traverser.

Every value is classified into a closed set of kinds. Records expose their
fields as ``(name, value, declaration)`` tuples through one of three
mechanisms:

- dataclasses, with the declaration in field metadata under ``"validate"``
- pydantic models, with the declaration in ``json_schema_extra["validate"]``
- any object implementing ``__validation_fields__()``

Usage:
    @dataclass
    class User:
        name: str = declare("required,gte=3")
        email: str = declare("email")
        internal: str = declare("-", default="")
"""

import dataclasses
from collections.abc import Mapping
from datetime import date
from decimal import Decimal
from enum import Enum
from numbers import Integral, Real
from typing import Any, Iterator, Protocol

from pydantic import BaseModel

# Key under which a field's declaration is stored.
TAG_KEY = "validate"

# Declaration that disables every check for a field, including recursion.
SKIP = "-"


class Kind(Enum):
    """The kinds of values the engine knows how to check."""

    ABSENT = "absent"
    TEXT = "text"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    RECORD = "record"
    DATE = "date"
    OTHER = "other"


class Validatable(Protocol):
    """Protocol for records that describe their own fields."""

    def __validation_fields__(self) -> Iterator[tuple[str, Any, str]]:
        """Yield (field name, value, declaration) in declaration order."""
        ...


def is_record(value: Any) -> bool:
    """Check if a value is a record instance (not a record class)."""
    if isinstance(value, type):
        return False
    return (
        isinstance(value, BaseModel)
        or hasattr(value, "__validation_fields__")
        or dataclasses.is_dataclass(value)
    )


def kind_of(value: Any) -> Kind:
    """Classify a value. Order matters: bool is an int, str is a sequence."""
    if value is None:
        return Kind.ABSENT
    if isinstance(value, str):
        return Kind.TEXT
    if isinstance(value, bool):
        return Kind.BOOLEAN
    if isinstance(value, Integral):
        return Kind.INTEGER
    if isinstance(value, (Real, Decimal)):
        return Kind.FLOAT
    if isinstance(value, date):
        return Kind.DATE
    if is_record(value):
        return Kind.RECORD
    if isinstance(value, Mapping):
        return Kind.MAPPING
    if isinstance(value, (list, tuple, set, frozenset, bytes, bytearray)):
        return Kind.SEQUENCE
    return Kind.OTHER


def declare(declaration: str, **kwargs: Any) -> Any:
    """Declare a dataclass field with a validation declaration.

    Shorthand for ``dataclasses.field(metadata={"validate": declaration})``.
    A ``default`` of ``""`` is used unless ``default`` or ``default_factory``
    is given, so tagged fields can follow untagged ones with defaults.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[TAG_KEY] = declaration
    if "default" not in kwargs and "default_factory" not in kwargs:
        kwargs["default"] = ""
    return dataclasses.field(metadata=metadata, **kwargs)


def _pydantic_declaration(field_info: Any) -> str:
    extra = field_info.json_schema_extra
    if isinstance(extra, dict):
        return str(extra.get(TAG_KEY, ""))
    return ""


def record_fields(record: Any) -> Iterator[tuple[str, Any, str]]:
    """Yield (name, value, declaration) for every public field of a record.

    Fields whose name starts with an underscore are private and skipped.

    Raises:
        TypeError: If the value is not a record
    """
    if hasattr(record, "__validation_fields__"):
        items: Iterator[tuple[str, Any, str]] = iter(record.__validation_fields__())
    elif isinstance(record, BaseModel):
        items = (
            (name, getattr(record, name), _pydantic_declaration(info))
            for name, info in type(record).model_fields.items()
        )
    elif dataclasses.is_dataclass(record) and not isinstance(record, type):
        items = (
            (f.name, getattr(record, f.name), str(f.metadata.get(TAG_KEY, "")))
            for f in dataclasses.fields(record)
        )
    else:
        raise TypeError(f"{type(record).__name__} is not a record")

    for name, value, declaration in items:
        if name.startswith("_"):
            continue
        yield name, value, declaration
