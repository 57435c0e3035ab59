"""Core types for the structval validation engine.

This module defines the foundational types shared by every layer:
- Rules and parsed Tags (what to check)
- FieldError / FieldErrors (data-dependent validation failures)
- UsageError and subclasses (programmer or configuration defects)

Validation failures are returned to the caller. Usage errors are raised and
must never be folded into a FieldErrors result.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterator


# =============================================================================
# Usage Errors
# =============================================================================


class UsageError(Exception):
    """A programmer or configuration defect.

    Raised for unknown declaration names, malformed declarations, rules
    applied to unsupported value kinds and invalid rule parameters.
    """


class UnknownTagError(UsageError):
    """A declaration references a name that is neither a rule nor an alias."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown validate tag {name!r}")


class TagSyntaxError(UsageError):
    """A declaration string does not follow the tag grammar."""

    def __init__(self, declaration: str, message: str = "empty tag name"):
        self.declaration = declaration
        super().__init__(f"{message} in validate declaration {declaration!r}")


class UnsupportedTypeError(UsageError):
    """A rule was applied to a value kind it does not support."""

    def __init__(self, tag_name: str, value: Any = None):
        self.tag_name = tag_name
        self.value_type = type(value).__name__
        super().__init__(f"invalid type for {tag_name} tag")


class InvalidParamError(UsageError):
    """A rule parameter cannot be interpreted (e.g. ``gte=abc``)."""


class ConfigError(UsageError):
    """A validator configuration file is malformed."""

    def __init__(self, message: str, issues: list[str] | None = None):
        self.issues = issues or []
        if self.issues:
            message = message + ":\n  " + "\n  ".join(self.issues)
        super().__init__(message)


# =============================================================================
# Validation Failures
# =============================================================================


class FieldError(Exception):
    """A validation failure for a single field.

    Attributes:
        field: Field name, or dotted path when full error paths are enabled
        description: Human-readable description of the failure
    """

    def __init__(self, field: str, description: str):
        super().__init__(field, description)
        self.field = field
        self.description = description

    def __str__(self) -> str:
        return f"field is invalid: {self.field}"

    def __repr__(self) -> str:
        return f"FieldError(field={self.field!r}, description={self.description!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldError):
            return NotImplemented
        return (self.field, self.description) == (other.field, other.description)

    def __hash__(self) -> int:
        return hash((self.field, self.description))

    def with_prefix(self, prefix: str) -> "FieldError":
        """Return a copy whose field path is nested under ``prefix``."""
        return FieldError(f"{prefix}.{self.field}", self.description)

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "description": self.description}


class FieldErrors(Exception):
    """An ordered collection of field failures.

    Order follows traversal order: declared field order for records, index
    order for sequences and the mapping's own iteration order for mappings.
    A field may appear more than once when nested records share field names.
    """

    def __init__(self, errors: list[FieldError] | None = None):
        self.errors: list[FieldError] = list(errors or [])
        super().__init__(self.errors)

    def __str__(self) -> str:
        names = ", ".join(e.field for e in self.errors)
        if len(self.errors) == 1:
            return f"field is invalid: {names}"
        return f"fields are invalid: {names}"

    def __repr__(self) -> str:
        return f"FieldErrors({self.errors!r})"

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[FieldError]:
        return iter(self.errors)

    def __getitem__(self, index: int) -> FieldError:
        return self.errors[index]

    def __bool__(self) -> bool:
        return bool(self.errors)

    @property
    def fields(self) -> list[str]:
        return [e.field for e in self.errors]

    def to_list(self) -> list[dict[str, str]]:
        return [e.to_dict() for e in self.errors]


# =============================================================================
# Rules and Tags
# =============================================================================


# Returns True when the value passes. Receives the raw parameter string.
RuleChecker = Callable[[Any, str], bool]

# Produces the failure description for (field, value, tag).
RuleErrorFunc = Callable[[str, Any, "Tag"], str]


@dataclass(frozen=True)
class Rule:
    """A named checker plus the function that describes its failures.

    Attributes:
        name: Declaration keyword (e.g. "required", "gte")
        checker: Predicate called with (value, param)
        formatter: Builds the failure description. None means a failing
            check stops the rule chain silently (used by "optional").
    """

    name: str
    checker: RuleChecker
    formatter: RuleErrorFunc | None = None


@dataclass(frozen=True)
class Tag:
    """A single parsed unit of a declaration, bound to its resolved rule.

    Attributes:
        name: The rule name as written in the declaration
        rule: The resolved Rule
        param: Raw parameter string ("" when the declaration had no ``=``)
    """

    name: str
    rule: Rule
    param: str = ""

    def __str__(self) -> str:
        return f"{self.name}={self.param}" if self.param else self.name
