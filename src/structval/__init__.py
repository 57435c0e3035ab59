"""structval: declaration-driven validation of records.

Fields declare their rules in a small tag grammar (``"required,gte=3"``);
the validator walks nested records, sequences and mappings and returns
every failing field in traversal order.

Usage:
    from dataclasses import dataclass
    from structval import declare, validate

    @dataclass
    class User:
        username: str = declare("required,username")
        email: str = declare("email")

    errs = validate(User(username="te"))
    if errs:
        print(errs)            # field is invalid: username
        print(errs[0].description)

Components:
- Types: FieldError, FieldErrors, Rule, Tag, UsageError and subclasses
- Registry: RuleRegistry (rules + eagerly expanded aliases)
- Tags: declaration parser and parse cache
- Validator: the recursive traverser, plus a default instance
- Result: ValidationResult and combine_fields for manual composition
"""

from structval.config import ValidatorConfig
from structval.records import SKIP, TAG_KEY, Kind, Validatable, declare, kind_of
from structval.registry import RuleRegistry
from structval.result import ValidationResult, combine_fields
from structval.rules import STANDARD_ALIASES, STANDARD_RULES
from structval.rules.dates import INVALID_TIME
from structval.types import (
    ConfigError,
    FieldError,
    FieldErrors,
    InvalidParamError,
    Rule,
    Tag,
    TagSyntaxError,
    UnknownTagError,
    UnsupportedTypeError,
    UsageError,
)
from structval.validator import (
    Validator,
    default_validator,
    parse_tags,
    validate,
    validate_field,
)

__all__ = [
    # Types
    "FieldError",
    "FieldErrors",
    "Kind",
    "Rule",
    "Tag",
    "Validatable",
    # Errors
    "ConfigError",
    "InvalidParamError",
    "TagSyntaxError",
    "UnknownTagError",
    "UnsupportedTypeError",
    "UsageError",
    # Declarations
    "SKIP",
    "TAG_KEY",
    "kind_of",
    "declare",
    # Registry and config
    "INVALID_TIME",
    "RuleRegistry",
    "STANDARD_ALIASES",
    "STANDARD_RULES",
    "ValidatorConfig",
    # Validation
    "ValidationResult",
    "Validator",
    "combine_fields",
    "default_validator",
    "parse_tags",
    "validate",
    "validate_field",
]
