"""Declaration-driven validation of records.

The Validator walks a value recursively:
- records: every public field with a declaration has its rule chain
  evaluated; a field declared ``-`` is skipped entirely
- any record, sequence or mapping found in a field is validated too,
  whether or not the field has a declaration
- sequences contribute ``field[i]`` paths, mappings ``field[key](key)`` and
  ``field[key](value)``

Usage:
    from structval import validate, validate_field

    errs = validate(user)              # FieldErrors or None
    err = validate_field("Jo", "Name", "required,gte=3")   # FieldError or None

Rule chains stop at the first failing rule, so a field contributes at most
one FieldError. Usage errors (unknown tags, unsupported value kinds) are
raised, never collected.
"""

import logging
from typing import Any

from structval.config import ValidatorConfig
from structval.records import SKIP, Kind, kind_of, record_fields
from structval.registry import RuleRegistry
from structval.tags import TagCache, parse_declaration
from structval.types import (
    FieldError,
    FieldErrors,
    Rule,
    RuleChecker,
    RuleErrorFunc,
    Tag,
    UsageError,
)

logger = logging.getLogger(__name__)


class Validator:
    """Validates records against their field declarations.

    Rules, aliases and the parse cache belong to the instance, so validators
    with different configurations never share state.

    Example:
        validator = Validator(ValidatorConfig(full_error_path=True))
        validator.register_alias("handle", "aZ09_,gte=2,lte=15")
        errs = validator.validate(account)
    """

    def __init__(self, config: ValidatorConfig | None = None):
        config = config or ValidatorConfig()
        self.full_error_path = config.full_error_path
        self.registry = RuleRegistry()
        self._cache = TagCache()

        for rule in config.rules.values():
            self.registry.register(rule)
        for alias, declaration in config.aliases.items():
            self.registry.register_alias(alias, declaration)

    # -------------------------------------------------------------------------
    # Registration
    # -------------------------------------------------------------------------

    def register(self, rule: Rule) -> None:
        """Register a rule, replacing any rule with the same name."""
        self.registry.register(rule)
        self._cache.clear()

    def register_rule(
        self,
        name: str,
        checker: RuleChecker,
        formatter: RuleErrorFunc | None = None,
    ) -> Rule:
        """Register a rule from its parts. See RuleRegistry.register_rule."""
        rule = self.registry.register_rule(name, checker, formatter)
        self._cache.clear()
        return rule

    def register_alias(self, name: str, declaration: str) -> tuple[Tag, ...]:
        """Register an alias. See RuleRegistry.register_alias."""
        tags = self.registry.register_alias(name, declaration)
        self._cache.clear()
        return tags

    def parse_tags(self, declaration: str) -> tuple[Tag, ...]:
        """Resolve a declaration to its tag sequence, using the parse cache.

        Raises:
            UnknownTagError: If a name is neither a rule nor an alias
            TagSyntaxError: If the declaration is malformed
        """
        return self._cache.get_or_parse(
            declaration,
            lambda d: parse_declaration(d, self.registry),
        )

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self, value: Any) -> FieldErrors | None:
        """Validate a record, or a sequence or mapping of records.

        Returns:
            FieldErrors in traversal order, or None if the value is valid

        Raises:
            UsageError: If the value is a scalar, or on any rule usage error
        """
        kind = kind_of(value)
        if kind == Kind.ABSENT:
            return None
        if kind not in (Kind.RECORD, Kind.SEQUENCE, Kind.MAPPING):
            raise UsageError(
                f"cannot validate {type(value).__name__}: expected a record, "
                "sequence or mapping"
            )

        errors = self._deep_validate(value, "")
        if not errors:
            return None
        logger.debug("%s failed validation on %d field(s)", type(value).__name__, len(errors))
        return FieldErrors(errors)

    def validate_field(self, value: Any, field: str, declaration: str) -> FieldError | None:
        """Validate a single value against a declaration.

        Args:
            value: The value to check
            field: Field name used in the failure
            declaration: Declaration string, e.g. ``"required,gte=3"``

        Returns:
            The first failure, or None if every rule passed
        """
        if declaration == SKIP:
            return None
        return self._check(value, field, self.parse_tags(declaration))

    def _check(self, value: Any, field: str, tags: tuple[Tag, ...]) -> FieldError | None:
        for tag in tags:
            if tag.rule.checker(value, tag.param):
                continue
            # Rules without a formatter (optional) end the chain without a failure
            if tag.rule.formatter is None:
                return None
            return FieldError(field, tag.rule.formatter(field, value, tag))
        return None

    def _validate_record(self, record: Any, path: str) -> list[FieldError]:
        errors: list[FieldError] = []
        for name, value, declaration in record_fields(record):
            if declaration == SKIP:
                continue
            if declaration:
                error = self._check(value, name, self.parse_tags(declaration))
                if error is not None:
                    errors.append(error)
            errors.extend(self._deep_validate(value, name))

        if path and self.full_error_path:
            return [error.with_prefix(path) for error in errors]
        return errors

    def _deep_validate(self, value: Any, path: str) -> list[FieldError]:
        """Validate a value found without a declaration of its own."""
        kind = kind_of(value)
        if kind == Kind.RECORD:
            return self._validate_record(value, path)

        errors: list[FieldError] = []
        if kind == Kind.SEQUENCE and not isinstance(value, (bytes, bytearray)):
            for i, item in enumerate(value):
                errors.extend(self._deep_validate(item, f"{path}[{i}]"))
        elif kind == Kind.MAPPING:
            for key, item in value.items():
                errors.extend(self._deep_validate(key, f"{path}[{key}](key)"))
                errors.extend(self._deep_validate(item, f"{path}[{key}](value)"))
        return errors


# =============================================================================
# Default Validator
# =============================================================================

default_validator = Validator()


def validate(value: Any) -> FieldErrors | None:
    """Validate a value with the default validator."""
    return default_validator.validate(value)


def validate_field(value: Any, field: str, declaration: str) -> FieldError | None:
    """Validate a single value with the default validator."""
    return default_validator.validate_field(value, field, declaration)


def parse_tags(declaration: str) -> tuple[Tag, ...]:
    """Parse a declaration with the default validator."""
    return default_validator.parse_tags(declaration)
