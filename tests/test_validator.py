"""Tests for the recursive validator."""

from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from uuid import UUID

import pytest
from pydantic import BaseModel, Field

from structval import (
    FieldError,
    FieldErrors,
    UnknownTagError,
    UnsupportedTypeError,
    UsageError,
    Validator,
    ValidatorConfig,
    declare,
    default_validator,
    validate,
    validate_field,
)


# =============================================================================
# Records
# =============================================================================


@dataclass
class Inner:
    a: str = declare("required")


@dataclass
class Middle:
    a: str = declare("required")
    inner: Inner = field(default_factory=Inner)


@dataclass
class Outer:
    a: str = declare("required")
    middle: Middle = field(default_factory=Middle)
    c: int = declare("gte=1", default=0)
    d: list = declare("required", default_factory=list)


@dataclass
class Team:
    members: list = field(default_factory=list)
    by_name: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Code:
    value: str = declare("required")


@dataclass
class Lookup:
    by_code: dict = field(default_factory=dict)


@dataclass
class Batch:
    items: list = declare("lte=1", default_factory=list)


@dataclass
class WithSkipped:
    name: str = declare("required", default="ok")
    secret: Inner = declare("-", default_factory=Inner)
    _private: str = declare("required")


class Signup(BaseModel):
    username: str = Field("", json_schema_extra={"validate": "required,username"})
    email: str = Field("", json_schema_extra={"validate": "email"})
    age: int = Field(0, json_schema_extra={"validate": "optional,gte=18"})


class Payload:
    """A record describing its own fields."""

    def __init__(self, code, tags):
        self.code = code
        self.tags = tags

    def __validation_fields__(self):
        yield "code", self.code, "required,az_"
        yield "_hidden", "", "required"
        yield "tags", self.tags, "lte=2"


@pytest.fixture
def full_path_validator():
    return Validator(ValidatorConfig(full_error_path=True))


# =============================================================================
# Required
# =============================================================================


class TestRequired:
    @pytest.mark.parametrize(
        "value",
        ["", 0, 0.0, False, [], {}, (), None],
    )
    def test_zero_values_fail(self, value):
        err = validate_field(value, "Name", "required")
        assert err == FieldError("Name", "Name is required")

    @pytest.mark.parametrize(
        "value",
        [
            "x",
            1,
            -1,
            0.5,
            True,
            [0],
            {"k": None},
            date(2020, 1, 1),
            Inner(),
            UUID(int=0),
            Path("."),
        ],
    )
    def test_present_values_pass(self, value):
        assert validate_field(value, "Name", "required") is None

    def test_optional_stops_chain_silently(self):
        assert validate_field("", "Name", "optional,gte=3") is None
        assert validate_field(None, "Name", "optional,gte=3") is None

    def test_optional_continues_when_present(self):
        err = validate_field("ab", "Name", "optional,gte=3")
        assert err.description == "Name must be at least 3 characters long"

    def test_first_failure_wins(self):
        err = validate_field("", "Name", "required,gte=3")
        assert err.description == "Name is required"


# =============================================================================
# Records
# =============================================================================


class TestRecords:
    def test_valid_record_returns_none(self):
        record = Outer(
            a="x",
            middle=Middle(a="y", inner=Inner(a="z")),
            c=1,
            d=[1],
        )
        assert validate(record) is None

    def test_nested_failures_use_bare_names_by_default(self):
        errs = validate(Outer())
        assert isinstance(errs, FieldErrors)
        assert errs.fields == ["a", "a", "a", "c", "d"]
        assert str(errs) == "fields are invalid: a, a, a, c, d"

    def test_nested_failures_with_full_path(self, full_path_validator):
        errs = full_path_validator.validate(Outer())
        assert errs.fields == ["a", "middle.a", "middle.inner.a", "c", "d"]
        assert errs[2].description == "a is required"

    def test_single_failure_message(self):
        errs = validate(Inner())
        assert len(errs) == 1
        assert str(errs) == "field is invalid: a"

    def test_skip_declaration_disables_recursion(self):
        assert validate(WithSkipped()) is None

    def test_private_fields_are_ignored(self):
        record = WithSkipped(name="")
        errs = validate(record)
        assert errs.fields == ["name"]

    def test_pydantic_model(self):
        errs = validate(Signup(username="te", email="bad"))
        assert errs.to_list() == [
            {"field": "username", "description": "username must be at least 4 characters long"},
            {"field": "email", "description": "email is not a valid email"},
        ]

    def test_pydantic_model_valid(self):
        signup = Signup(username="tester", email="tester@example.com", age=21)
        assert validate(signup) is None

    def test_validation_fields_protocol(self):
        errs = validate(Payload("Bad", ["a", "b", "c"]))
        assert errs.to_list() == [
            {"field": "code", "description": "code must contain a-z, _ and not start with a _"},
            {"field": "tags", "description": "tags may not contain more than 2 elements"},
        ]


# =============================================================================
# Collections
# =============================================================================


class TestCollections:
    def test_sequence_elements_are_validated(self, full_path_validator):
        team = Team(members=[Inner(a="x"), Inner()])
        errs = full_path_validator.validate(team)
        assert errs.fields == ["members[1].a"]

    def test_sequence_default_mode_keeps_bare_name(self):
        team = Team(members=[Inner(), Inner()])
        assert validate(team).fields == ["a", "a"]

    def test_mapping_values_are_validated(self, full_path_validator):
        team = Team(by_name={"x": Inner(), "y": Inner(a="ok")})
        errs = full_path_validator.validate(team)
        assert errs.fields == ["by_name[x](value).a"]

    def test_mapping_keys_are_validated(self, full_path_validator):
        lookup = Lookup(by_code={Code(): 1, Code(value="ok"): 2})
        errs = full_path_validator.validate(lookup)
        assert errs.fields == ["by_code[Code(value='')](key).value"]
        assert errs[0].description == "value is required"

    def test_declared_collection_is_checked_then_walked(self):
        errs = validate(Batch(items=[Inner(), Inner()]))
        assert errs.fields == ["items", "a", "a"]
        assert errs[0].description == "items may not contain more than 1 elements"
        assert errs[1].description == "a is required"

    def test_declared_collection_with_full_path(self, full_path_validator):
        errs = full_path_validator.validate(Batch(items=[Inner(), Inner()]))
        assert errs.fields == ["items", "items[0].a", "items[1].a"]

    def test_top_level_sequence(self, full_path_validator):
        errs = full_path_validator.validate([Inner(a="ok"), Inner()])
        assert errs.fields == ["[1].a"]

    def test_top_level_mapping(self):
        assert validate({"first": Inner()}).fields == ["a"]

    def test_nested_sequences(self, full_path_validator):
        errs = full_path_validator.validate(Team(members=[[Inner()]]))
        assert errs.fields == ["members[0][0].a"]

    def test_empty_collections_are_valid(self):
        assert validate([]) is None
        assert validate({}) is None


# =============================================================================
# Usage Errors
# =============================================================================


class TestUsageErrors:
    def test_none_is_valid(self):
        assert validate(None) is None

    @pytest.mark.parametrize("value", [42, "text", 1.5, True])
    def test_scalar_raises(self, value):
        with pytest.raises(UsageError, match="expected a record"):
            validate(value)

    def test_unknown_tag_raises(self):
        with pytest.raises(UnknownTagError, match="unknown validate tag 'nosuchrule'"):
            validate_field("x", "f", "nosuchrule")

    def test_unknown_tag_in_record_raises(self):
        @dataclass
        class Broken:
            x: str = declare("required,nosuchrule")

        with pytest.raises(UnknownTagError):
            validate(Broken(x="value"))

    def test_unsupported_kind_raises(self):
        with pytest.raises(UnsupportedTypeError, match="invalid type for gte tag"):
            validate_field(None, "n", "gte=1")

    def test_skip_declaration_for_single_value(self):
        assert validate_field("", "f", "-") is None


# =============================================================================
# Custom Rules
# =============================================================================


class TestCustomRules:
    def test_register_rule(self):
        validator = Validator()
        validator.register_rule(
            "even",
            lambda value, _: value % 2 == 0,
            lambda field, value, tag: f"{field} must be even",
        )
        assert validator.validate_field(4, "n", "even") is None
        assert validator.validate_field(3, "n", "even").description == "n must be even"

    def test_registration_invalidates_cache(self):
        validator = Validator()
        with pytest.raises(UnknownTagError):
            validator.parse_tags("even")

        validator.register_rule("even", lambda value, _: value % 2 == 0)
        assert validator.parse_tags("even")[0].name == "even"

    def test_overwriting_rule_replaces_cached_chain(self):
        validator = Validator()
        validator.parse_tags("gte=1")
        replacement = validator.register_rule("gte", lambda value, param: True)
        assert validator.parse_tags("gte=1")[0].rule is replacement

    def test_rule_without_formatter_stops_silently(self):
        validator = Validator()
        validator.register_rule("never", lambda value, _: False)
        assert validator.validate_field("x", "f", "never,required") is None

    def test_validators_do_not_share_rules(self):
        validator = Validator()
        validator.register_rule("only_here", lambda value, _: True)
        assert validator.registry.is_registered("only_here")
        assert not default_validator.registry.is_registered("only_here")
