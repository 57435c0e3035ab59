"""Tests for the declaration parser, parse cache and rule registry."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from structval import (
    STANDARD_ALIASES,
    Rule,
    RuleRegistry,
    Tag,
    TagSyntaxError,
    UnknownTagError,
    Validator,
    parse_tags,
)
from structval.tags import TagCache, parse_declaration, split_unescaped_comma


def names(tags):
    return [tag.name for tag in tags]


def params(tags):
    return [tag.param for tag in tags]


@pytest.fixture
def validator():
    return Validator()


@pytest.fixture
def registry():
    registry = RuleRegistry()
    registry.register_rule("required", lambda value, _: bool(value))
    registry.register_rule("oneof", lambda value, param: value in param.split(","))
    return registry


# =============================================================================
# Splitting
# =============================================================================


class TestSplit:
    @pytest.mark.parametrize(
        "declaration,expected",
        [
            ("a,b", ["a", "b"]),
            ("a", ["a"]),
            ("", [""]),
            ("a,,b", ["a", "", "b"]),
            ("oneof=x\\,y,b", ["oneof=x\\,y", "b"]),
            ("a\\\\,b", ["a\\\\", "b"]),
            ("a\\\\\\,b", ["a\\\\\\,b"]),
        ],
    )
    def test_split(self, declaration, expected):
        assert split_unescaped_comma(declaration) == expected


# =============================================================================
# Parsing
# =============================================================================


class TestParse:
    def test_names_and_params(self, registry):
        tags = parse_declaration("required,oneof=a", registry)
        assert names(tags) == ["required", "oneof"]
        assert params(tags) == ["", "a"]

    def test_spaces_are_trimmed(self, registry):
        tags = parse_declaration(" required , oneof = a ", registry)
        assert names(tags) == ["required", "oneof"]
        assert params(tags) == ["", "a"]

    def test_escaped_comma_in_param(self, registry):
        (tag,) = parse_declaration("oneof=a\\,b\\,c", registry)
        assert tag.param == "a,b,c"
        assert tag.rule.checker("b", tag.param)

    def test_param_splits_on_first_equals(self, registry):
        (tag,) = parse_declaration("oneof=a=b", registry)
        assert tag.param == "a=b"

    @pytest.mark.parametrize("declaration", ["", ",required", "required,", "required,,oneof", "=3"])
    def test_empty_name_raises(self, registry, declaration):
        with pytest.raises(TagSyntaxError, match="empty tag name"):
            parse_declaration(declaration, registry)

    def test_unknown_name_raises(self, registry):
        with pytest.raises(UnknownTagError) as exc:
            parse_declaration("required,nope=1", registry)
        assert exc.value.name == "nope"
        assert str(exc.value) == "unknown validate tag 'nope'"

    def test_tag_str(self, registry):
        tags = parse_declaration("required,oneof=a", registry)
        assert [str(tag) for tag in tags] == ["required", "oneof=a"]

    def test_standard_declaration(self):
        tags = parse_tags("required,gte=3,lte=10")
        assert names(tags) == ["required", "gte", "lte"]
        assert params(tags) == ["", "3", "10"]


# =============================================================================
# Aliases
# =============================================================================


class TestAliases:
    def test_alias_is_spliced_in_place(self):
        tags = parse_tags("required,username")
        assert names(tags) == ["required", "aZ09_", "gte", "lte"]
        assert params(tags) == ["", "", "4", "20"]

    def test_alias_may_reference_earlier_alias(self, validator):
        validator.register_alias("handle", "username,optional")
        assert names(validator.parse_tags("handle")) == ["aZ09_", "gte", "lte", "optional"]

    def test_unknown_name_in_alias_fails_fast(self, validator):
        with pytest.raises(UnknownTagError):
            validator.register_alias("broken", "required,nope")
        assert not validator.registry.is_registered("broken")

    def test_alias_is_resolved_at_registration(self, validator):
        previous = validator.registry.get_rule("lte")
        validator.register_alias("short", "lte=3")
        validator.register_rule("lte", lambda value, param: True)

        (tag,) = validator.parse_tags("short")
        assert tag.rule is previous

    def test_rules_take_precedence_over_aliases(self, validator):
        validator.register_alias("gte", "required")
        (tag,) = validator.parse_tags("gte=1")
        assert tag.rule is validator.registry.get_rule("gte")
        assert tag.param == "1"

    def test_registering_alias_clears_cache(self, validator):
        with pytest.raises(UnknownTagError):
            validator.parse_tags("nickname")
        validator.register_alias("nickname", "aZ09_,lte=12")
        assert names(validator.parse_tags("nickname")) == ["aZ09_", "lte"]

    def test_custom_alias_validates(self, validator):
        validator.register_alias("handle", "aZ09_,gte=2,lte=15")
        err = validator.validate_field("a", "Handle", "required,handle")
        assert err.description == "Handle must be at least 2 characters long"


# =============================================================================
# Cache
# =============================================================================


class TestTagCache:
    def test_parses_once(self):
        cache = TagCache()
        calls = []

        def parse(declaration):
            calls.append(declaration)
            return ()

        first = cache.get_or_parse("required", parse)
        second = cache.get_or_parse("required", parse)
        assert first is second
        assert calls == ["required"]
        assert "required" in cache
        assert len(cache) == 1

    def test_clear(self):
        cache = TagCache()
        cache.get_or_parse("required", lambda d: ())
        cache.clear()
        assert len(cache) == 0

    def test_failed_parse_is_not_cached(self, validator):
        with pytest.raises(UnknownTagError):
            validator.parse_tags("nope")
        assert "nope" not in validator._cache

    def test_validator_caches_parsed_declaration(self, validator):
        first = validator.parse_tags("required,username")
        assert validator.parse_tags("required,username") is first

    def test_concurrent_callers_see_one_result(self, validator):
        declaration = "required,gte=1,lte=5"
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: validator.parse_tags(declaration), range(64)))
        assert all(result is results[0] for result in results)


# =============================================================================
# Registry
# =============================================================================


class TestRuleRegistry:
    def test_register_and_get(self):
        registry = RuleRegistry()
        rule = registry.register_rule("even", lambda value, _: value % 2 == 0)
        assert isinstance(rule, Rule)
        assert registry.get_rule("even") is rule
        assert registry.get_rule("odd") is None

    def test_register_overwrites(self):
        registry = RuleRegistry()
        registry.register(Rule("even", lambda value, _: True))
        replacement = Rule("even", lambda value, _: False)
        registry.register(replacement)
        assert registry.get_rule("even") is replacement

    def test_register_alias_returns_tags(self, registry):
        tags = registry.register_alias("must", "required")
        assert isinstance(tags[0], Tag)
        assert registry.get_alias("must") == tags

    def test_is_registered(self, registry):
        registry.register_alias("must", "required")
        assert registry.is_registered("required")
        assert registry.is_registered("must")
        assert not registry.is_registered("other")

    def test_list_rules_sorted(self, registry):
        assert registry.list_rules() == ["oneof", "required"]

    def test_list_aliases(self, validator):
        aliases = validator.registry.list_aliases()
        assert list(aliases) == sorted(STANDARD_ALIASES)
        assert [str(t) for t in aliases["username"]] == ["aZ09_", "gte=4", "lte=20"]

    def test_clear(self, registry):
        registry.register_alias("must", "required")
        registry.clear()
        assert registry.list_rules() == []
        assert registry.list_aliases() == {}
