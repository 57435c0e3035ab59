"""Rule registry for structval.

Provides registration and lookup for:
- Rules (named checkers with their failure descriptions)
- Aliases (names expanding to a fixed, already-resolved tag sequence)

Each Validator owns its own registry; nothing here is process-global.
"""

import logging

from structval.tags import parse_declaration
from structval.types import Rule, RuleChecker, RuleErrorFunc, Tag

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Registry of rules and aliases.

    Aliases are expanded eagerly: registering an alias parses its declaration
    against the rules and aliases known at that moment, so an alias may only
    reference names registered before it.

    Example:
        registry = RuleRegistry()
        registry.register_rule("even", lambda v, _: v % 2 == 0,
                               lambda f, v, t: f"{f} must be even")
        registry.register_alias("small_even", "even,lte=10")
    """

    def __init__(self) -> None:
        self._rules: dict[str, Rule] = {}
        self._aliases: dict[str, tuple[Tag, ...]] = {}

    def register(self, rule: Rule) -> None:
        """Register a rule, replacing any rule with the same name."""
        if rule.name in self._rules:
            logger.debug("Overwriting rule %r", rule.name)
        self._rules[rule.name] = rule

    def register_rule(
        self,
        name: str,
        checker: RuleChecker,
        formatter: RuleErrorFunc | None = None,
    ) -> Rule:
        """Build and register a rule from its parts.

        Args:
            name: Declaration keyword
            checker: Predicate called with (value, param)
            formatter: Failure description builder; None stops the chain silently

        Returns:
            The registered Rule
        """
        rule = Rule(name=name, checker=checker, formatter=formatter)
        self.register(rule)
        return rule

    def register_alias(self, name: str, declaration: str) -> tuple[Tag, ...]:
        """Register an alias, replacing any alias with the same name.

        Args:
            name: Alias keyword
            declaration: Declaration the alias expands to

        Returns:
            The resolved tag sequence stored for the alias

        Raises:
            UnknownTagError: If the declaration references an unknown name
            TagSyntaxError: If the declaration is malformed
        """
        tags = parse_declaration(declaration, self)
        self._aliases[name] = tags
        logger.debug("Registered alias %r -> %s", name, ",".join(str(t) for t in tags))
        return tags

    def get_rule(self, name: str) -> Rule | None:
        return self._rules.get(name)

    def get_alias(self, name: str) -> tuple[Tag, ...] | None:
        return self._aliases.get(name)

    def is_registered(self, name: str) -> bool:
        """Check if a name resolves to a rule or an alias."""
        return name in self._rules or name in self._aliases

    def list_rules(self) -> list[str]:
        """List all registered rule names."""
        return sorted(self._rules)

    def list_aliases(self) -> dict[str, tuple[Tag, ...]]:
        """List all aliases with their resolved expansions."""
        return dict(sorted(self._aliases.items()))

    def clear(self) -> None:
        """Clear all registrations. Primarily for testing."""
        self._rules.clear()
        self._aliases.clear()
