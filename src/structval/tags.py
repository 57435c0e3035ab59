"""Declaration grammar, parser and parse cache.

Grammar:
    declaration := item ("," item)*
    item        := name | name "=" param

A comma inside a param is written as ``\\,``. A comma preceded by an odd
number of backslashes is literal; an even number (including zero) makes it a
separator.

Names resolve against the rule registry first and the alias table second.
Aliases splice their already-resolved tag sequence in place.
"""

import logging
import threading
from typing import TYPE_CHECKING, Callable

from structval.types import Tag, TagSyntaxError, UnknownTagError

if TYPE_CHECKING:
    from structval.registry import RuleRegistry

logger = logging.getLogger(__name__)


def split_unescaped_comma(declaration: str) -> list[str]:
    """Split on commas that are not escaped by an odd run of backslashes."""
    pieces: list[str] = []
    start = 0
    backslashes = 0
    for i, char in enumerate(declaration):
        if char == "\\":
            backslashes += 1
            continue
        if char == "," and backslashes % 2 == 0:
            pieces.append(declaration[start:i])
            start = i + 1
        backslashes = 0
    pieces.append(declaration[start:])
    return pieces


def parse_declaration(declaration: str, registry: "RuleRegistry") -> tuple[Tag, ...]:
    """Parse a declaration into its ordered, alias-expanded tag sequence.

    Args:
        declaration: Raw declaration string, e.g. ``"required,gte=3"``
        registry: Rules and aliases to resolve names against

    Returns:
        Tuple of resolved Tags in declaration order

    Raises:
        TagSyntaxError: If an item has an empty name
        UnknownTagError: If a name is neither a rule nor an alias
    """
    tags: list[Tag] = []
    for piece in split_unescaped_comma(declaration):
        name, sep, param = piece.partition("=")
        name = name.strip(" ")
        if not name:
            raise TagSyntaxError(declaration)
        param = param.strip(" ").replace("\\,", ",") if sep else ""

        rule = registry.get_rule(name)
        if rule is not None:
            tags.append(Tag(name=name, rule=rule, param=param))
            continue

        alias = registry.get_alias(name)
        if alias is None:
            raise UnknownTagError(name)
        tags.extend(alias)

    return tuple(tags)


class TagCache:
    """Thread-safe memo of parsed declarations, keyed by the raw string.

    Declarations come from field definitions, a small static set, so the
    cache is never evicted. The first result stored for a key is the one
    every caller sees.
    """

    def __init__(self) -> None:
        self._entries: dict[str, tuple[Tag, ...]] = {}
        self._lock = threading.Lock()

    def get_or_parse(
        self,
        declaration: str,
        parse: Callable[[str], tuple[Tag, ...]],
    ) -> tuple[Tag, ...]:
        cached = self._entries.get(declaration)
        if cached is not None:
            return cached

        tags = parse(declaration)
        logger.debug("Parsed declaration %r into %d tag(s)", declaration, len(tags))
        with self._lock:
            return self._entries.setdefault(declaration, tags)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, declaration: object) -> bool:
        return declaration in self._entries
