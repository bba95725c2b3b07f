import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rule:
    """A CSS query plus what to read from the matched node (text, or an attribute)."""

    query: str
    attr: Optional[str] = None

    def read(self, node) -> str:
        if self.attr is None:
            return node.get_text(" ", strip=True)
        value = node.get(self.attr)
        if isinstance(value, list):  # multi-valued attributes such as class
            value = " ".join(value)
        return (value or "").strip()


def resolve(page, rules: Sequence[Rule], fallback: Any = None) -> Any:
    """
    Walk a selector ladder and return the first non-empty value.

    `page` is anything with a BeautifulSoup-style `select_one`. A rule that
    raises (bad query, odd node) counts as a miss; the ladder moves on.
    """
    for rule in rules:
        try:
            node = page.select_one(rule.query)
            if node is None:
                continue
            value = rule.read(node)
        except Exception as exc:
            logger.debug("Rule %r raised %s: %s", rule, type(exc).__name__, exc)
            continue
        if value:
            return value
        logger.debug("Rule %r matched an empty node", rule)
    return fallback


def resolve_all(page, rules: Sequence[Rule], fallback: Sequence[str] = ()) -> List[str]:
    """List variant of `resolve`: the first rule whose matches give any non-empty text wins."""
    for rule in rules:
        try:
            values = [rule.read(node) for node in page.select(rule.query)]
        except Exception as exc:
            logger.debug("Rule %r raised %s: %s", rule, type(exc).__name__, exc)
            continue
        values = [v for v in values if v]
        if values:
            return values
    return list(fallback)
