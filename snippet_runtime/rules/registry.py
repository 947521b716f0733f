"""Immutable registry of presentation rule sets.

Built once from an ordered list of rule sets and passed explicitly into each
render call. Resolution is a pure function of a resource's declared types.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional

from .model import RuleSet

logger = logging.getLogger(__name__)


class RuleRegistry:
    """Ordered, read-only mapping from match keys to rule sets.

    Later rule sets with the same match key (same kind and text) replace
    earlier ones but keep the earlier registration slot, which is the final
    tie-break between equal priorities.

    Example:
        registry = RuleRegistry([album_rules, ogp_rules])
        rule = registry.resolve(accessor.types_of(resource))
    """

    def __init__(self, rule_sets: Iterable[RuleSet] = ()):
        entries: dict = {}
        for rule in rule_sets:
            if not isinstance(rule, RuleSet):
                raise TypeError(f"Expected RuleSet, got {type(rule).__name__}")
            if rule.match_key in entries:
                logger.debug("Rule set %s replaces an earlier registration", rule.identifier)
            entries[rule.match_key] = rule

        self._rules = tuple(entries.values())
        self._order = {id(rule): i for i, rule in enumerate(self._rules)}
        self._exact = {
            text: rule for (kind, text), rule in entries.items() if kind == "exact"
        }
        self._patterns = tuple(
            rule for (kind, _), rule in entries.items() if kind == "pattern"
        )

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[RuleSet]:
        return iter(self._rules)

    def __repr__(self) -> str:
        return f"RuleRegistry({len(self._rules)} rule sets)"

    def get(self, match_key: tuple[str, str]) -> Optional[RuleSet]:
        """Look up a rule set by its (kind, text) match key."""
        for rule in self._rules:
            if rule.match_key == match_key:
                return rule
        return None

    def matching(self, types: Iterable) -> list[RuleSet]:
        """All rule sets matching any of the types, best first.

        Exact keys are checked before patterns for each type; the result is
        ordered by priority, then registration order.
        """
        found: dict = {}
        for type_id in types:
            exact = self._exact.get(str(type_id))
            if exact is not None:
                found[id(exact)] = exact
            for rule in self._patterns:
                if rule.matches(type_id):
                    found[id(rule)] = rule
        return sorted(found.values(), key=lambda r: (r.priority, self._order[id(r)]))

    def resolve(self, types: Iterable) -> Optional[RuleSet]:
        """Best rule set for a resource's declared types, or None."""
        candidates = self.matching(types)
        return candidates[0] if candidates else None
