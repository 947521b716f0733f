"""Bucket a resource's property values into snippet roles."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from rdflib import URIRef

from ..graph import GraphAccessor
from ..rules import RuleSet
from .markup import is_blank_value


@dataclass(frozen=True)
class RoleEntry:
    """One property filling a role, with its values in source order."""

    prop: URIRef
    values: tuple

    @property
    def first(self):
        return self.values[0]


@dataclass(frozen=True)
class Classification:
    """Role values for one resource under one rule set."""

    title: Optional[RoleEntry] = None
    photo: Optional[RoleEntry] = None
    description: Optional[RoleEntry] = None
    body: tuple[RoleEntry, ...] = field(default_factory=tuple)
    nested: tuple[RoleEntry, ...] = field(default_factory=tuple)

    def is_empty(self) -> bool:
        return not (self.title or self.photo or self.description or self.body)


def _entry(accessor: GraphAccessor, resource, prop: str) -> Optional[RoleEntry]:
    values = tuple(v for v in accessor.values_of(resource, prop) if not is_blank_value(v))
    return RoleEntry(URIRef(prop), values) if values else None


def _first_populated(accessor: GraphAccessor, resource, props) -> Optional[RoleEntry]:
    for prop in props:
        entry = _entry(accessor, resource, prop)
        if entry is not None:
            return entry
    return None


def _all_populated(accessor: GraphAccessor, resource, props) -> tuple[RoleEntry, ...]:
    entries = (_entry(accessor, resource, prop) for prop in props)
    return tuple(e for e in entries if e is not None)


def classify(accessor: GraphAccessor, resource, rule: RuleSet) -> Classification:
    """Fill title/photo/description (first populated property) and
    body/nested (every populated property, in the rule's order).

    A property listed under several roles is evaluated for each of them.
    """
    return Classification(
        title=_first_populated(accessor, resource, rule.title_props),
        photo=_first_populated(accessor, resource, rule.photo_props),
        description=_first_populated(accessor, resource, rule.description_props),
        body=_all_populated(accessor, resource, rule.body_props),
        nested=_all_populated(accessor, resource, rule.nested_props),
    )
