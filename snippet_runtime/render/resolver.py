"""Snippet resolver: one resource in, one assembled fragment out.

The resolver and ValueFormatter recurse into each other for resource-valued
properties. The `visited` set is passed explicitly through both; a resource
is expanded at most once per top-level render, so cycles end in a plain
link instead of re-entering the resolver.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from rdflib import BNode, URIRef

from ..graph import GraphAccessor
from ..rules import RuleRegistry, RuleSet
from .classifier import Classification, classify
from .markup import element, escape, is_linkable
from .value_formatter import ValueFormatter

if TYPE_CHECKING:
    from ..logging import RenderEventLogger

logger = logging.getLogger(__name__)


class SnippetResolver:
    """Renders resources of one graph against one registry.

    Create one per render call; `matched` collects the identifiers of the
    rule sets used, in order of first use.

    Example:
        resolver = SnippetResolver(accessor, registry)
        html = resolver.render(album, set())
        print(resolver.matched)  # ['schema:MusicAlbum', 'schema:MusicRecording']
    """

    def __init__(
        self,
        accessor: GraphAccessor,
        registry: RuleRegistry,
        trace: Optional["RenderEventLogger"] = None,
    ):
        self.accessor = accessor
        self.registry = registry
        self.trace = trace
        self.formatter = ValueFormatter(accessor, self, trace)
        self.matched: list[str] = []

    def resolve(self, resource) -> Optional[RuleSet]:
        """Rule set for the resource's declared types, recording its use."""
        rule = self.registry.resolve(self.accessor.types_of(resource))
        if rule is not None:
            if rule.identifier not in self.matched:
                self.matched.append(rule.identifier)
            if self.trace is not None:
                self.trace.log_rule_matched(resource, rule)
        return rule

    def _typeof(self, resource) -> Optional[str]:
        types = self.accessor.types_of(resource)
        return " ".join(self.accessor.curie(t) for t in types) or None

    def render(self, resource, visited: set) -> Optional[str]:
        """Full snippet for a top-level resource.

        Resources without a rule set (or whose roles are all empty) get a
        fallback reference. None only for an empty blank node.
        """
        visited.add(resource)
        rule = self.resolve(resource)
        if rule is not None:
            fragment = self.assemble(resource, rule, classify(self.accessor, resource, rule), visited)
            if fragment is not None:
                return fragment
        return self.fallback(resource)

    def render_nested(self, resource, visited: set) -> Optional[str]:
        """Rendering of a referenced resource inside another snippet.

        None when the resource is already being rendered or has no rule set;
        the formatter then shows it as an image or link. A rule's
        nested_props give a compact inline form, otherwise the full snippet
        is nested.
        """
        if resource in visited:
            if self.trace is not None:
                self.trace.log_cycle(resource)
            return None
        rule = self.resolve(resource)
        if rule is None:
            return None
        visited.add(resource)

        roles = classify(self.accessor, resource, rule)
        parts = []
        for entry in roles.nested:
            fragment = self.formatter.format_multi(entry.prop, entry.values, rule, visited)
            if fragment is not None:
                parts.append(fragment)
        if parts:
            return element(
                "span",
                " ".join(parts),
                class_="snippet-nested",
                resource=self.accessor.curie(resource),
                typeof=self._typeof(resource),
            )
        return self.assemble(resource, rule, roles, visited)

    def assemble(self, resource, rule: RuleSet, roles: Classification, visited: set) -> Optional[str]:
        """Photo, title, body entries, description; absent roles omitted."""
        if roles.is_empty():
            logger.debug("Rule %s matched %s but no role has a value", rule.identifier, resource)
            return None

        fmt = self.formatter
        parts = []

        if roles.photo is not None:
            photo = fmt.format_single(roles.photo.prop, roles.photo.first, rule, visited)
            if photo is not None:
                parts.append(element("div", photo, class_="snippet-photo"))

        if roles.title is not None:
            title = fmt.format_single(roles.title.prop, roles.title.first, rule, visited)
            if title is not None:
                parts.append(element("div", title, class_="snippet-title"))

        entries = []
        for entry in roles.body:
            fragment = fmt.format_multi(entry.prop, entry.values, rule, visited)
            if fragment is None:
                continue
            label = rule.body_labels.get(str(entry.prop))
            entries.append(element("div", f"{escape(label)}: {fragment}" if label else fragment))
        if entries:
            parts.append(element("div", "".join(entries), class_="snippet-body"))

        if roles.description is not None:
            description = fmt.format_single(roles.description.prop, roles.description.first, rule, visited)
            if description is not None:
                parts.append(element("div", description, class_="snippet-description"))

        if not parts:
            return None
        return element(
            "div",
            "".join(parts),
            class_="snippet",
            resource=self.accessor.curie(resource),
            typeof=self._typeof(resource),
        )

    def fallback(self, resource) -> Optional[str]:
        """Reference-only rendering for a resource without usable rules."""
        if self.trace is not None:
            self.trace.log_fallback(resource)
        typeof = self._typeof(resource)
        label = self.accessor.curie(resource)
        if isinstance(resource, URIRef):
            if is_linkable(resource):
                return element("a", escape(label), href=str(resource), typeof=typeof)
            return element("span", escape(label), resource=label, typeof=typeof)
        if isinstance(resource, BNode) and (typeof or self.accessor.has_statements(resource)):
            return element("span", escape(typeof or label), resource=label, typeof=typeof)
        return None
