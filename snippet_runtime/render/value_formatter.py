"""Render property values to markup fragments.

Dispatch for a single value, first match wins:

1. property override strategy named by the rule set
2. reference whose nested snippet renders to something
3. media property -> image
4. structured literal (rdf:XMLLiteral / rdf:HTML) -> raw markup
5. plain literal -> escaped span with lang/datatype
6. reference -> link
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from rdflib import BNode, Literal, URIRef

from ..graph import GraphAccessor, is_reference
from ..rules import RuleSet
from .markup import element, escape, is_blank_markup, is_blank_value, is_linkable, is_structured
from .strategies import FORMATTERS, FormatContext, format_image

if TYPE_CHECKING:
    from ..logging import RenderEventLogger
    from .resolver import SnippetResolver

logger = logging.getLogger(__name__)


class ValueFormatter:
    """Formats property values for one graph, recursing through a resolver."""

    def __init__(
        self,
        accessor: GraphAccessor,
        resolver: "SnippetResolver",
        trace: Optional["RenderEventLogger"] = None,
    ):
        self.accessor = accessor
        self.resolver = resolver
        self.trace = trace

    def _override(self, prop: URIRef, value, rule: RuleSet) -> Optional[str]:
        name = rule.override_for(prop)
        if name is None:
            return None
        try:
            return FORMATTERS[name](FormatContext(self.accessor, prop), value)
        except Exception as e:
            logger.warning(
                "Formatter %r failed for %s value %r: %s", name, prop, str(value), e
            )
            if self.trace is not None:
                self.trace.log_override_failed(prop, name, value, e)
            return None

    def literal(self, prop: URIRef, value: Literal) -> str:
        """Literal as a typed span; structured literals pass through unescaped."""
        datatype = self.accessor.curie(value.datatype) if value.datatype else None
        if is_structured(value):
            return element(
                "div", str(value), property=self.accessor.curie(prop), lang=value.language, datatype=datatype
            )
        return element(
            "span", escape(value), property=self.accessor.curie(prop), lang=value.language, datatype=datatype
        )

    def link(self, prop: URIRef, value) -> str:
        """Bare reference to another resource; only http(s) and relative URIs get an href."""
        label = escape(self.accessor.curie(value))
        if isinstance(value, BNode) or not is_linkable(value):
            return element("span", label, rel=self.accessor.curie(prop), resource=self.accessor.curie(value))
        return element("a", label, rel=self.accessor.curie(prop), href=str(value))

    def format_single(self, prop, value, rule: RuleSet, visited: set) -> Optional[str]:
        """Render one value; None when there is nothing to show."""
        prop = URIRef(prop)
        if is_blank_value(value):
            return None

        fragment = self._override(prop, value, rule)
        if not is_blank_markup(fragment):
            return fragment

        if is_reference(value):
            fragment = self.resolver.render_nested(value, visited)
            if not is_blank_markup(fragment):
                return fragment

        if rule.is_media(prop) and not isinstance(value, BNode):
            fragment = format_image(FormatContext(self.accessor, prop), value)
            if not is_blank_markup(fragment):
                return fragment

        if isinstance(value, Literal):
            return self.literal(prop, value)
        return self.link(prop, value)

    def format_multi(self, prop, values, rule: RuleSet, visited: set) -> Optional[str]:
        """Render a value list under the rule's multi-value policy for `prop`."""
        prop = URIRef(prop)
        values = tuple(v for v in values if not is_blank_value(v))
        if not values:
            return None

        policy = rule.policy_for(prop)
        rendered = []
        for value in policy.select(values):
            fragment = self.format_single(prop, value, rule, visited)
            if fragment is not None:
                rendered.append(fragment)
        if not rendered:
            return None

        if policy.mode == "list":
            items = "".join(element("li", r, class_=policy.item_class) for r in rendered)
            return element("ol", items, class_=policy.list_class)
        return policy.separator.join(rendered)
