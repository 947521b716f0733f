"""Top-level driver: pick the graph's root resources and render them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Optional, Union

from rdflib import Graph, URIRef

from ..graph import GraphAccessor
from ..rules import RuleRegistry
from .resolver import SnippetResolver

if TYPE_CHECKING:
    from ..logging import RenderEventLogger

logger = logging.getLogger(__name__)


@dataclass
class SnippetResult:
    """Rendered fragment plus the rule sets used to produce it."""

    fragment: str = ""
    matched_types: list[str] = field(default_factory=list)
    roots: list[str] = field(default_factory=list)
    statement_count: int = 0

    def __bool__(self):
        return bool(self.fragment)

    def to_dict(self) -> dict:
        """Response shape used by the linter service."""
        return {
            "snippet": self.fragment or None,
            "statistics": {
                "count": self.statement_count,
                "templates": list(self.matched_types),
            },
        }


def select_roots(accessor: GraphAccessor, registry: RuleRegistry) -> list:
    """Primary resources of a graph, in source order.

    Subjects nobody else references that have a matching rule set; failing
    that the first subject with a matching rule set; failing that the first
    subject.
    """
    subjects = accessor.subjects()
    if not subjects:
        return []

    matched = [s for s in subjects if registry.resolve(accessor.types_of(s)) is not None]
    top_level = [s for s in matched if not accessor.is_referenced(s)]
    if top_level:
        return top_level
    if matched:
        return matched[:1]
    return [subjects[0]]


def render_graph(
    graph: Union[Graph, GraphAccessor, None],
    registry: RuleRegistry,
    roots: Optional[Iterable] = None,
    trace: Optional["RenderEventLogger"] = None,
) -> SnippetResult:
    """Render the snippet for a parsed graph.

    Args:
        graph: rdflib Graph, prebuilt GraphAccessor, or None
        registry: Rule registry built at startup
        roots: Optional resources to render instead of the detected roots
        trace: Optional event logger

    Returns:
        SnippetResult; empty fragment and no matches for an empty graph
    """
    accessor = graph if isinstance(graph, GraphAccessor) else GraphAccessor.from_graph(graph)
    if not accessor:
        return SnippetResult()

    if roots is None:
        root_list = select_roots(accessor, registry)
    else:
        # Plain strings name URIs; rdflib terms pass through
        root_list = [URIRef(r) if type(r) is str else r for r in roots]
    logger.debug("Rendering %d root resource(s): %s", len(root_list), [str(r) for r in root_list])

    resolver = SnippetResolver(accessor, registry, trace)
    fragments = []
    for root in root_list:
        fragment = resolver.render(root, set())
        if fragment:
            fragments.append(fragment)

    result = SnippetResult(
        fragment="\n".join(fragments),
        matched_types=list(resolver.matched),
        roots=[accessor.curie(r) for r in root_list],
        statement_count=len(accessor),
    )
    if trace is not None:
        trace.log_render_complete(result)
    return result
