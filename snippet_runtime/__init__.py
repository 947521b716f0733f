"""Snippet Runtime - render structured-data graphs into HTML snippets.

Takes the RDF graph extracted from a page's microdata/RDFa/JSON-LD markup and
renders a compact summary of its primary entity.

Architecture:
- graph/: read-only ordered view over rdflib triples
- rules/: presentation rule sets, the immutable registry and its YAML loader
- render/: property classifier, value formatter, snippet resolver and driver
- logging/: JSONL render event log
"""

__version__ = "0.1.0"

from .graph import GraphAccessor
from .rules import ConfigurationError, RuleRegistry, RuleSet, load_registry
from .render import SnippetResult, render_graph

__all__ = [
    "GraphAccessor",
    "ConfigurationError",
    "RuleRegistry",
    "RuleSet",
    "load_registry",
    "SnippetResult",
    "render_graph",
]
