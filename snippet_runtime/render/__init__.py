"""Snippet rendering: classifier, value formatter, resolver and driver."""

from .classifier import Classification, RoleEntry, classify
from .driver import SnippetResult, render_graph, select_roots
from .resolver import SnippetResolver
from .strategies import FORMATTERS, FormatContext
from .value_formatter import ValueFormatter

__all__ = [
    "Classification",
    "RoleEntry",
    "classify",
    "SnippetResult",
    "render_graph",
    "select_roots",
    "SnippetResolver",
    "FORMATTERS",
    "FormatContext",
    "ValueFormatter",
]
