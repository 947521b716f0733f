"""Read-only graph access for snippet rendering."""

from .accessor import GraphAccessor, STANDARD_PREFIXES, is_reference

__all__ = [
    "GraphAccessor",
    "STANDARD_PREFIXES",
    "is_reference",
]
