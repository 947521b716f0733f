"""Observability for snippet rendering.

Provides a JSONL event logger for rule matches, fallbacks and formatter
failures. Library modules log through the standard `logging` module.
"""

from .render_trace import RenderEventLogger, read_events

__all__ = [
    "RenderEventLogger",
    "read_events",
]
