"""Render event logging to JSONL.

Records which rule sets matched, fallbacks, cycle edges and formatter
failures for one or more render calls, for debugging rule catalogues.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from snippet_runtime.render import SnippetResult
    from snippet_runtime.rules import RuleSet


class RenderEventLogger:
    """Logger for snippet render events.

    Each event is written as one JSON line with:
    - event: rule_matched, fallback, cycle, override_failed, render_complete
    - timestamp: ISO 8601 timestamp
    - run_id: Run identifier
    - ... event-specific fields

    Example:
        with RenderEventLogger(Path("render.jsonl"), run_id="r-001") as trace:
            result = render_graph(graph, registry, trace=trace)
    """

    def __init__(self, log_path: Path | str, run_id: str):
        """Initialize render event logger.

        Args:
            log_path: Path to JSONL output file (appended to)
            run_id: Run identifier for provenance
        """
        self.log_path = Path(log_path)
        self.run_id = run_id
        self.event_count = 0

        # Ensure parent directory exists
        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self.log_file = open(self.log_path, "a", encoding="utf-8")

        self._write_event({"event": "session_start"})

    def _timestamp(self) -> str:
        """Get current timestamp in ISO 8601 format."""
        return datetime.now(timezone.utc).isoformat()

    def _write_event(self, event: dict[str, Any]) -> None:
        """Write event to JSONL log file.

        Args:
            event: Event dictionary to log
        """
        try:
            event.setdefault("timestamp", self._timestamp())
            event.setdefault("run_id", self.run_id)
            json.dump(event, self.log_file, ensure_ascii=False)
            self.log_file.write("\n")
            self.log_file.flush()
            self.event_count += 1
        except (OSError, ValueError, TypeError) as e:
            # Don't fail a render because of logging
            print(f"Warning: Failed to write render event: {e}")

    def log_rule_matched(self, resource, rule: "RuleSet") -> None:
        """Log a rule set chosen for a resource."""
        self._write_event({
            "event": "rule_matched",
            "resource": str(resource),
            "rule": rule.identifier,
            "priority": rule.priority,
        })

    def log_fallback(self, resource) -> None:
        """Log a resource rendered as a bare reference."""
        self._write_event({
            "event": "fallback",
            "resource": str(resource),
        })

    def log_cycle(self, resource) -> None:
        """Log a reference to a resource already being rendered."""
        self._write_event({
            "event": "cycle",
            "resource": str(resource),
        })

    def log_override_failed(self, prop, strategy: str, value, error: Exception) -> None:
        """Log a formatter strategy that raised; the value was rendered generically."""
        self._write_event({
            "event": "override_failed",
            "property": str(prop),
            "strategy": strategy,
            "value": str(value)[:200],
            "error": f"{type(error).__name__}: {error}",
        })

    def log_render_complete(self, result: "SnippetResult") -> None:
        """Log the outcome of one render_graph call."""
        self._write_event({
            "event": "render_complete",
            "roots": list(result.roots),
            "templates": list(result.matched_types),
            "statement_count": result.statement_count,
            "fragment_length": len(result.fragment),
        })

    def close(self) -> None:
        """Close log file."""
        log_file = getattr(self, "log_file", None)
        if log_file is not None and not log_file.closed:
            log_file.close()

    def __enter__(self) -> "RenderEventLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __del__(self):
        """Ensure log file is closed on deletion."""
        self.close()


def read_events(log_path: Path | str, event: Optional[str] = None) -> list[dict]:
    """Load events from a render log, optionally filtered by event type."""
    events = []
    with open(log_path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            record = json.loads(line)
            if event is None or record.get("event") == event:
                events.append(record)
    return events
