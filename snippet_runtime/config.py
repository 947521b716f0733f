"""Runtime settings for the snippet renderer.

Settings come from an optional YAML file, then environment overrides:

    SNIPPET_RULE_PATHS   extra rule modules/directories (os.pathsep separated)
    SNIPPET_TRACE_PATH   JSONL render event log
    SNIPPET_LOG_LEVEL    logging level name (default WARNING)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

import yaml

from .rules import ConfigurationError, RuleRegistry, load_registry

SETTINGS_KEYS = {"rule_paths", "include_builtin", "trace_path", "log_level", "roots"}


@dataclass
class RenderSettings:
    """Where rules come from and how rendering is observed."""

    rule_paths: list[str] = field(default_factory=list)
    include_builtin: bool = True
    trace_path: Optional[str] = None
    log_level: str = "WARNING"
    roots: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "RenderSettings":
        unknown = set(data) - SETTINGS_KEYS
        if unknown:
            raise ConfigurationError(f"Unknown settings: {', '.join(sorted(unknown))}")
        settings = cls(**data)
        if isinstance(settings.rule_paths, str):
            settings.rule_paths = [settings.rule_paths]
        if isinstance(settings.roots, str):
            settings.roots = [settings.roots]
        return settings

    def apply_environment(self, environ: Optional[dict] = None) -> "RenderSettings":
        """Override fields from SNIPPET_* environment variables."""
        environ = os.environ if environ is None else environ
        if environ.get("SNIPPET_RULE_PATHS"):
            self.rule_paths = [p for p in environ["SNIPPET_RULE_PATHS"].split(os.pathsep) if p]
        if environ.get("SNIPPET_TRACE_PATH"):
            self.trace_path = environ["SNIPPET_TRACE_PATH"]
        if environ.get("SNIPPET_LOG_LEVEL"):
            self.log_level = environ["SNIPPET_LOG_LEVEL"]
        return self

    @property
    def level(self) -> int:
        level = logging.getLevelName(str(self.log_level).upper())
        if not isinstance(level, int):
            raise ConfigurationError(f"Unknown log level {self.log_level!r}")
        return level

    def build_registry(self) -> RuleRegistry:
        """Load the rule registry once for the process."""
        return load_registry(self.rule_paths, include_builtin=self.include_builtin)


def load_settings(
    path: Optional[Union[str, Path]] = None,
    environ: Optional[dict] = None,
) -> RenderSettings:
    """Read settings from YAML (if given) and apply environment overrides.

    Raises:
        FileNotFoundError: If `path` does not exist
        ConfigurationError: If the file is not a mapping or has unknown keys
    """
    data: dict = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Settings file not found: {path}")
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML: {e}", str(path)) from e
        if not isinstance(data, dict):
            raise ConfigurationError("Settings file must contain a mapping", str(path))
    return RenderSettings.from_dict(data).apply_environment(environ)
