"""Presentation rule sets, their registry and the YAML rule loader."""

from .model import (
    ConfigurationError,
    DEFAULT_PRIORITY,
    ExactMatch,
    MatchKey,
    MultiValuePolicy,
    PatternMatch,
    RuleSet,
)
from .registry import RuleRegistry
from .loader import (
    build_rule_set,
    builtin_rule_files,
    load_registry,
    load_rule_file,
    load_rule_files,
    parse_rules,
)

__all__ = [
    "ConfigurationError",
    "DEFAULT_PRIORITY",
    "ExactMatch",
    "MatchKey",
    "MultiValuePolicy",
    "PatternMatch",
    "RuleSet",
    "RuleRegistry",
    "build_rule_set",
    "builtin_rule_files",
    "load_registry",
    "load_rule_file",
    "load_rule_files",
    "parse_rules",
]
