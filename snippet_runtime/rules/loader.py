"""Load rule sets from declarative YAML rule modules.

A rule module is a YAML document with a top-level `rules:` list:

    rules:
      - identifier: "schema:{type}"
        match: {exact: "http://schema.org/{type}"}
        vars:
          - {type: MusicAlbum}
          - {type: MusicPlaylist}
        priority: 1
        title: [http://schema.org/name]
        photo: [http://schema.org/image]
        body: [http://schema.org/byArtist, http://schema.org/tracks]
        body_labels: {http://schema.org/tracks: Tracks}
        media: [http://schema.org/image]
        overrides: {http://schema.org/aggregateRating: rating}
        multi_value:
          http://schema.org/image: first
          http://schema.org/tracks: {mode: list, list_class: tracks, item_class: track}

An entry with `vars` is expanded once per substitution map, replacing
`{name}` in every string. Anything malformed raises ConfigurationError when
the module is loaded, never during rendering.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import yaml

from .model import (
    ConfigurationError,
    DEFAULT_PRIORITY,
    ExactMatch,
    MultiValuePolicy,
    PatternMatch,
    RuleSet,
)
from .registry import RuleRegistry

logger = logging.getLogger(__name__)

CATALOGUE_DIR = Path(__file__).parent / "catalogue"

ROLE_KEYS = {
    "title": "title_props",
    "photo": "photo_props",
    "body": "body_props",
    "description": "description_props",
    "nested": "nested_props",
    "media": "media_props",
}

ENTRY_KEYS = set(ROLE_KEYS) | {
    "identifier",
    "match",
    "vars",
    "priority",
    "body_labels",
    "overrides",
    "multi_value",
    "default_multi_value",
}


def _substitute(value: Any, variables: dict[str, str]) -> Any:
    """Replace {name} placeholders in every string of a YAML value."""
    if isinstance(value, str):
        for name, replacement in variables.items():
            value = value.replace("{" + name + "}", str(replacement))
        return value
    if isinstance(value, list):
        return [_substitute(v, variables) for v in value]
    if isinstance(value, dict):
        return {_substitute(k, variables): _substitute(v, variables) for k, v in value.items()}
    return value


def _parse_policy(raw: Any, source: str, identifier: str) -> MultiValuePolicy:
    if isinstance(raw, str):
        raw = {"mode": raw}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Multi-value policy must be a mode or a mapping, got {raw!r}", source, identifier)
    unknown = set(raw) - {"mode", "separator", "list_class", "item_class"}
    if unknown:
        raise ConfigurationError(f"Unknown multi-value keys: {', '.join(sorted(unknown))}", source, identifier)
    try:
        return MultiValuePolicy(**raw)
    except ConfigurationError as e:
        raise ConfigurationError(str(e), source, identifier) from e


def _parse_match(raw: Any, source: str, identifier: str):
    if not isinstance(raw, dict) or len(raw) != 1:
        raise ConfigurationError("match must be {exact: URI} or {pattern: REGEX}", source, identifier)
    kind, text = next(iter(raw.items()))
    if not isinstance(text, str) or not text:
        raise ConfigurationError(f"match {kind} must be a non-empty string", source, identifier)
    if kind == "exact":
        return ExactMatch(text)
    if kind == "pattern":
        try:
            return PatternMatch(text)
        except ConfigurationError as e:
            raise ConfigurationError(str(e), source, identifier) from e
    raise ConfigurationError(f"Unknown match kind {kind!r}", source, identifier)


def _string_list(raw: Any, key: str, source: str, identifier: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list) or not all(isinstance(p, str) for p in raw):
        raise ConfigurationError(f"{key} must be a list of property URIs", source, identifier)
    return tuple(raw)


def _string_map(raw: Any, key: str, source: str, identifier: str) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict) or not all(isinstance(v, str) for v in raw.values()):
        raise ConfigurationError(f"{key} must map property URIs to strings", source, identifier)
    return {str(k): v for k, v in raw.items()}


def build_rule_set(entry: dict, source: str = "<memory>") -> RuleSet:
    """Build one RuleSet from an already-expanded entry mapping."""
    identifier = entry.get("identifier") or ""
    label = identifier or repr(entry.get("match"))

    unknown = set(entry) - ENTRY_KEYS
    if unknown:
        raise ConfigurationError(f"Unknown rule keys: {', '.join(sorted(unknown))}", source, label)
    if "match" not in entry:
        raise ConfigurationError("Rule set has no match key", source, label)

    kwargs: dict[str, Any] = {
        "match": _parse_match(entry["match"], source, label),
        "identifier": identifier,
        "priority": entry.get("priority", DEFAULT_PRIORITY),
        "body_labels": _string_map(entry.get("body_labels"), "body_labels", source, label),
        "overrides": _string_map(entry.get("overrides"), "overrides", source, label),
    }
    for key, attr in ROLE_KEYS.items():
        kwargs[attr] = _string_list(entry.get(key), key, source, label)

    multi_value = entry.get("multi_value") or {}
    if not isinstance(multi_value, dict):
        raise ConfigurationError("multi_value must be a mapping", source, label)
    kwargs["multi_value"] = {
        str(prop): _parse_policy(raw, source, label) for prop, raw in multi_value.items()
    }
    if "default_multi_value" in entry:
        kwargs["default_multi_value"] = _parse_policy(entry["default_multi_value"], source, label)

    try:
        return RuleSet(**kwargs)
    except ConfigurationError as e:
        if e.source:
            raise
        raise ConfigurationError(str(e), source) from e


def parse_rules(document: Any, source: str = "<memory>") -> list[RuleSet]:
    """Build rule sets from a parsed rule module document."""
    if document is None:
        return []
    if not isinstance(document, dict) or not isinstance(document.get("rules"), list):
        raise ConfigurationError("Rule module must contain a top-level 'rules' list", source)

    rule_sets = []
    for i, entry in enumerate(document["rules"], 1):
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Rule entry #{i} is not a mapping", source)
        variables = entry.get("vars")
        if variables is None:
            rule_sets.append(build_rule_set(entry, source))
            continue
        if not isinstance(variables, list) or not all(isinstance(v, dict) for v in variables):
            raise ConfigurationError(f"vars of rule entry #{i} must be a list of mappings", source)
        template = {k: v for k, v in entry.items() if k != "vars"}
        for substitution in variables:
            rule_sets.append(build_rule_set(_substitute(template, substitution), source))
    return rule_sets


def load_rule_file(path: Union[str, Path]) -> list[RuleSet]:
    """Load the rule sets declared in one YAML rule module.

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigurationError: If the YAML or any rule set is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Rule module not found: {path}")
    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML: {e}", str(path)) from e
    return parse_rules(document, str(path))


def builtin_rule_files() -> list[Path]:
    """Rule modules shipped with the package, in load order."""
    return sorted(CATALOGUE_DIR.glob("*.yaml"))


def load_rule_files(paths: Iterable[Union[str, Path]]) -> list[RuleSet]:
    """Load several rule modules; a directory contributes its *.yaml files."""
    rule_sets = []
    for path in paths:
        path = Path(path)
        files = sorted(path.glob("*.yaml")) if path.is_dir() else [path]
        for file in files:
            rule_sets.extend(load_rule_file(file))
    return rule_sets


def load_registry(
    paths: Optional[Iterable[Union[str, Path]]] = None,
    include_builtin: bool = True,
) -> RuleRegistry:
    """Build the process-wide registry: built-in catalogue, then `paths`.

    Modules loaded later override earlier rule sets with the same match key.
    """
    files: list[Path] = builtin_rule_files() if include_builtin else []
    rule_sets = load_rule_files(files)
    rule_sets.extend(load_rule_files(paths or []))
    registry = RuleRegistry(rule_sets)
    logger.info("Loaded %d rule sets", len(registry))
    return registry
