"""Rule set data structures.

A RuleSet binds a type (or a family of types) to the properties that fill
each snippet role and to the formatting policy for its property values.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Union

DEFAULT_PRIORITY = 99

MULTI_VALUE_MODES = ("join", "first", "list")


class ConfigurationError(ValueError):
    """A rule set is malformed; raised while building the registry."""

    def __init__(self, message: str, source: Optional[str] = None, identifier: Optional[str] = None):
        self.source = source
        self.identifier = identifier
        where = ", ".join(x for x in (source, identifier) if x)
        super().__init__(f"{message} ({where})" if where else message)


@dataclass(frozen=True)
class ExactMatch:
    """Matches one type identifier by string equality."""

    type_id: str

    def __post_init__(self):
        object.__setattr__(self, "type_id", str(self.type_id))

    def matches(self, type_id) -> bool:
        return str(type_id) == self.type_id

    @property
    def text(self) -> str:
        return self.type_id

    def __str__(self) -> str:
        return self.type_id


@dataclass(frozen=True)
class PatternMatch:
    """Matches any type whose URI contains the regular expression."""

    pattern: str
    compiled: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        try:
            compiled = re.compile(self.pattern)
        except re.error as e:
            raise ConfigurationError(f"Invalid type pattern {self.pattern!r}: {e}") from e
        object.__setattr__(self, "compiled", compiled)

    def matches(self, type_id) -> bool:
        return self.compiled.search(str(type_id)) is not None

    @property
    def text(self) -> str:
        return self.pattern

    def __str__(self) -> str:
        return f"/{self.pattern}/"


MatchKey = Union[ExactMatch, PatternMatch]


@dataclass(frozen=True)
class MultiValuePolicy:
    """How a property with several values is rendered.

    mode:
        join  - every value, joined with `separator`
        first - only the first value in source order
        list  - every value as an <ol> item
    """

    mode: str = "join"
    separator: str = ", "
    list_class: Optional[str] = None
    item_class: Optional[str] = None

    def __post_init__(self):
        if self.mode not in MULTI_VALUE_MODES:
            raise ConfigurationError(
                f"Unknown multi-value mode {self.mode!r}, expected one of {', '.join(MULTI_VALUE_MODES)}"
            )

    def select(self, values: tuple) -> tuple:
        return values[:1] if self.mode == "first" else values


JOIN_ALL = MultiValuePolicy()


def _props(values) -> tuple[str, ...]:
    return tuple(str(v) for v in values)


@dataclass(frozen=True, eq=False)
class RuleSet:
    """Presentation rules for one type or family of types.

    Attributes:
        match: ExactMatch or PatternMatch against a resource's declared types
        identifier: Label reported in diagnostics (defaults to the match text)
        title_props/photo_props/description_props: single-valued roles,
            first populated property wins
        body_props/nested_props: multi-valued roles, every populated
            property contributes in list order
        priority: Lower wins when several rule sets match (default 99)
        body_labels: Property -> label shown before its body entry
        media_props: Properties rendered as images
        overrides: Property -> formatter strategy name
        multi_value: Property -> MultiValuePolicy
        default_multi_value: Policy for properties not in multi_value
    """

    match: MatchKey
    identifier: str = ""
    title_props: tuple[str, ...] = ()
    photo_props: tuple[str, ...] = ()
    body_props: tuple[str, ...] = ()
    description_props: tuple[str, ...] = ()
    nested_props: tuple[str, ...] = ()
    priority: int = DEFAULT_PRIORITY
    body_labels: Mapping[str, str] = field(default_factory=dict)
    media_props: tuple[str, ...] = ()
    overrides: Mapping[str, str] = field(default_factory=dict)
    multi_value: Mapping[str, MultiValuePolicy] = field(default_factory=dict)
    default_multi_value: MultiValuePolicy = JOIN_ALL

    def __post_init__(self):
        # Deferred: the render package imports rules
        from ..render.strategies import FORMATTERS

        if not isinstance(self.match, (ExactMatch, PatternMatch)):
            raise ConfigurationError(f"Rule set match must be a MatchKey, got {self.match!r}")
        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise ConfigurationError(
                f"Priority must be an integer, got {self.priority!r}", identifier=self.identifier or None
            )
        if not self.identifier:
            object.__setattr__(self, "identifier", self.match.text)

        for name in ("title_props", "photo_props", "body_props", "description_props", "nested_props", "media_props"):
            object.__setattr__(self, name, _props(getattr(self, name)))

        overrides = {str(k): v for k, v in self.overrides.items()}
        for prop, strategy in overrides.items():
            if strategy not in FORMATTERS:
                raise ConfigurationError(
                    f"Unknown formatter {strategy!r} for {prop}", identifier=self.identifier
                )

        policies = {}
        for prop, policy in self.multi_value.items():
            if not isinstance(policy, MultiValuePolicy):
                raise ConfigurationError(
                    f"Multi-value policy for {prop} must be a MultiValuePolicy", identifier=self.identifier
                )
            policies[str(prop)] = policy

        object.__setattr__(self, "overrides", MappingProxyType(overrides))
        object.__setattr__(self, "multi_value", MappingProxyType(policies))
        object.__setattr__(
            self, "body_labels", MappingProxyType({str(k): str(v) for k, v in self.body_labels.items()})
        )

    @property
    def match_key(self) -> tuple[str, str]:
        """Registry key: (kind, text). Identical keys replace each other."""
        kind = "exact" if isinstance(self.match, ExactMatch) else "pattern"
        return kind, self.match.text

    def matches(self, type_id) -> bool:
        return self.match.matches(type_id)

    def policy_for(self, prop) -> MultiValuePolicy:
        return self.multi_value.get(str(prop), self.default_multi_value)

    def override_for(self, prop) -> Optional[str]:
        return self.overrides.get(str(prop))

    def is_media(self, prop) -> bool:
        return str(prop) in self.media_props
