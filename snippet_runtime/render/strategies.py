"""Property-specific formatter strategies.

Rule sets name these in their `overrides` (or rely on `image` through
`media`). Each strategy is a pure function::

    strategy(ctx: FormatContext, value) -> str | None

Returning None declines the value and the formatter continues with its
generic branches. Raising is allowed for malformed input; the formatter logs
the failure and renders the value generically.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional

from rdflib import Literal, URIRef

from ..graph import GraphAccessor, is_reference
from .markup import element, escape, is_linkable

STAR_SCALE = 5

_DURATION = re.compile(r"^PT(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)(?:\.\d+)?S)?$")
_RATING_LITERAL = re.compile(r"^\s*([^/\s]+)\s*(?:/\s*([^/\s]+)\s*)?$")
_GROUPING = re.compile(r"[,\s_]")


@dataclass(frozen=True)
class FormatContext:
    """What a strategy may look at: the graph and the property being shown."""

    accessor: GraphAccessor
    prop: URIRef

    def curie(self, term) -> str:
        return self.accessor.curie(term)

    def sibling(self, local_name: str) -> URIRef:
        """Property in the same vocabulary as `prop` (schema:x -> schema:y)."""
        uri = str(self.prop)
        cut = max(uri.rfind("/"), uri.rfind("#"))
        return URIRef(uri[: cut + 1] + local_name)

    def first_literal(self, resource, local_name: str) -> Optional[Literal]:
        for value in self.accessor.values_of(resource, self.sibling(local_name)):
            if isinstance(value, Literal):
                return value
        return None


Strategy = Callable[[FormatContext, object], Optional[str]]


def _number(text) -> float:
    """Rating value; a comma is read as a decimal point (4,5 -> 4.5)."""
    return float(str(text).strip().replace(",", "."))


def _count(text) -> int:
    """Counter value; commas, spaces and underscores group digits (1,200 -> 1200)."""
    return int(float(_GROUPING.sub("", str(text))))


def _number_text(number: float) -> str:
    return f"{number:g}"


def stars(score: float, best: float = STAR_SCALE) -> str:
    """Five-star text for a score on a 0..best scale, e.g. ★★★★½."""
    if best <= 0:
        raise ValueError(f"Rating scale must be positive, got {best}")
    scaled = min(max(score / best * STAR_SCALE, 0.0), float(STAR_SCALE))
    full = int(scaled)
    half = scaled - full >= 0.5
    return "★" * full + ("½" if half else "") + "☆" * (STAR_SCALE - full - (1 if half else 0))


def format_rating(ctx: FormatContext, value) -> Optional[str]:
    """Rating shown as stars plus its numbers.

    Accepts a rating resource (ratingValue, bestRating, worstRating,
    ratingCount, reviewCount) or a literal such as "4.5" or "4.5/5".
    """
    count_text = None
    if is_reference(value):
        rating = ctx.first_literal(value, "ratingValue")
        if rating is None:
            return None
        score = _number(rating)
        best_literal = ctx.first_literal(value, "bestRating")
        best = _number(best_literal) if best_literal is not None else STAR_SCALE
        worst_literal = ctx.first_literal(value, "worstRating")
        worst = _number(worst_literal) if worst_literal is not None else 0.0
        for local_name, noun in (("reviewCount", "reviews"), ("ratingCount", "ratings")):
            count = ctx.first_literal(value, local_name)
            if count is not None:
                count_text = f"{_count(count)} {noun}"
                break
        resource = ctx.curie(value)
    else:
        match = _RATING_LITERAL.match(str(value))
        if not match:
            raise ValueError(f"Unrecognised rating {str(value)!r}")
        score = _number(match.group(1))
        best = _number(match.group(2)) if match.group(2) else STAR_SCALE
        worst = 0.0
        resource = None

    inner = [
        element("span", escape(stars(score - worst, best - worst)), class_="stars"),
        " ",
        escape(f"{_number_text(score)}/{_number_text(best)}"),
    ]
    if count_text:
        inner.append(escape(f" ({count_text})"))
    return element("span", "".join(inner), class_="rating", rel=ctx.curie(ctx.prop), resource=resource)


def format_play_count(ctx: FormatContext, value) -> Optional[str]:
    """Play counter: "Played 1200 times"."""
    if not isinstance(value, Literal):
        return None
    count = _count(value)
    return element("span", escape(f"Played {count} times"), property=ctx.curie(ctx.prop), content=str(count))


def format_duration(ctx: FormatContext, value) -> Optional[str]:
    """ISO 8601 time duration as a clock reading: PT4M20S -> 4:20."""
    if not isinstance(value, Literal):
        return None
    match = _DURATION.match(str(value).strip())
    if not match or not any(match.groups()):
        return None
    hours, minutes, seconds = (int(g) if g else 0 for g in match.groups())
    minutes += hours * 60
    hours, minutes = divmod(minutes, 60)
    clock = f"{hours}:{minutes:02d}:{seconds:02d}" if hours else f"{minutes}:{seconds:02d}"
    return element("time", escape(clock), property=ctx.curie(ctx.prop), datetime=str(value).strip())


def format_image(ctx: FormatContext, value) -> Optional[str]:
    """Image element for a URI (or URL literal)."""
    src = str(value).strip()
    if not src or not is_linkable(src):
        return None
    return element("span", element("img", src=src, alt=""), rel=ctx.curie(ctx.prop))


FORMATTERS: dict[str, Strategy] = {
    "rating": format_rating,
    "play_count": format_play_count,
    "duration": format_duration,
    "image": format_image,
}
