"""Small HTML building helpers shared by the formatter and resolver."""

from __future__ import annotations

from html import escape as _html_escape
from typing import Optional
from urllib.parse import urlsplit

from rdflib import Literal
from rdflib.namespace import RDF

STRUCTURED_DATATYPES = (RDF.XMLLiteral, RDF.HTML)

VOID_ELEMENTS = {"img", "br", "hr", "meta", "link"}

LINK_SCHEMES = ("http", "https")


def escape(text) -> str:
    return _html_escape(str(text), quote=True)


def element(tag: str, content: Optional[str] = "", /, **attrs) -> str:
    """Build `<tag attrs>content</tag>`; `content` must already be markup.

    Attributes whose value is None are omitted. A trailing underscore is
    stripped from attribute names so reserved words can be passed
    (`class_="track"`).
    """
    rendered = "".join(
        f' {name.rstrip("_")}="{escape(value)}"'
        for name, value in attrs.items()
        if value is not None
    )
    if tag in VOID_ELEMENTS:
        return f"<{tag}{rendered}>"
    return f"<{tag}{rendered}>{content or ''}</{tag}>"


def is_structured(value) -> bool:
    """Literal whose payload is already markup (rdf:XMLLiteral, rdf:HTML)."""
    return isinstance(value, Literal) and value.datatype in STRUCTURED_DATATYPES


def is_blank_value(value) -> bool:
    """Literal with nothing to show; treated as if the value were absent."""
    return isinstance(value, Literal) and not str(value).strip()


def is_blank_markup(fragment: Optional[str]) -> bool:
    return fragment is None or not fragment.strip()


def is_linkable(uri) -> bool:
    """True if `uri` may be written into href/src: http(s) or relative."""
    text = str(uri).strip()
    if not text or any(ord(ch) < 0x20 for ch in text):
        return False
    try:
        scheme = urlsplit(text).scheme.lower()
    except ValueError:
        return False
    return scheme == "" or scheme in LINK_SCHEMES
