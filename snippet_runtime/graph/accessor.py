"""Ordered, read-only view over a parsed RDF graph.

The snippet engine never queries the rdflib store directly: it builds a
GraphAccessor once per render and asks it for types and property values.
The accessor keeps statements in the order they were read so that rendered
value lists follow source order, and it never binds prefixes or otherwise
touches the graph it was built from.
"""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from rdflib import BNode, Graph, Literal, URIRef
from rdflib.namespace import RDF

# Prefixes used for CURIE display, independent of what the parser bound
STANDARD_PREFIXES = (
    ("schema", "http://schema.org/"),
    ("og", "http://ogp.me/ns#"),
    ("ogt", "http://types.ogp.me/ns#"),
    ("ogm", "http://opengraphprotocol.org/schema/"),
    ("dc", "http://purl.org/dc/terms/"),
    ("dc11", "http://purl.org/dc/elements/1.1/"),
    ("content", "http://purl.org/rss/1.0/modules/content/"),
    ("foaf", "http://xmlns.com/foaf/0.1/"),
    ("gr", "http://purl.org/goodrelations/v1#"),
    ("v", "http://rdf.data-vocabulary.org/#"),
    ("rdf", "http://www.w3.org/1999/02/22-rdf-syntax-ns#"),
    ("rdfs", "http://www.w3.org/2000/01/rdf-schema#"),
    ("xsd", "http://www.w3.org/2001/XMLSchema#"),
    ("owl", "http://www.w3.org/2002/07/owl#"),
)

_LOCAL_NAME_STOP = set("/#?:& \t\n")


def is_reference(value) -> bool:
    """True for values that point at another resource (URIRef or BNode)."""
    return isinstance(value, (URIRef, BNode))


class GraphAccessor:
    """Immutable ordered index of (subject, predicate, object) statements.

    Example:
        accessor = GraphAccessor.from_graph(graph)
        for t in accessor.types_of(album):
            print(accessor.curie(t))
        names = accessor.values_of(album, SCHEMA.name)
    """

    def __init__(
        self,
        triples: Iterable[tuple] = (),
        namespaces: Optional[Iterable[tuple[str, str]]] = None,
    ):
        """Index the given triples.

        Args:
            triples: Iterable of (subject, predicate, object) rdflib terms
            namespaces: Optional (prefix, namespace) pairs used for CURIEs,
                consulted after STANDARD_PREFIXES
        """
        index: dict = {}
        referenced: set = set()
        seen: set = set()
        count = 0

        for s, p, o in triples:
            if (s, p, o) in seen:
                continue
            seen.add((s, p, o))
            count += 1
            index.setdefault(s, {}).setdefault(p, []).append(o)
            if is_reference(o) and o != s:
                referenced.add(o)

        self._index = {
            s: {p: tuple(objs) for p, objs in props.items()}
            for s, props in index.items()
        }
        self._subjects = tuple(self._index)
        self._referenced = frozenset(referenced)
        self._size = count

        prefixes = list(STANDARD_PREFIXES)
        known = {ns for _, ns in prefixes}
        for prefix, ns in namespaces or ():
            ns = str(ns)
            if prefix and ns and ns not in known:
                prefixes.append((str(prefix), ns))
                known.add(ns)
        # Longest namespace first so nested vocabularies shorten correctly
        self._prefixes = tuple(sorted(prefixes, key=lambda pair: -len(pair[1])))

    @classmethod
    def from_graph(cls, graph: Optional[Graph]) -> "GraphAccessor":
        """Build an accessor from an rdflib Graph (None gives an empty one)."""
        if graph is None:
            return cls()
        return cls(iter(graph), namespaces=list(graph.namespaces()))

    @classmethod
    def from_triples(
        cls,
        triples: Iterable[tuple],
        namespaces: Optional[Iterable[tuple[str, str]]] = None,
    ) -> "GraphAccessor":
        """Build an accessor from triples in an explicit order."""
        return cls(triples, namespaces=namespaces)

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    def __iter__(self) -> Iterator[tuple]:
        for s, props in self._index.items():
            for p, objs in props.items():
                for o in objs:
                    yield s, p, o

    def subjects(self) -> tuple:
        """Subjects in order of their first statement."""
        return self._subjects

    def has_statements(self, resource) -> bool:
        return resource in self._index

    def is_referenced(self, resource) -> bool:
        """True if another resource uses this one as an object."""
        return resource in self._referenced

    def properties_of(self, resource) -> tuple:
        return tuple(self._index.get(resource, {}))

    def values_of(self, resource, prop) -> tuple:
        """Objects of (resource, prop) in source order."""
        return self._index.get(resource, {}).get(URIRef(prop), ())

    def types_of(self, resource) -> tuple:
        """Declared rdf:type values in source order."""
        return tuple(
            t for t in self.values_of(resource, RDF.type) if isinstance(t, URIRef)
        )

    def curie(self, term) -> str:
        """Display form of a term: prefix:local for known namespaces.

        Blank nodes render as _:id, literals as their lexical form and
        URIs without a known namespace as the full URI.
        """
        if isinstance(term, BNode):
            return f"_:{term}"
        if isinstance(term, Literal):
            return str(term)
        uri = str(term)
        for prefix, ns in self._prefixes:
            if uri.startswith(ns):
                local = uri[len(ns):]
                if local and not (_LOCAL_NAME_STOP & set(local)):
                    return f"{prefix}:{local}"
        return uri
