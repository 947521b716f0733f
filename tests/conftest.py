"""Shared test fixtures for the snippet runtime test suite."""

import pytest

from snippet_runtime.graph import GraphAccessor
from snippet_runtime.rules import ExactMatch, RuleRegistry, RuleSet, load_registry
from tests.helpers.graphs import ALBUM_TURTLE, EX, album_triples, cycle_triples


# ============================================================================
# Registry Fixtures
# ============================================================================

@pytest.fixture(scope="session")
def builtin_registry():
    """Registry built from the shipped rule catalogue."""
    return load_registry()


@pytest.fixture
def node_rule():
    """Minimal rule set for ex:Node resources linked by ex:link."""
    return RuleSet(
        match=ExactMatch(EX.Node),
        identifier="ex:Node",
        title_props=(EX.name,),
        body_props=(EX.link,),
    )


@pytest.fixture
def node_registry(node_rule):
    return RuleRegistry([node_rule])


# ============================================================================
# Graph Fixtures
# ============================================================================

@pytest.fixture
def album_accessor():
    return GraphAccessor.from_triples(album_triples())


@pytest.fixture
def cycle_accessor():
    return GraphAccessor.from_triples(cycle_triples())


@pytest.fixture
def album_ttl(tmp_path):
    """Turtle file with a rated album."""
    path = tmp_path / "album.ttl"
    path.write_text(ALBUM_TURTLE, encoding="utf-8")
    return path
