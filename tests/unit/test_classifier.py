"""Tests for role classification."""

from rdflib import Literal

from snippet_runtime.graph import GraphAccessor
from snippet_runtime.render import classify
from snippet_runtime.rules import ExactMatch, RuleSet
from tests.helpers.graphs import EX, SCHEMA

RULE = RuleSet(
    match=ExactMatch(SCHEMA.Thing),
    title_props=(SCHEMA.name, SCHEMA.headline),
    photo_props=(SCHEMA.image,),
    description_props=(SCHEMA.description, SCHEMA.text),
    body_props=(SCHEMA.author, SCHEMA.headline, SCHEMA.keywords),
    nested_props=(SCHEMA.name,),
)


def classify_triples(triples, rule=RULE):
    return classify(GraphAccessor.from_triples(triples), EX.item, rule)


class TestSingleRoles:
    """Title, photo and description take the first populated property."""

    def test_first_listed_property_wins(self):
        roles = classify_triples([
            (EX.item, SCHEMA.headline, Literal("Headline")),
            (EX.item, SCHEMA.name, Literal("Name")),
        ])
        assert roles.title.prop == SCHEMA.name
        assert roles.title.first == Literal("Name")

    def test_falls_through_to_later_property(self):
        roles = classify_triples([(EX.item, SCHEMA.headline, Literal("Headline"))])
        assert roles.title.prop == SCHEMA.headline

    def test_first_value_in_source_order(self):
        roles = classify_triples([
            (EX.item, SCHEMA.image, EX["a.jpg"]),
            (EX.item, SCHEMA.image, EX["b.jpg"]),
        ])
        assert roles.photo.values == (EX["a.jpg"], EX["b.jpg"])
        assert roles.photo.first == EX["a.jpg"]

    def test_missing_roles_are_none(self):
        roles = classify_triples([(EX.item, SCHEMA.author, EX.someone)])
        assert roles.title is None
        assert roles.photo is None
        assert roles.description is None


class TestMultiRoles:
    """Body and nested take every populated property."""

    def test_body_in_rule_order(self):
        roles = classify_triples([
            (EX.item, SCHEMA.keywords, Literal("rock")),
            (EX.item, SCHEMA.author, EX.someone),
        ])
        assert [e.prop for e in roles.body] == [SCHEMA.author, SCHEMA.keywords]

    def test_property_in_several_roles(self):
        """A headline can be the title and a body entry at once."""
        roles = classify_triples([(EX.item, SCHEMA.headline, Literal("Headline"))])
        assert roles.title.prop == SCHEMA.headline
        assert [e.prop for e in roles.body] == [SCHEMA.headline]

    def test_nested_role(self):
        roles = classify_triples([(EX.item, SCHEMA.name, Literal("Name"))])
        assert [e.prop for e in roles.nested] == [SCHEMA.name]


class TestBlankValues:
    """Empty literals count as absent."""

    def test_blank_title_skipped(self):
        roles = classify_triples([
            (EX.item, SCHEMA.name, Literal("   ")),
            (EX.item, SCHEMA.headline, Literal("Headline")),
        ])
        assert roles.title.prop == SCHEMA.headline

    def test_blank_values_filtered(self):
        roles = classify_triples([
            (EX.item, SCHEMA.keywords, Literal("")),
            (EX.item, SCHEMA.keywords, Literal("rock")),
        ])
        assert roles.body[0].values == (Literal("rock"),)

    def test_empty_classification(self):
        roles = classify_triples([(EX.item, SCHEMA.name, Literal(""))])
        assert roles.is_empty()
        assert classify_triples([]).is_empty()
