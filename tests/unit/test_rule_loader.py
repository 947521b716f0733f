"""Tests for loading rule sets from YAML rule modules."""

import pytest
import textwrap

from snippet_runtime.rules import (
    ConfigurationError,
    ExactMatch,
    PatternMatch,
    builtin_rule_files,
    load_registry,
    load_rule_file,
    load_rule_files,
    parse_rules,
)
from tests.helpers.graphs import SCHEMA


def write_rules(tmp_path, body, name="rules.yaml"):
    path = tmp_path / name
    path.write_text(textwrap.dedent(body), encoding="utf-8")
    return path


class TestLoadRuleFile:
    """Valid rule modules."""

    def test_loads_entry(self, tmp_path):
        path = write_rules(tmp_path, """
            rules:
              - identifier: "schema:Book"
                match: {exact: "http://schema.org/Book"}
                priority: 3
                title: ["http://schema.org/name"]
                body: ["http://schema.org/author"]
                body_labels: {"http://schema.org/author": By}
                overrides: {"http://schema.org/aggregateRating": rating}
                multi_value:
                  "http://schema.org/author": {mode: join, separator: " & "}
        """)
        [rule] = load_rule_file(path)
        assert rule.identifier == "schema:Book"
        assert rule.match == ExactMatch("http://schema.org/Book")
        assert rule.priority == 3
        assert rule.title_props == ("http://schema.org/name",)
        assert rule.body_labels["http://schema.org/author"] == "By"
        assert rule.override_for(SCHEMA.aggregateRating) == "rating"
        assert rule.policy_for(SCHEMA.author).separator == " & "

    def test_vars_expand_one_rule_per_map(self, tmp_path):
        path = write_rules(tmp_path, """
            rules:
              - identifier: "og:{gen}"
                match: {pattern: "{types}"}
                vars:
                  - {gen: new, types: "http://types\\\\.ogp\\\\.me/ns#", prefix: "http://ogp.me/ns#"}
                  - {gen: old, types: "http://opengraphprotocol\\\\.org/types/", prefix: "http://opengraphprotocol.org/schema/"}
                title: ["{prefix}title"]
                multi_value:
                  "{prefix}image": first
        """)
        new, old = load_rule_file(path)
        assert new.identifier == "og:new"
        assert isinstance(new.match, PatternMatch)
        assert new.matches("http://types.ogp.me/ns#article")
        assert new.title_props == ("http://ogp.me/ns#title",)
        assert old.title_props == ("http://opengraphprotocol.org/schema/title",)
        assert old.policy_for("http://opengraphprotocol.org/schema/image").mode == "first"

    def test_empty_document(self, tmp_path):
        assert load_rule_file(write_rules(tmp_path, "")) == []

    def test_directory_contributes_yaml_files(self, tmp_path):
        write_rules(tmp_path, 'rules: [{match: {exact: "http://x/A"}}]', "a.yaml")
        write_rules(tmp_path, 'rules: [{match: {exact: "http://x/B"}}]', "b.yaml")
        rules = load_rule_files([tmp_path])
        assert [r.identifier for r in rules] == ["http://x/A", "http://x/B"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_rule_file(tmp_path / "nope.yaml")


class TestMalformedRules:
    """Malformed rule modules fail at load time, naming the offender."""

    @pytest.mark.parametrize("entry, message", [
        ('{identifier: bad, match: {pattern: "(["}}', "Invalid type pattern"),
        ('{identifier: bad, match: {exact: "http://x/A"}, overrides: {"http://x/p": sparkle}}', "Unknown formatter"),
        ('{identifier: bad, match: {exact: "http://x/A"}, colour: red}', "Unknown rule keys"),
        ('{identifier: bad, match: {exact: "http://x/A"}, priority: high}', "Priority"),
        ('{identifier: bad, match: {exact: "http://x/A"}, title: "http://x/name"}', "title must be a list"),
        ('{identifier: bad, match: {exact: "http://x/A"}, multi_value: {"http://x/p": shuffle}}', "multi-value mode"),
        ('{identifier: bad, match: {regex: "A"}}', "Unknown match kind"),
        ('{identifier: bad, title: ["http://x/name"]}', "no match key"),
    ])
    def test_configuration_error(self, tmp_path, entry, message):
        path = write_rules(tmp_path, f"rules:\n  - {entry}\n")
        with pytest.raises(ConfigurationError, match=message) as exc_info:
            load_rule_file(path)
        assert exc_info.value.source == str(path)
        assert "bad" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        path = write_rules(tmp_path, "rules: [unclosed")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_rule_file(path)

    def test_missing_rules_list(self):
        with pytest.raises(ConfigurationError, match="top-level 'rules' list"):
            parse_rules({"rule": []})

    def test_bad_vars(self):
        with pytest.raises(ConfigurationError, match="vars"):
            parse_rules({"rules": [{"match": {"exact": "http://x/A"}, "vars": "nope"}]})


class TestBuiltinCatalogue:
    """The shipped catalogue loads cleanly."""

    def test_files_present(self):
        names = {p.name for p in builtin_rule_files()}
        assert {"opengraph.yaml", "schema_music.yaml"} <= names

    def test_registry_contents(self, builtin_registry):
        identifiers = {r.identifier for r in builtin_registry}
        assert {"schema:MusicAlbum", "schema:MusicPlaylist", "og:ogp", "og:opengraphprotocol"} <= identifiers

    def test_album_beats_generic_schema_rule(self, builtin_registry):
        rule = builtin_registry.resolve([SCHEMA.MusicAlbum])
        assert rule.identifier == "schema:MusicAlbum"
        assert rule.priority == 1

    def test_generic_schema_rule_for_other_types(self, builtin_registry):
        assert builtin_registry.resolve([SCHEMA.Event]).identifier == "schema:Thing (http)"

    def test_user_module_overrides_builtin(self, tmp_path):
        path = write_rules(tmp_path, """
            rules:
              - identifier: "my:Album"
                match: {exact: "http://schema.org/MusicAlbum"}
                priority: 1
                title: ["http://schema.org/alternateName"]
        """)
        registry = load_registry([path])
        assert registry.resolve([SCHEMA.MusicAlbum]).identifier == "my:Album"

    def test_without_builtin(self, tmp_path):
        path = write_rules(tmp_path, 'rules: [{match: {exact: "http://x/A"}}]')
        assert len(load_registry([path], include_builtin=False)) == 1
