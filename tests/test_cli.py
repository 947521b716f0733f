"""Tests for the snippet-render command line."""

import json

from snippet_runtime.cli import main
from snippet_runtime.logging import read_events


class TestRenderCommand:
    """snippet-render render"""

    def test_prints_fragment(self, album_ttl, capsys):
        assert main(["render", str(album_ttl)]) == 0
        out = capsys.readouterr().out
        assert out.startswith('<div class="snippet"')
        assert "Abbey Road" in out

    def test_json_response(self, album_ttl, capsys):
        assert main(["render", str(album_ttl), "--json"]) == 0
        response = json.loads(capsys.readouterr().out)
        assert "Abbey Road" in response["snippet"]
        assert response["statistics"] == {"count": 8, "templates": ["schema:MusicAlbum"]}

    def test_explicit_root(self, album_ttl, capsys):
        assert main(["render", str(album_ttl), "--root", "http://example.org/rating", "--json"]) == 0
        response = json.loads(capsys.readouterr().out)
        assert response["statistics"]["templates"] == ["schema:AggregateRating"]

    def test_trace_file(self, album_ttl, tmp_path, capsys):
        trace = tmp_path / "render.jsonl"
        assert main(["render", str(album_ttl), "--trace", str(trace)]) == 0
        [complete] = read_events(trace, event="render_complete")
        assert complete["templates"] == ["schema:MusicAlbum"]

    def test_unwritable_trace(self, album_ttl, tmp_path, capsys):
        blocker = tmp_path / "not_a_dir"
        blocker.write_text("", encoding="utf-8")
        assert main(["render", str(album_ttl), "--trace", str(blocker / "render.jsonl")]) == 1
        captured = capsys.readouterr()
        assert captured.err.startswith("Error: cannot open trace file")
        assert captured.out == ""

    def test_empty_document(self, tmp_path, capsys):
        empty = tmp_path / "empty.ttl"
        empty.write_text("", encoding="utf-8")
        assert main(["render", str(empty), "--format", "turtle"]) == 0
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "No snippet" in captured.err

    def test_missing_input(self, tmp_path, capsys):
        assert main(["render", str(tmp_path / "missing.ttl")]) == 1
        assert "Input not found" in capsys.readouterr().err

    def test_unparseable_input(self, tmp_path, capsys):
        broken = tmp_path / "broken.ttl"
        broken.write_text("this is not turtle <<<", encoding="utf-8")
        assert main(["render", str(broken), "--format", "turtle"]) == 1
        assert "could not parse" in capsys.readouterr().err

    def test_malformed_rules_exit_code(self, album_ttl, tmp_path, capsys):
        rules = tmp_path / "bad.yaml"
        rules.write_text('rules: [{identifier: bad, match: {pattern: "(["}}]\n', encoding="utf-8")
        assert main(["render", str(album_ttl), "--rules", str(rules)]) == 2
        assert "Invalid type pattern" in capsys.readouterr().err


class TestRulesCommand:
    """snippet-render rules"""

    def test_lists_builtin_rules(self, capsys):
        assert main(["rules"]) == 0
        out = capsys.readouterr().out
        assert "rule sets" in out
        assert "[ 1] schema:MusicAlbum  (exact: http://schema.org/MusicAlbum)" in out

    def test_no_builtin(self, tmp_path, capsys):
        rules = tmp_path / "rules.yaml"
        rules.write_text('rules: [{identifier: "x:A", match: {exact: "http://x/A"}, priority: 5}]\n', encoding="utf-8")
        assert main(["rules", "--no-builtin", "--rules", str(rules)]) == 0
        out = capsys.readouterr().out
        assert out.startswith("1 rule sets")
        assert "[ 5] x:A  (exact: http://x/A)" in out

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "render" in capsys.readouterr().out

    def test_help_examples_use_rdflib_formats(self, capsys):
        """Every --format in the usage examples names an rdflib parser."""
        main([])
        out = capsys.readouterr().out
        assert "--format json-ld" in out
        assert "--format rdfa" not in out
        assert "external" in out
