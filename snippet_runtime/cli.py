#!/usr/bin/env python
"""Snippet renderer CLI.

Usage:
    python -m snippet_runtime.cli render FILE [options]
    python -m snippet_runtime.cli rules [options]

Examples:
    # Render the snippet for a Turtle file
    python -m snippet_runtime.cli render album.ttl

    # JSON-LD with an explicit root and extra rule modules
    python -m snippet_runtime.cli render page.jsonld --format json-ld \\
        --root http://example.org/album --rules my_rules/

    # Linter-style JSON response with a render event log
    python -m snippet_runtime.cli render page.jsonld --format json-ld --json --trace render.jsonl

    # List loaded rule sets
    python -m snippet_runtime.cli rules

Input is parsed with rdflib, so any rdflib parser format works (turtle,
json-ld, xml, nt, n3, trig). RDFa and microdata pages need an external
extractor that produces one of these first.
"""

import argparse
import json
import logging
import sys
import uuid
from pathlib import Path

from rdflib import Graph

from .config import RenderSettings, load_settings
from .logging import RenderEventLogger
from .render import render_graph
from .rules import ConfigurationError


def _settings(args) -> RenderSettings:
    settings = load_settings(args.config)
    if args.rules:
        settings.rule_paths = list(settings.rule_paths) + list(args.rules)
    if args.no_builtin:
        settings.include_builtin = False
    if getattr(args, "trace", None):
        settings.trace_path = args.trace
    if getattr(args, "root", None):
        settings.roots = list(args.root)
    return settings


def _parse_input(path: str, fmt: str = None, base: str = None) -> Graph:
    graph = Graph()
    if path == "-":
        graph.parse(data=sys.stdin.read(), format=fmt or "turtle", publicID=base)
        return graph
    if not Path(path).exists():
        raise FileNotFoundError(f"Input not found: {path}")
    graph.parse(source=path, format=fmt, publicID=base)
    return graph


def render_command(args):
    """Render the snippet for one input document."""
    settings = _settings(args)
    logging.basicConfig(level=settings.level, format="%(levelname)s %(name)s: %(message)s")
    registry = settings.build_registry()

    try:
        graph = _parse_input(args.input, args.format, args.base)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: could not parse {args.input}: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    trace = None
    if settings.trace_path:
        try:
            trace = RenderEventLogger(settings.trace_path, run_id=f"r-{uuid.uuid4().hex[:8]}")
        except OSError as e:
            print(f"Error: cannot open trace file {settings.trace_path}: {e}", file=sys.stderr)
            return 1
    try:
        result = render_graph(graph, registry, roots=settings.roots or None, trace=trace)
    finally:
        if trace is not None:
            trace.close()

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    elif result.fragment:
        print(result.fragment)
    else:
        print("No snippet: graph is empty", file=sys.stderr)
    return 0


def rules_command(args):
    """List the rule sets a registry would be built from."""
    settings = _settings(args)
    registry = settings.build_registry()

    print(f"{len(registry)} rule sets\n")
    for rule in registry:
        kind, text = rule.match_key
        print(f"  [{rule.priority:>2}] {rule.identifier}  ({kind}: {text})")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description='Structured data snippet renderer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--rules', '-r', nargs='+', default=[],
                        help='Extra rule modules or directories of *.yaml modules')
    common.add_argument('--no-builtin', action='store_true',
                        help='Do not load the built-in rule catalogue')
    common.add_argument('--config', '-c', type=str, default=None,
                        help='YAML settings file')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Render command
    render_parser = subparsers.add_parser('render', parents=[common], help='Render a snippet')
    render_parser.add_argument('input', help='Input document path, or - for stdin')
    render_parser.add_argument('--format', '-f', type=str, default=None,
                               help='rdflib parser format (turtle, json-ld, xml, nt, ...)')
    render_parser.add_argument('--base', '-b', type=str, default=None,
                               help='Base URI for relative references')
    render_parser.add_argument('--root', nargs='+', default=None,
                               help='Resource URI(s) to render instead of detected roots')
    render_parser.add_argument('--json', action='store_true',
                               help='Print the JSON response instead of the fragment')
    render_parser.add_argument('--trace', type=str, default=None,
                               help='Append render events to this JSONL file')

    # Rules command
    subparsers.add_parser('rules', parents=[common], help='List loaded rule sets')

    args = parser.parse_args(argv)

    try:
        if args.command == 'render':
            return render_command(args)
        elif args.command == 'rules':
            return rules_command(args)
        else:
            parser.print_help()
            return 0
    except (ConfigurationError, FileNotFoundError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2


if __name__ == '__main__':
    sys.exit(main())
