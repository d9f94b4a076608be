"""Command-line interface for the Gale compiler."""
from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
import sys

from .analysis import (
    export_graphviz,
    print_as_graphviz,
    tag_edge_label,
    tree_to_dict,
    tree_vertex_label,
    visualize_graph,
)
from ..natives import standard_prelude
from .errors import GaleError
from .pipeline import analyse, compile_source
from .interpreter import interpret

DEFAULT_SOURCE = "let main : ui8 -> ui8 = \\x => x * x;"

GRAPH_CHOICES = ("nodes", "scopes", "types")

logger = logging.getLogger(__name__)


def parse_args(args):
    argp = argparse.ArgumentParser(description="Gale Language Compiler")

    argp.add_argument("file", nargs="?", help="Gale source file to compile")
    argp.add_argument("--src", help="Inline Gale source", default=DEFAULT_SOURCE)
    argp.add_argument(
        "--no-check",
        action="store_true",
        help="Skip the type checker and lower the parsed program directly",
    )
    argp.add_argument(
        "--graph",
        choices=GRAPH_CHOICES,
        help="Print an analysis graph in Graphviz DOT format instead of running",
    )
    argp.add_argument(
        "--viz",
        metavar="OUTPUT",
        help="Export the selected graph (default: nodes) to an SVG file",
    )
    argp.add_argument(
        "--visualize",
        action="store_true",
        help="Show the selected graph (default: nodes) in a matplotlib window",
    )
    argp.add_argument(
        "--dump-ir",
        action="store_true",
        help="Print the lowered arena tree as JSON",
    )
    argp.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log compiler pass details to stderr",
    )

    return argp.parse_args(args)


def _read_source(params):
    if params.file:
        return Path(params.file).read_text(encoding="utf-8")
    return params.src


def _selected_graph(result, analysis, kind):
    """Return ``(graph, vertex_label, edge_label, tree)`` for a graph kind."""

    if kind == "scopes":
        return analysis.scope_graph, lambda vertex: "scope", tag_edge_label(None), None
    if kind == "types":
        return (
            analysis.type_graph,
            tree_vertex_label(result.tree),
            tag_edge_label(analysis.type_tags),
            result.tree,
        )
    return (
        analysis.node_graph,
        tree_vertex_label(result.tree),
        tag_edge_label(None),
        result.tree,
    )


def main(args) -> int:
    params = parse_args(args)
    if params.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        src = _read_source(params)
        result = compile_source(src, check_types=not params.no_check)

        if params.dump_ir:
            ir = {
                "natives": [decl.to_dict() for decl in standard_prelude().values()],
                "nodes": tree_to_dict(result.tree),
            }
            print(json.dumps(ir, indent=2))

        wants_graph = params.graph or params.viz or params.visualize
        if wants_graph:
            analysis = analyse(result.tree)
            graph, vertex_label, edge_label, tree = _selected_graph(
                result, analysis, params.graph or "nodes"
            )
            if params.graph:
                print(print_as_graphviz(graph, vertex_label, edge_label), end="")
            if params.viz:
                path = export_graphviz(graph, params.viz, vertex_label, edge_label, tree=tree)
                print(f"✓ Wrote {path}")
            if params.visualize:
                visualize_graph(graph, vertex_label, title=f"Gale {params.graph or 'nodes'} graph")
            return 0

        value = interpret(result.tree)
    except GaleError as exc:
        logger.debug("%s stage failed: %s", exc.stage, exc.message)
        print(f"✗ {exc.message}")
        return 1
    except (OSError, RuntimeError) as exc:
        print(f"✗ {exc}")
        return 1

    print(f"Exit value: {value}")
    return 0


def run() -> None:  # pragma: no cover
    sys.exit(main(sys.argv[1:]))


__all__ = [
    "main",
    "parse_args",
    "run",
]


if __name__ == "__main__":  # pragma: no cover
    run()
