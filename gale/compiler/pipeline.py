"""End-to-end driver: source text through to a value or analysis graphs."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

from . import hlr
from .analysis import (
    DependencyType,
    gen_node_graph,
    gen_scope_graph,
    gen_type_dependencies,
)
from .checker import Context, check
from .flat_tree import FlatTree
from .graph import EdgeProperty, Graph, Vertex, VertexProperty
from .interpreter import interpret
from .lowerer import lower
from .parser import parse
from .tokenizer import tokenize
from .types import Type
from .values import Value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompilationResult:
    source: str
    surface: hlr.File
    tree: FlatTree
    checked_type: Optional[Type] = None


@dataclass(frozen=True)
class AnalysisResult:
    node_graph: Graph
    scope_graph: Graph
    node_scopes: VertexProperty[Vertex]
    type_graph: Graph
    type_tags: EdgeProperty[DependencyType]


def compile_source(src: str, *, check_types: bool = True, natives=None) -> CompilationResult:
    """Tokenize, parse, optionally type-check and lower ``src``.

    ``natives`` are extra :class:`~gale.natives.NativeDeclaration` entries
    made visible to the checker next to the standard prelude.
    """

    surface = parse(tokenize(src))
    checked_type = None
    if check_types:
        checked_type = check(surface, Context.with_prelude(natives))
    tree = lower(surface)
    logger.debug("compiled %d characters into %d arena nodes", len(src), len(tree))
    return CompilationResult(src, surface, tree, checked_type)


def compile_and_evaluate(
    src: str, natives=None, *, check_types: bool = True
) -> tuple[CompilationResult, Value]:
    """Run the full Gale pipeline on a raw source string."""

    result = compile_source(src, check_types=check_types, natives=natives)
    return result, interpret(result.tree, natives)


def analyse(tree: FlatTree) -> AnalysisResult:
    """Build the node, scope and type-dependency graphs of a lowered tree."""

    node_graph = gen_node_graph(tree)
    scope_graph, node_scopes = gen_scope_graph(tree)
    type_graph, type_tags = gen_type_dependencies(node_graph, tree)
    return AnalysisResult(node_graph, scope_graph, node_scopes, type_graph, type_tags)


__all__ = [
    "AnalysisResult",
    "CompilationResult",
    "analyse",
    "compile_and_evaluate",
    "compile_source",
]
