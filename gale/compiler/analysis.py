"""Graphs derived from the lowered tree, and their exports."""

from __future__ import annotations

from enum import Enum
import logging
from pathlib import Path
from typing import Callable, Optional

try:
    import matplotlib.pyplot as plt
except ModuleNotFoundError:  # pragma: no cover
    plt = None

try:
    import pydot
except ModuleNotFoundError:  # pragma: no cover
    pydot = None

from ..constants import NODE_COLORS, SCOPE_COLOR
from . import mlr
from .errors import InvariantViolation
from .flat_tree import FlatTree, NodeId
from .graph import Edge, EdgeProperty, Graph, Vertex, VertexProperty
from .types import Type

logger = logging.getLogger(__name__)


class DependencyType(Enum):
    EQUAL = "="
    IN = "∈"

    def __str__(self) -> str:
        return self.value


def gen_node_graph(tree: FlatTree) -> Graph:
    """Mirror the live parent/child structure of ``tree`` into a graph.

    Vertex ids are the arena node ids.
    """

    graph = Graph()
    for node_id, _ in tree.iter_live():
        graph.make_vertex(node_id)
        for child in tree.get_children(node_id):
            graph.new_edge(node_id, child)
    return graph


def gen_type_dependencies(
    node_graph: Graph, tree: FlatTree
) -> tuple[Graph, EdgeProperty[DependencyType]]:
    """Build the type-dependency graph over the vertices of ``node_graph``.

    Each edge is an obligation between two program points: ``EQUAL`` when
    both must have the same type, ``IN`` when the source is an element of
    the target. The array-index edge (index → array) carries no tag.
    """

    deps = Graph()
    tags: EdgeProperty[DependencyType] = EdgeProperty()

    def link(a, b, tag):
        edge = deps.new_edge(a, b)
        if tag is not None:
            tags.insert(edge, tag)

    for vertex in node_graph.iter_vertices():
        deps.make_vertex(vertex)

    for vertex in node_graph.iter_vertices():
        node = tree.get_node_value(vertex)
        if node is None:
            raise InvariantViolation(f"Node graph vertex {vertex} is not a live arena node")

        if isinstance(node, mlr.Let):
            link(node.exp, node.exp_type, DependencyType.EQUAL)
            link(node.id, node.exp_type, DependencyType.EQUAL)
        elif isinstance(node, mlr.ArrayType):
            link(vertex, node.value_type, DependencyType.IN)
        elif isinstance(node, mlr.Array):
            for element in node.elements:
                link(element, vertex, DependencyType.IN)
        elif isinstance(node, mlr.Apply):
            link(vertex, node.fn_name, DependencyType.EQUAL)
        elif isinstance(node, mlr.BinOp):
            if node.op_type is mlr.BinOpType.ARR_INDEX:
                link(node.rhs, node.lhs, None)
            else:
                link(node.rhs, node.lhs, DependencyType.EQUAL)
                link(node.lhs, node.rhs, DependencyType.EQUAL)

    logger.debug(
        "type dependency graph: %d vertices, %d edges", deps.vertex_count(), deps.edge_count()
    )
    return deps, tags


def gen_scope_graph(tree: FlatTree) -> tuple[Graph, VertexProperty[Vertex]]:
    """Allocate one scope per File, Function and Seq node.

    Returns the scope graph, whose edges point from a scope to the scope it
    is nested in, and the node id → scope vertex map.
    """

    scopes = Graph()
    node_scopes: VertexProperty[Vertex] = VertexProperty()

    def parent_scope(node_id):
        scope = node_scopes.get(tree.get_parent(node_id))
        if scope is None:
            raise InvariantViolation(f"Parent of node {node_id} has no resolved scope")
        return scope

    for node_id, node in tree.iter_preorder():
        if isinstance(node, mlr.File):
            node_scopes.insert(node_id, scopes.new_vertex())
        elif isinstance(node, (mlr.GaleFunction, mlr.NativeFunction, mlr.Seq)):
            enclosing = parent_scope(node_id)
            scope = scopes.new_vertex()
            scopes.new_edge(scope, enclosing)
            node_scopes.insert(node_id, scope)
        else:
            node_scopes.insert(node_id, parent_scope(node_id))

    logger.debug("scope graph: %d scopes over %d nodes", scopes.vertex_count(), len(node_scopes))
    return scopes, node_scopes


def solve_type_dependencies(
    graph: Graph, tags: EdgeProperty[DependencyType]
) -> VertexProperty[Type]:
    """Resolve a type for every vertex of a type-dependency graph.

    Extension point: no propagation is performed yet, so the returned map
    is empty. The graph and tags from :func:`gen_type_dependencies` are the
    complete input a solver needs.
    """

    return VertexProperty()


# -- exports ----------------------------------------------------------------


def tree_vertex_label(tree: FlatTree) -> Callable[[Vertex], str]:
    def label(vertex):
        node = tree.get_node_value(vertex)
        return mlr.describe(node) if node is not None else "<deleted>"

    return label


def tag_edge_label(tags: Optional[EdgeProperty]) -> Callable[[Edge], str]:
    def label(edge):
        if tags is None:
            return ""
        tag = tags.get(edge)
        return str(tag) if tag is not None else ""

    return label


def print_as_graphviz(
    graph: Graph,
    vertex_label: Callable[[Vertex], str],
    edge_label: Callable[[Edge], str],
) -> str:
    """Render ``graph`` as DOT text with edges in sorted order."""

    lines = ["digraph G {"]
    for src, dst in sorted(graph.edges):
        lines.append(
            f'  "{src} {vertex_label(src)}" -> "{dst} {vertex_label(dst)}" '
            f'[ label="{edge_label((src, dst))}" ];'
        )
    lines.append("}")
    return "\n".join(lines) + "\n"


def _vertex_color(node) -> str:
    if node is None:
        return SCOPE_COLOR
    kind = mlr.node_kind(node)
    if kind in NODE_COLORS:
        return NODE_COLORS[kind]
    if isinstance(node, mlr.TYPE_NODES):
        return NODE_COLORS["type"]
    return NODE_COLORS["value"]


def export_graphviz(
    graph: Graph,
    output_path,
    vertex_label: Callable[[Vertex], str],
    edge_label: Callable[[Edge], str],
    tree: FlatTree | None = None,
):
    """Write ``graph`` as an SVG through Graphviz.

    When ``tree`` is given, vertices are arena nodes and are coloured by
    node kind; otherwise they are drawn as scopes.
    """

    if pydot is None:
        raise RuntimeError("Graphviz export requires the optional pydot dependency")

    dot = pydot.Dot("G", graph_type="digraph", rankdir="TB", fontname="Helvetica")
    for vertex in sorted(graph.vertices):
        node = tree.get_node_value(vertex) if tree is not None else None
        dot.add_node(
            pydot.Node(
                str(vertex),
                label=f"{vertex} {vertex_label(vertex)}",
                shape="box" if tree is not None else "ellipse",
                style="filled",
                fillcolor=_vertex_color(node),
                fontname="Helvetica",
            )
        )
    for src, dst in sorted(graph.edges):
        dot.add_edge(pydot.Edge(str(src), str(dst), label=edge_label((src, dst))))

    output_path = Path(output_path)
    if output_path.parent and not output_path.parent.exists():
        output_path.parent.mkdir(parents=True, exist_ok=True)

    dot.write_svg(str(output_path))
    return output_path


def visualize_graph(graph: Graph, vertex_label, title="Gale graph"):  # pragma: no cover
    """Show ``graph`` in a matplotlib window using a spring layout."""

    if plt is None:
        raise RuntimeError("Visualization requires matplotlib to be installed")

    import networkx as nx

    nx_graph = graph.to_networkx()
    positions = nx.spring_layout(nx_graph, seed=42)
    labels = {v: f"{v}\n{vertex_label(v)}" for v in nx_graph.nodes}
    plt.figure()
    nx.draw(
        nx_graph,
        positions,
        with_labels=True,
        labels=labels,
        node_color="#ECEFF1",
        edgecolors="black",
        font_size=8,
    )
    plt.title(title)
    plt.tight_layout()
    plt.show()


def tree_to_dict(tree: FlatTree) -> list[dict]:
    """Serializable listing of every live arena node."""

    return [
        {
            "id": node_id,
            "parent": tree.get_parent(node_id),
            "kind": mlr.node_kind(node),
            "label": mlr.describe(node),
            "children": tree.get_children(node_id),
        }
        for node_id, node in tree.iter_live()
    ]


__all__ = [
    "DependencyType",
    "export_graphviz",
    "gen_node_graph",
    "gen_scope_graph",
    "gen_type_dependencies",
    "print_as_graphviz",
    "solve_type_dependencies",
    "tag_edge_label",
    "tree_to_dict",
    "tree_vertex_label",
    "visualize_graph",
]
