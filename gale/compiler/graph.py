"""Directed graph substrate with side-table vertex and edge properties."""

from __future__ import annotations

from typing import Generic, Iterator, Optional, TypeVar

import networkx as nx

T = TypeVar("T")

Vertex = int
Edge = tuple[int, int]


class Graph:
    """Vertex/edge set backed by a :class:`networkx.DiGraph`.

    Vertices are dense non-negative integers handed out by a monotonic
    allocator. Edges are ordered pairs; inserting an edge twice is a no-op.
    """

    def __init__(self):
        self._graph = nx.DiGraph()
        self._next_vertex: Vertex = 0

    def new_vertex(self) -> Vertex:
        vertex = self._next_vertex
        self._graph.add_node(vertex)
        self._next_vertex += 1
        return vertex

    def make_vertex(self, vertex: Vertex) -> bool:
        """Insert ``vertex`` as-is; return ``True`` if it was not present."""

        if vertex >= self._next_vertex:
            self._next_vertex = vertex + 1
        if self._graph.has_node(vertex):
            return False
        self._graph.add_node(vertex)
        return True

    def delete_vertex(self, vertex: Vertex) -> None:
        if self._graph.has_node(vertex):
            self._graph.remove_node(vertex)

    def new_edge(self, a: Vertex, b: Vertex) -> Edge:
        self._graph.add_edge(a, b)
        return (a, b)

    def has_vertex(self, vertex: Vertex) -> bool:
        return self._graph.has_node(vertex)

    def has_edge(self, a: Vertex, b: Vertex) -> bool:
        return self._graph.has_edge(a, b)

    @property
    def vertices(self) -> set[Vertex]:
        return set(self._graph.nodes)

    @property
    def edges(self) -> set[Edge]:
        return set(self._graph.edges)

    def iter_vertices(self) -> Iterator[Vertex]:
        return iter(list(self._graph.nodes))

    def vertex_count(self) -> int:
        return self._graph.number_of_nodes()

    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def to_networkx(self) -> nx.DiGraph:
        """Return a copy of the backing graph for layout or algorithms."""

        return self._graph.copy()

    def __repr__(self) -> str:  # pragma: no cover - representation helper
        return f"Graph(vertices={self.vertex_count()}, edges={self.edge_count()})"


class _Property(Generic[T]):
    def __init__(self):
        self.property_map: dict = {}

    def get(self, key) -> Optional[T]:
        return self.property_map.get(key)

    def insert(self, key, value: T) -> None:
        self.property_map[key] = value

    def delete(self, key) -> None:
        self.property_map.pop(key, None)

    def __contains__(self, key) -> bool:
        return key in self.property_map

    def __len__(self) -> int:
        return len(self.property_map)

    def items(self):
        return self.property_map.items()


class VertexProperty(_Property[T]):
    """Values keyed by vertex; a missing vertex reads as ``None``."""


class EdgeProperty(_Property[T]):
    """Values keyed by ``(source, target)`` edge; missing reads as ``None``."""


__all__ = [
    "Edge",
    "EdgeProperty",
    "Graph",
    "Vertex",
    "VertexProperty",
]
