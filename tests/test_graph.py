import sys
from pathlib import Path

import networkx as nx

sys.path.append(str(Path(__file__).resolve().parents[1]))

from gale.compiler.graph import EdgeProperty, Graph, VertexProperty  # noqa: E402


def test_new_vertex_allocates_monotonically():
    graph = Graph()
    assert [graph.new_vertex() for _ in range(3)] == [0, 1, 2]
    graph.delete_vertex(2)
    assert graph.new_vertex() == 3
    assert graph.vertices == {0, 1, 3}


def test_make_vertex_advances_allocator_and_reports_insertion():
    graph = Graph()
    assert graph.make_vertex(5) is True
    assert graph.make_vertex(5) is False
    assert graph.new_vertex() == 6


def test_edges_are_idempotent_and_directed():
    graph = Graph()
    a, b = graph.new_vertex(), graph.new_vertex()
    assert graph.new_edge(a, b) == (a, b)
    graph.new_edge(a, b)

    assert graph.edge_count() == 1
    assert graph.has_edge(a, b)
    assert not graph.has_edge(b, a)
    assert graph.edges == {(a, b)}


def test_delete_vertex_drops_incident_edges():
    graph = Graph()
    a, b, c = (graph.new_vertex() for _ in range(3))
    graph.new_edge(a, b)
    graph.new_edge(b, c)
    graph.delete_vertex(b)

    assert not graph.has_vertex(b)
    assert graph.edges == set()
    graph.delete_vertex(b)  # already gone


def test_new_edge_inserts_missing_endpoints():
    graph = Graph()
    graph.new_edge(7, 8)
    assert graph.vertices == {7, 8}


def test_to_networkx_returns_independent_copy():
    graph = Graph()
    graph.new_edge(0, 1)
    copy = graph.to_networkx()

    assert isinstance(copy, nx.DiGraph)
    copy.add_edge(1, 0)
    assert not graph.has_edge(1, 0)


def test_property_maps_read_missing_keys_as_none():
    labels = VertexProperty()
    labels.insert(0, "file")
    assert labels.get(0) == "file"
    assert labels.get(1) is None
    assert 0 in labels and len(labels) == 1
    labels.delete(0)
    labels.delete(0)
    assert labels.get(0) is None

    tags = EdgeProperty()
    tags.insert((0, 1), "=")
    assert tags.get((0, 1)) == "="
    assert tags.get((1, 0)) is None
    assert dict(tags.items()) == {(0, 1): "="}
