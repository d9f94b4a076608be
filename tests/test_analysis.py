import sys
import types
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from gale.compiler import analysis  # noqa: E402
from gale.compiler.analysis import (  # noqa: E402
    DependencyType,
    export_graphviz,
    gen_node_graph,
    gen_scope_graph,
    gen_type_dependencies,
    print_as_graphviz,
    solve_type_dependencies,
    tag_edge_label,
    tree_to_dict,
    tree_vertex_label,
)
from gale.compiler.lowerer import lower  # noqa: E402
from gale.compiler.parser import parse_source  # noqa: E402


def _lower_source(src):
    return lower(parse_source(src))


def _deps(src):
    tree = _lower_source(src)
    graph, tags = gen_type_dependencies(gen_node_graph(tree), tree)
    return graph, {edge: tags.get(edge) for edge in graph.edges}


def test_node_graph_mirrors_live_tree():
    tree = _lower_source("let main : ui8 -> ui8 = \\x => x;")
    graph = gen_node_graph(tree)

    assert graph.vertices == {0, 1, 2, 3}
    assert graph.edges == {(0, 1), (1, 2), (1, 3)}


def test_node_graph_skips_deleted_subtrees():
    tree = _lower_source("let main : ui8 -> ui8 = \\x => x + x;")
    tree.delete_node(3)
    graph = gen_node_graph(tree)

    assert graph.vertices == {0, 1, 2}
    assert graph.edges == {(0, 1), (1, 2)}


def test_scope_graph_allocates_file_function_and_seq_scopes():
    tree = _lower_source("let main : ui8 -> ui8 = \\x => { let y : ui8 = x; y };")
    scopes, node_scopes = gen_scope_graph(tree)

    assert scopes.vertex_count() == 3
    assert scopes.edges == {(1, 0), (2, 1)}
    assert node_scopes.get(0) == 0
    assert node_scopes.get(1) == 1
    assert node_scopes.get(2) == 1
    assert node_scopes.get(3) == 2
    assert {node_scopes.get(n) for n in range(4, 9)} == {2}


def test_scope_graph_gives_each_function_its_own_scope():
    tree = _lower_source(
        "let f : ui8 -> ui8 = \\a => a; let main : ui8 -> ui8 = \\b => f b;"
    )
    scopes, _ = gen_scope_graph(tree)
    assert scopes.vertex_count() == 3
    assert scopes.edges == {(1, 0), (2, 0)}


def test_let_dependencies():
    graph, tags = _deps("let main : ui8 -> ui8 = \\x => { let y : ui8 = x; y };")
    # 4 Let, 5 Identifier(y), 6 IdentifierType(ui8), 7 Identifier(x)
    assert tags == {(7, 6): DependencyType.EQUAL, (5, 6): DependencyType.EQUAL}
    assert graph.vertex_count() == 9


def test_array_and_array_type_dependencies():
    _, tags = _deps(
        "let main : ui8 -> ui8 = \\x => { let a : [ui8; 2] = [1, 2]; x };"
    )
    assert tags == {
        (8, 6): DependencyType.EQUAL,
        (5, 6): DependencyType.EQUAL,
        (6, 7): DependencyType.IN,
        (9, 8): DependencyType.IN,
        (10, 8): DependencyType.IN,
    }


def test_binop_and_apply_dependencies():
    _, tags = _deps("let main : ui8 -> ui8 = \\x => x + x;")
    assert tags == {(4, 5): DependencyType.EQUAL, (5, 4): DependencyType.EQUAL}

    _, tags = _deps("let main : ui8 -> string = \\n => std.to_string n;")
    assert tags == {(3, 4): DependencyType.EQUAL}


def test_array_index_edge_is_untagged():
    graph, tags = _deps("let main : ui8 -> ui8 = \\n => [10, 20] !! 1;")
    # 3 BinOp(!!), 4 Array, 5 Number(10), 6 Number(20), 7 Number(1)
    assert graph.has_edge(7, 4)
    assert tags == {
        (5, 4): DependencyType.IN,
        (6, 4): DependencyType.IN,
        (7, 4): None,
    }


def test_solver_returns_empty_assignment():
    tree = _lower_source("let main : ui8 -> ui8 = \\x => x;")
    graph, tags = gen_type_dependencies(gen_node_graph(tree), tree)
    assert len(solve_type_dependencies(graph, tags)) == 0


def test_print_as_graphviz_format():
    tree = _lower_source("let main : ui8 -> ui8 = \\x => x;")
    dot = print_as_graphviz(gen_node_graph(tree), tree_vertex_label(tree), tag_edge_label(None))

    assert dot == (
        "digraph G {\n"
        '  "0 File" -> "1 Function(main)" [ label="" ];\n'
        '  "1 Function(main)" -> "2 Identifier(x)" [ label="" ];\n'
        '  "1 Function(main)" -> "3 Identifier(x)" [ label="" ];\n'
        "}\n"
    )


def test_print_as_graphviz_uses_dependency_labels():
    tree = _lower_source("let main : ui8 -> ui8 = \\x => x + x;")
    graph, tags = gen_type_dependencies(gen_node_graph(tree), tree)
    dot = print_as_graphviz(graph, tree_vertex_label(tree), tag_edge_label(tags))

    assert '  "4 Identifier(x)" -> "5 Identifier(x)" [ label="=" ];' in dot.splitlines()


def test_tree_to_dict_lists_live_nodes():
    tree = _lower_source("let main : ui8 -> ui8 = \\x => x;")
    listing = tree_to_dict(tree)

    assert [entry["kind"] for entry in listing] == ["File", "Function", "Identifier", "Identifier"]
    assert listing[1] == {
        "id": 1,
        "parent": 0,
        "kind": "Function",
        "label": "Function(main)",
        "children": [2, 3],
    }


def test_export_graphviz_with_stub(monkeypatch, tmp_path):
    class FakeNode:
        def __init__(self, name, **kwargs):
            self.name = name
            self.attrs = kwargs

    class FakeEdge:
        def __init__(self, src, dst, **kwargs):
            self.src = src
            self.dst = dst
            self.attrs = kwargs

    class FakeDot:
        def __init__(self, *args, **kwargs):
            self.nodes = []
            self.edges = []

        def add_node(self, node):
            self.nodes.append(node)

        def add_edge(self, edge):
            self.edges.append(edge)

        def write_svg(self, path):
            Path(path).write_text("<svg/>", encoding="utf-8")

    created = []

    def make_dot(*args, **kwargs):
        dot = FakeDot(*args, **kwargs)
        created.append(dot)
        return dot

    fake_pydot = types.ModuleType("pydot")
    fake_pydot.Dot = make_dot
    fake_pydot.Node = FakeNode
    fake_pydot.Edge = FakeEdge
    monkeypatch.setattr(analysis, "pydot", fake_pydot)

    tree = _lower_source("let main : ui8 -> ui8 = \\x => x + x;")
    graph, tags = gen_type_dependencies(gen_node_graph(tree), tree)
    output = tmp_path / "nested" / "types.svg"
    result = export_graphviz(
        graph, output, tree_vertex_label(tree), tag_edge_label(tags), tree=tree
    )

    assert result == output
    assert output.read_text(encoding="utf-8") == "<svg/>"
    (dot,) = created
    assert [node.name for node in dot.nodes] == ["0", "1", "2", "3", "4", "5"]
    assert dot.nodes[1].attrs["fillcolor"] == "#9575CD"
    assert dot.nodes[1].attrs["label"] == "1 Function(main)"
    assert {(e.src, e.dst, e.attrs["label"]) for e in dot.edges} == {
        ("4", "5", "="),
        ("5", "4", "="),
    }


def test_export_graphviz_requires_pydot(monkeypatch, tmp_path):
    monkeypatch.setattr(analysis, "pydot", None)
    tree = _lower_source("let main : ui8 -> ui8 = \\x => x;")
    with pytest.raises(RuntimeError, match="pydot"):
        export_graphviz(
            gen_node_graph(tree), tmp_path / "out.svg", tree_vertex_label(tree), tag_edge_label(None)
        )
