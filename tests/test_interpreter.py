import sys
import typing
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from gale.compiler import hlr, mlr, values  # noqa: E402
from gale.compiler.errors import InterpretFailure, InvariantViolation  # noqa: E402
from gale.compiler.flat_tree import ROOT_ID  # noqa: E402
from gale.compiler.interpreter import (  # noqa: E402
    Environment,
    Interpreter,
    build_program,
    interpret,
)
from gale.compiler.lowerer import lower  # noqa: E402
from gale.compiler.pipeline import compile_and_evaluate  # noqa: E402
from gale.natives import NativeDeclaration  # noqa: E402


def _run(src, natives=None, check_types=True):
    _, value = compile_and_evaluate(src, natives, check_types=check_types)
    return value


def test_main_is_seeded_with_three():
    assert _run("let main : ui8 -> ui8 = \\x => x * x;") == values.Number(9)


def test_applied_lambda_squares_its_argument():
    value = _run("let main : ui8 -> ui8 = \\n => (\\x => x * x) 5;", check_types=False)
    assert value == values.Number(25)


def test_array_indexing():
    value = _run("let main : ui8 -> ui8 = \\n => [10, 20, 30] !! 1;", check_types=False)
    assert value == values.Number(20)


@pytest.mark.parametrize("index", [5, 3])
def test_array_index_out_of_bounds(index):
    with pytest.raises(InvariantViolation, match="out of bounds"):
        _run(f"let main : ui8 -> ui8 = \\n => [10, 20, 30] !! {index};", check_types=False)


def test_tuple_argument_binds_positionally():
    src = (
        "let add : (ui8, ui8) -> ui8 = \\(a, b) => a + b;"
        "let main : ui8 -> ui8 = \\n => add (n, n);"
    )
    assert _run(src) == values.Number(6)


def test_block_evaluates_lets_and_returns_last_value():
    src = "let main : ui8 -> ui8 = \\x => { let y : ui8 = x + 1; y * y };"
    assert _run(src) == values.Number(16)


def test_functions_call_each_other_by_name():
    src = (
        "let double : ui8 -> ui8 = \\v => v + v;"
        "let main : ui8 -> ui8 = \\n => double (double n);"
    )
    assert _run(src) == values.Number(12)


def test_function_names_evaluate_to_function_values():
    src = "let helper : ui8 -> ui8 = \\v => v; let main : ui8 -> ui8 = \\n => helper;"
    assert _run(src, check_types=False) == values.Function("helper")


def test_single_element_tuple_is_bound_whole():
    identity = hlr.Let(
        hlr.Identifier("identity"),
        hlr.IdentifierType("ui8"),
        hlr.Lambda([hlr.Identifier("t")], hlr.Identifier("t")),
    )
    main = hlr.Let(
        hlr.Identifier("main"),
        hlr.IdentifierType("ui8"),
        hlr.Lambda(
            [hlr.Identifier("n")],
            hlr.App(hlr.Identifier("identity"), hlr.Tuple([hlr.Number(7)])),
        ),
    )
    value = interpret(lower(hlr.File([identity, main])))
    assert value == values.Tuple([values.Number(7)])
    assert str(value) == "(7)"


def test_println_writes_to_stdout(capsys):
    src = 'let main : ui8 -> string = \\n => { std.println "hello"; "done" };'
    assert _run(src) == values.Text("done")
    assert capsys.readouterr().out == "hello\n"


def test_print_has_no_newline(capsys):
    src = 'let main : ui8 -> string = \\n => { std.print "a"; std.print "b"; "" };'
    _run(src)
    assert capsys.readouterr().out == "ab"


def test_read_returns_file_contents(tmp_path):
    target = tmp_path / "input.txt"
    target.write_text("payload", encoding="utf-8")
    src = f'let main : ui8 -> string = \\n => std.read "{target}";'
    assert _run(src) == values.Text("payload")


def test_read_missing_file_is_invariant_violation(tmp_path):
    src = f'let main : ui8 -> string = \\n => std.read "{tmp_path / "missing.txt"}";'
    with pytest.raises(InvariantViolation, match="could not read"):
        _run(src)


def test_to_string_renders_debug_form():
    value = _run("let main : ui8 -> string = \\n => std.to_string n;")
    assert value == values.Text(repr(values.Number(3)))


def test_extra_native_with_host_implementation():
    def triple(program, env):
        return values.Number(env.lookup("in").value * 3)

    natives = [NativeDeclaration("std.triple", "UI8", "UI8", implementation=triple)]
    value = _run("let main : ui8 -> ui8 = \\n => std.triple n;", natives)
    assert value == values.Number(9)


def test_extra_native_without_implementation_is_rejected():
    tree = lower(hlr.File([]))
    with pytest.raises(InvariantViolation, match="no host implementation"):
        build_program(tree, [NativeDeclaration("std.nothing", "UI8", "UI8")])


@pytest.mark.parametrize(
    "src, message",
    [
        ("let helper : ui8 -> ui8 = \\x => x;", "No main"),
        ("let main : ui8 -> ui8 = \\x => y;", "Could not find identifier y"),
        ("let main : ui8 -> ui8 = \\x => nothing x;", "Could not find function nothing"),
        ('let main : ui8 -> ui8 = \\x => x + "a";', "Invalid binop nodes"),
        ("let main : ui8 -> ui8 = \\x => {};", "Expected seq to produce value"),
        (
            "let main : ui8 -> ui8 = \\x => { let f : ui8 = \\y => y; f x };",
            "Cannot interpret this node",
        ),
    ],
)
def test_interpret_failures(src, message):
    with pytest.raises(InterpretFailure, match=message):
        _run(src, check_types=False)


def test_arity_mismatches_are_invariant_violations():
    src = (
        "let add : (ui8, ui8) -> ui8 = \\(a, b) => a + b;"
        "let main : ui8 -> ui8 = \\n => add n;"
    )
    with pytest.raises(InvariantViolation, match="expects 2 arguments, got 1"):
        _run(src, check_types=False)

    src = "let one : ui8 -> ui8 = \\a => a; let main : ui8 -> ui8 = \\n => one (n, n);"
    with pytest.raises(InvariantViolation, match="expects 1 arguments, got 2"):
        _run(src, check_types=False)

    # A one-element tuple still needs exactly one parameter to land in.
    add = hlr.Let(
        hlr.Identifier("add"),
        hlr.IdentifierType("ui8"),
        hlr.Lambda([hlr.Identifier("a"), hlr.Identifier("b")], hlr.Identifier("a")),
    )
    main = hlr.Let(
        hlr.Identifier("main"),
        hlr.IdentifierType("ui8"),
        hlr.Lambda(
            [hlr.Identifier("n")],
            hlr.App(hlr.Identifier("add"), hlr.Tuple([hlr.Number(7)])),
        ),
    )
    with pytest.raises(InvariantViolation, match="expects 2 arguments, got 1"):
        interpret(lower(hlr.File([add, main])))


@pytest.mark.parametrize("native", ["std.print", "std.println"])
def test_print_natives_reject_non_text(native, capsys):
    src = f"let main : ui8 -> ui8 = \\n => {{ {native} n; n }};"
    with pytest.raises(InvariantViolation, match=f"{native} expects text, got Number"):
        _run(src, check_types=False)
    assert capsys.readouterr().out == ""


def test_native_with_extra_parameters_is_rejected():
    tree = lower(hlr.File([]))
    wide = NativeDeclaration(
        "std.pair", "UI8", "UI8", parameters=("in", "extra"), implementation=lambda p, e: e
    )
    with pytest.raises(InvariantViolation, match="single parameter 'in'"):
        build_program(tree, [wide])


def test_native_without_in_binding_is_invariant_violation():
    tree = lower(hlr.File([]))
    program = build_program(tree)
    interpreter = Interpreter(tree, program)
    with pytest.raises(InvariantViolation, match="'in' binding"):
        interpreter.invoke(program.lookup("std.println"), Environment())


def test_non_expression_nodes_cannot_be_interpreted():
    tree = lower(hlr.File([]))
    interpreter = Interpreter(tree, build_program(tree))
    with pytest.raises(InterpretFailure, match="Cannot interpret this node: File"):
        interpreter.evaluate(ROOT_ID, Environment())


def test_expression_rules_cover_every_value_variant():
    interpreter = Interpreter(lower(hlr.File([])), build_program(lower(hlr.File([]))))
    interpretable = set(interpreter._dispatch)
    non_values = {mlr.File, mlr.GaleFunction, mlr.NativeFunction, *mlr.TYPE_NODES}
    assert interpretable | non_values == set(typing.get_args(mlr.Node))
    assert not interpretable & non_values


def test_value_display():
    assert str(values.Tuple([values.Number(1), values.Number(2)])) == "(12)"
    assert str(values.Array([values.Number(1), values.Text("a")])) == "[1a]"
    assert str(values.Boolean(True)) == "true"
    assert str(values.Boolean(False)) == "false"
    assert str(values.Void) == "void"
    assert str(values.Function("main")) == "main"
