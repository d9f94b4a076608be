"""Tree-walking interpreter over the lowered arena tree."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..constants import ENTRY_FUNCTION, MAIN_PARAMETER_SEED, NATIVE_PARAMETER
from ..natives import standard_prelude
from . import mlr, values
from .errors import InterpretFailure, InvariantViolation
from .flat_tree import ROOT_ID, FlatTree, NodeId
from .values import Value

logger = logging.getLogger(__name__)


class Program:
    """Name → function table for one lowered file plus the prelude."""

    def __init__(self):
        self.functions: dict[str, mlr.Function] = {}

    def extend(self, function: mlr.Function) -> None:
        self.functions[function.name] = function

    def lookup(self, name: str) -> Optional[mlr.Function]:
        return self.functions.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.functions

    def __repr__(self) -> str:  # pragma: no cover - representation helper
        return f"Program({sorted(self.functions)})"


class Environment:
    """Variable bindings for one function invocation; nothing is captured."""

    def __init__(self):
        self.variables: dict[str, Value] = {}

    def extend(self, name: str, value: Value) -> None:
        self.variables[name] = value

    def lookup(self, name: str) -> Optional[Value]:
        return self.variables.get(name)

    def __repr__(self) -> str:  # pragma: no cover - representation helper
        return f"Environment({self.variables!r})"


def _native_argument(env: Environment, native: str) -> Value:
    value = env.lookup(NATIVE_PARAMETER)
    if value is None:
        raise InvariantViolation(f"{native} called without an '{NATIVE_PARAMETER}' binding")
    return value


def _native_text(env: Environment, native: str) -> values.Text:
    value = _native_argument(env, native)
    if not isinstance(value, values.Text):
        raise InvariantViolation(f"{native} expects text, got {value!r}")
    return value


def native_print(program: Program, env: Environment) -> Value:
    print(_native_text(env, "std.print"), end="")
    return values.Void


def native_println(program: Program, env: Environment) -> Value:
    print(_native_text(env, "std.println"))
    return values.Void


def native_read(program: Program, env: Environment) -> Value:
    path = _native_text(env, "std.read")
    try:
        return values.Text(Path(path.text).read_text(encoding="utf-8"))
    except OSError as exc:
        raise InvariantViolation(f"std.read could not read {path.text}: {exc}") from exc


def native_to_string(program: Program, env: Environment) -> Value:
    return values.Text(repr(_native_argument(env, "std.to_string")))


NATIVE_IMPLEMENTATIONS = {
    "std.print": native_print,
    "std.println": native_println,
    "std.read": native_read,
    "std.to_string": native_to_string,
}


def build_program(tree: FlatTree, extra_natives=None) -> Program:
    """Collect the file's functions and the native prelude into a Program."""

    root = tree.get_node_value(ROOT_ID)
    if not isinstance(root, mlr.File):
        raise InvariantViolation("Lowered tree root must be a File node")

    program = Program()
    for fn_id in root.functions:
        function = tree.get_node_value(fn_id)
        if not isinstance(function, mlr.GaleFunction):
            raise InvariantViolation(f"File entry {fn_id} is not a function")
        program.extend(function)

    for decl in standard_prelude(extra_natives).values():
        implementation = decl.implementation or NATIVE_IMPLEMENTATIONS.get(decl.name)
        if implementation is None:
            raise InvariantViolation(f"Native {decl.name} has no host implementation")
        if decl.arity != 1 or decl.parameters[0] != NATIVE_PARAMETER:
            raise InvariantViolation(
                f"Native {decl.name} must take the single parameter '{NATIVE_PARAMETER}'"
            )
        program.extend(mlr.NativeFunction(decl.name, list(decl.parameters), implementation))
    return program


class Interpreter:
    """Evaluates arena nodes against a :class:`Program`."""

    def __init__(self, tree: FlatTree, program: Program):
        self.tree = tree
        self.program = program
        self._dispatch = {
            mlr.Let: self._eval_let,
            mlr.Seq: self._eval_seq,
            mlr.Identifier: self._eval_identifier,
            mlr.BinOp: self._eval_binop,
            mlr.Apply: self._eval_apply,
            mlr.Number: lambda node, env: values.Number(node.value),
            mlr.Boolean: lambda node, env: values.Boolean(node.value),
            mlr.Text: lambda node, env: values.Text(node.text),
            mlr.Tuple: self._eval_tuple,
            mlr.Array: self._eval_array,
        }

    def _node(self, node_id: NodeId):
        node = self.tree.get_node_value(node_id)
        if node is None:
            raise InvariantViolation(f"Node {node_id} was deleted")
        return node

    def evaluate(self, node_id: NodeId, env: Environment) -> Value:
        node = self._node(node_id)
        handler = self._dispatch.get(type(node))
        if handler is None:
            raise InterpretFailure(f"Cannot interpret this node: {mlr.describe(node)}")
        return handler(node, env)

    def invoke(self, function: mlr.Function, env: Environment) -> Value:
        if isinstance(function, mlr.NativeFunction):
            return function.implementation(self.program, env)
        return self.evaluate(function.implementation, env)

    def parameter_names(self, function: mlr.Function) -> list[str]:
        if isinstance(function, mlr.NativeFunction):
            return list(function.parameters)
        names = []
        for param_id in function.parameters:
            param = self._node(param_id)
            if not isinstance(param, mlr.Identifier):
                raise InvariantViolation(f"Parameter {param_id} of {function.name} is not an identifier")
            names.append(param.name)
        return names

    def run_entry(self) -> Value:
        """Invoke ``main`` with every parameter seeded to the fixed number."""

        entry = self.program.lookup(ENTRY_FUNCTION)
        if entry is None:
            raise InterpretFailure("No main")

        env = Environment()
        for name in self.program.functions:
            env.extend(name, values.Function(name))
        for name in self.parameter_names(entry):
            env.extend(name, values.Number(MAIN_PARAMETER_SEED))

        logger.debug("running %s with %d functions in scope", ENTRY_FUNCTION, len(self.program.functions))
        return self.invoke(entry, env)

    # -- node rules -----------------------------------------------------

    def _eval_let(self, node: mlr.Let, env: Environment) -> Value:
        ident = self._node(node.id)
        if not isinstance(ident, mlr.Identifier):
            raise InvariantViolation(f"Let binds a non-identifier: {mlr.describe(ident)}")
        env.extend(ident.name, self.evaluate(node.exp, env))
        return values.Void

    def _eval_seq(self, node: mlr.Seq, env: Environment) -> Value:
        if not node.elements:
            raise InterpretFailure("Expected seq to produce value")
        for element in node.elements[:-1]:
            self.evaluate(element, env)
        return self.evaluate(node.elements[-1], env)

    def _eval_identifier(self, node: mlr.Identifier, env: Environment) -> Value:
        value = env.lookup(node.name)
        if value is None:
            raise InterpretFailure(f"Could not find identifier {node.name}")
        return value

    def _eval_binop(self, node: mlr.BinOp, env: Environment) -> Value:
        lhs = self.evaluate(node.lhs, env)
        rhs = self.evaluate(node.rhs, env)
        op = node.op_type

        if isinstance(lhs, values.Number) and isinstance(rhs, values.Number):
            if op is mlr.BinOpType.MULT:
                return values.Number(lhs.value * rhs.value)
            if op is mlr.BinOpType.PLUS:
                return values.Number(lhs.value + rhs.value)
        if (
            op is mlr.BinOpType.ARR_INDEX
            and isinstance(lhs, values.Array)
            and isinstance(rhs, values.Number)
        ):
            index = rhs.value
            if index < 0 or index >= len(lhs.elements):
                raise InvariantViolation(
                    f"Array index {index} out of bounds for length {len(lhs.elements)}"
                )
            return lhs.elements[index]
        raise InterpretFailure(f"Invalid binop nodes: {lhs!r}, {rhs!r}")

    def _eval_apply(self, node: mlr.Apply, env: Environment) -> Value:
        argument = self.evaluate(node.param, env)

        callee = self._node(node.fn_name)
        if not isinstance(callee, mlr.Identifier):
            raise InvariantViolation(f"Apply target is not a name: {mlr.describe(callee)}")
        function = self.program.lookup(callee.name)
        if function is None:
            raise InterpretFailure(f"Could not find function {callee.name}")

        parameters = self.parameter_names(function)
        call_env = Environment()
        if isinstance(argument, values.Tuple):
            if len(argument.elements) == 1:
                # A one-element tuple is bound whole, not unpacked.
                if len(parameters) != 1:
                    raise InvariantViolation(
                        f"{function.name} expects {len(parameters)} arguments, got 1"
                    )
                call_env.extend(parameters[0], values.Tuple(argument.elements))
            else:
                if len(parameters) != len(argument.elements):
                    raise InvariantViolation(
                        f"{function.name} expects {len(parameters)} arguments, "
                        f"got {len(argument.elements)}"
                    )
                for name, value in zip(parameters, argument.elements):
                    call_env.extend(name, value)
        else:
            if len(parameters) != 1:
                raise InvariantViolation(
                    f"{function.name} expects {len(parameters)} arguments, got 1"
                )
            call_env.extend(parameters[0], argument)

        return self.invoke(function, call_env)

    def _eval_tuple(self, node: mlr.Tuple, env: Environment) -> Value:
        return values.Tuple([self.evaluate(e, env) for e in node.elements])

    def _eval_array(self, node: mlr.Array, env: Environment) -> Value:
        return values.Array([self.evaluate(e, env) for e in node.elements])


def interpret(tree: FlatTree, extra_natives=None) -> Value:
    """Run the ``main`` function of a lowered tree and return its value."""

    return Interpreter(tree, build_program(tree, extra_natives)).run_entry()


__all__ = [
    "Environment",
    "Interpreter",
    "NATIVE_IMPLEMENTATIONS",
    "Program",
    "build_program",
    "interpret",
    "native_print",
    "native_println",
    "native_read",
    "native_to_string",
]
