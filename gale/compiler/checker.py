"""Bidirectional type checker over the surface tree.

Each node is checked either against an optional equality constraint handed
down by its parent, or synthesises its own type when unconstrained. The
first failure aborts the whole check.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional

from ..constants import BUILTIN_TYPE_NAMES
from ..natives import standard_prelude
from . import hlr
from .errors import CheckFailure, InvariantViolation
from .types import (
    INTEGER_KINDS,
    ArrayType,
    AtomKind,
    AtomType,
    FunctionType,
    ProductType,
    Type,
    UnitType,
    UNIT,
    type_from_descriptor,
)

logger = logging.getLogger(__name__)


class Context:
    """Variable and type-name bindings visible to the checker."""

    def __init__(self, parent: "Context | None" = None):
        self.parent = parent
        self.variables: dict[str, Type] = {}
        self.types: dict[str, Type] = {}

    @classmethod
    def with_prelude(cls, extra_natives=None) -> "Context":
        """Context seeded with built-in type names and native signatures."""

        ctx = cls()
        for name, descriptor in BUILTIN_TYPE_NAMES.items():
            ctx.add_type(name, type_from_descriptor(descriptor))
        for decl in standard_prelude(extra_natives).values():
            ctx.add_variable(
                decl.name,
                FunctionType(
                    type_from_descriptor(decl.arg_type),
                    type_from_descriptor(decl.return_type),
                ),
            )
        return ctx

    def add_variable(self, name: str, type_: Type) -> None:
        self.variables[name] = type_

    def get_variable(self, name: str) -> Optional[Type]:
        if name in self.variables:
            return self.variables[name]
        if self.parent is not None:
            return self.parent.get_variable(name)
        return None

    def add_type(self, name: str, type_: Type) -> None:
        self.types[name] = type_

    def get_type(self, name: str) -> Optional[Type]:
        if name in self.types:
            return self.types[name]
        if self.parent is not None:
            return self.parent.get_type(name)
        return None

    def __repr__(self) -> str:  # pragma: no cover - representation helper
        return f"Context(variables={len(self.variables)}, types={len(self.types)})"


@dataclass(frozen=True)
class Constraint:
    """Equality obligation: the node must resolve to exactly ``must_be``.

    A constraint without ``must_be`` is a placeholder and behaves as if the
    node were unconstrained.
    """

    must_be: Optional[Type] = None


def _required(ctr: Optional[Constraint]) -> Optional[Type]:
    if ctr is None:
        return None
    return ctr.must_be


class TypeChecker:
    """Walks a surface tree, recording bindings in :attr:`context`."""

    def __init__(self, context: Context | None = None):
        self.context = context if context is not None else Context.with_prelude()
        self._dispatch = {
            hlr.File: self._check_file,
            hlr.Let: self._check_let,
            hlr.Block: self._check_block,
            hlr.Identifier: self._check_identifier,
            hlr.BinOp: self._check_binop,
            hlr.Lambda: self._check_lambda,
            hlr.App: self._check_app,
            hlr.Number: self._check_number,
            hlr.Boolean: self._check_boolean,
            hlr.Text: self._check_text,
            hlr.Tuple: self._check_tuple,
            hlr.Array: self._check_array,
            hlr.SumType: self._check_sum_type,
            hlr.ProductType: self._check_product_type,
            hlr.IdentifierType: self._check_identifier_type,
            hlr.FunctionType: self._check_function_type,
            hlr.ArrayType: self._check_array_type,
            hlr.UnitType: self._check_unit_type,
        }

    def check(self, node: hlr.Tree, ctr: Optional[Constraint] = None) -> Optional[Type]:
        handler = self._dispatch.get(type(node))
        if handler is None:
            raise InvariantViolation(f"No type rule for surface node {type(node).__name__}")
        return handler(node, ctr)

    def _synth(self, node: hlr.Tree, ctr: Optional[Constraint], what: str) -> Type:
        """Check ``node`` and insist it produced a type."""

        result = self.check(node, ctr)
        if result is None:
            raise CheckFailure(f"Expected {what} to yield a type")
        return result

    # -- statements -----------------------------------------------------

    def _check_file(self, node: hlr.File, ctr):
        for statement in node.statements:
            self.check(statement, None)
        return None

    def _check_let(self, node: hlr.Let, ctr):
        expected = self.check(node.exp_type, None)
        if expected is None:
            raise CheckFailure("Expected let rhs to return a type")

        # Bound before the initializer so recursive definitions see themselves.
        self.context.add_variable(node.id.name, expected)
        actual = self.check(node.exp, Constraint(expected))
        if actual is None:
            raise CheckFailure("Expected let expression to yield type")
        if actual != expected:
            raise CheckFailure(
                f"Let type {expected} does not match expression type {actual}"
            )
        logger.debug("bound %s : %s", node.id.name, expected)
        return None

    def _check_block(self, node: hlr.Block, ctr):
        if not node.statements:
            raise CheckFailure("Expected block to end in a statement yielding its type")
        for statement in node.statements[:-1]:
            self.check(statement, None)
        return self.check(node.statements[-1], ctr)

    # -- expressions ----------------------------------------------------

    def _check_identifier(self, node: hlr.Identifier, ctr):
        found = self.context.get_variable(node.name)
        if found is None:
            raise CheckFailure(f"Unknown variable {node.name}")
        return found

    def _check_binop(self, node: hlr.BinOp, ctr):
        if node.op_type is hlr.BinOpType.ARR_INDEX:
            lhs_type = self._synth(node.lhs, None, "array index lhs")
            if not isinstance(lhs_type, ArrayType):
                raise CheckFailure("Lhs of array index operation must have array type")
            self.check(node.rhs, Constraint(AtomType(AtomKind.UI64)))
            return lhs_type.element

        lhs_type = self._synth(node.lhs, ctr, "binop lhs")
        rhs_type = self._synth(node.rhs, ctr, "binop rhs")
        if lhs_type != rhs_type:
            raise CheckFailure(f"BinOp types must be equal, got {lhs_type} and {rhs_type}")
        return lhs_type

    def _check_lambda(self, node: hlr.Lambda, ctr):
        if ctr is None:
            raise CheckFailure("Expected constraints")
        target = ctr.must_be
        if target is None:
            raise CheckFailure("Expected equality constraints")
        if not isinstance(target, FunctionType):
            raise CheckFailure(f"Expected function constraint, got {target}")

        from_type, to_type = target.from_type, target.to_type
        if isinstance(from_type, ProductType):
            if len(from_type.elements) != len(node.parameters):
                raise CheckFailure(
                    "Product type constraint not the same length as function parameter list"
                )
            for param, param_type in zip(node.parameters, from_type.elements):
                self.context.add_variable(param.name, param_type)
        elif isinstance(from_type, UnitType):
            pass
        else:
            if len(node.parameters) != 1:
                raise CheckFailure("Lambda has multiple parameters but single type was given")
            self.context.add_variable(node.parameters[0].name, from_type)

        body_type = self._synth(node.body, Constraint(to_type), "lambda body")
        if body_type != to_type:
            raise CheckFailure(
                f"Lambda body type {body_type} does not match return type {to_type}"
            )
        return FunctionType(from_type, to_type)

    def _check_app(self, node: hlr.App, ctr):
        fn_type = self.check(node.fn_exp, None)
        if not isinstance(fn_type, FunctionType):
            raise CheckFailure("Expected function type result")
        arg_type = self.check(node.param_exp, None)
        if arg_type is None:
            raise CheckFailure("Expected parameters to evaluate to type")
        if arg_type != fn_type.from_type:
            raise CheckFailure(
                f"Param type {fn_type.from_type} does not match argument type {arg_type}"
            )
        return fn_type.to_type

    def _check_number(self, node: hlr.Number, ctr):
        target = _required(ctr)
        if target is None:
            return AtomType(AtomKind.I64)
        if isinstance(target, AtomType) and target.kind in INTEGER_KINDS:
            return AtomType(target.kind)
        raise CheckFailure(f"Expected integer constraint, got {target}")

    def _check_boolean(self, node: hlr.Boolean, ctr):
        return AtomType(AtomKind.BOOLEAN)

    def _check_text(self, node: hlr.Text, ctr):
        return AtomType(AtomKind.TEXT)

    def _check_tuple(self, node: hlr.Tuple, ctr):
        elements = [self._synth(e, Constraint(), "tuple element") for e in node.elements]
        return ProductType(elements)

    def _check_array(self, node: hlr.Array, ctr):
        target = _required(ctr)
        if not node.elements:
            if target is None:
                raise CheckFailure(
                    "Empty array requires type constraint to determine array type"
                )
            return target

        elem_ctr = None
        if target is not None:
            if not isinstance(target, ArrayType):
                raise CheckFailure(
                    "Cannot satisfy non-array type constraint when checking array"
                )
            elem_ctr = Constraint(target.element)

        first = self._synth(node.elements[0], elem_ctr, "array element")
        for element in node.elements[1:]:
            if self._synth(element, elem_ctr, "array element") != first:
                raise CheckFailure("Array values must be of equal type")
        return ArrayType(first, len(node.elements))

    # -- type expressions -----------------------------------------------

    def _check_sum_type(self, node: hlr.SumType, ctr):
        # Sum types parse but carry no checked meaning yet.
        return None

    def _check_product_type(self, node: hlr.ProductType, ctr):
        return ProductType([self._synth(e, None, "product element") for e in node.elements])

    def _check_identifier_type(self, node: hlr.IdentifierType, ctr):
        found = self.context.get_type(node.name)
        if found is None:
            raise CheckFailure(f"Unknown type identifier: {node.name}")
        return found

    def _check_function_type(self, node: hlr.FunctionType, ctr):
        from_type = self._synth(node.from_type, None, "function type lhs")
        to_type = self._synth(node.to_type, None, "function type rhs")
        return FunctionType(from_type, to_type)

    def _check_array_type(self, node: hlr.ArrayType, ctr):
        value_type = self._synth(node.value_type, None, "array value type")
        return ArrayType(value_type, node.length)

    def _check_unit_type(self, node: hlr.UnitType, ctr):
        return UNIT


def check(tree: hlr.Tree, context: Context | None = None) -> Optional[Type]:
    """Type-check ``tree``; raise :class:`CheckFailure` on the first error.

    Pass a :class:`Context` to inspect the bindings afterwards.
    """

    checker = TypeChecker(context)
    result = checker.check(tree, None)
    logger.debug("type check passed with %d variables bound", len(checker.context.variables))
    return result


__all__ = [
    "Constraint",
    "Context",
    "TypeChecker",
    "check",
]
