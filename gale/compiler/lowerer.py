"""Lowering of the surface tree into the arena-backed tree."""

from __future__ import annotations

import logging

from ..constants import LIFTED_LAMBDA_PREFIX
from . import hlr, mlr
from .errors import InvariantViolation, LowerFailure
from .flat_tree import ERROR_ID, ROOT_ID, FlatTree, NodeId

logger = logging.getLogger(__name__)


class Lowerer:
    """Builds one :class:`FlatTree` from one checked surface file.

    Nodes that reference children are created first with ``ERROR_ID``
    placeholders so that the children can be allocated under them; the
    payload is then rewritten with the real ids.
    """

    def __init__(self):
        self.tree: FlatTree = FlatTree.new_with_root(mlr.File())
        self._lifted: list[NodeId] = []
        self._dispatch = {
            hlr.Let: self._lower_let,
            hlr.Block: self._lower_block,
            hlr.Identifier: self._lower_identifier,
            hlr.BinOp: self._lower_binop,
            hlr.Lambda: self._lower_lambda,
            hlr.App: self._lower_app,
            hlr.Number: lambda n, p: self.tree.new_node(mlr.Number(n.value), p),
            hlr.Boolean: lambda n, p: self.tree.new_node(mlr.Boolean(n.value), p),
            hlr.Text: lambda n, p: self.tree.new_node(mlr.Text(n.text), p),
            hlr.Tuple: self._lower_tuple,
            hlr.Array: self._lower_array,
            hlr.File: self._lower_nested_file,
            hlr.SumType: self._lower_sum_type,
            hlr.ProductType: self._lower_product_type,
            hlr.IdentifierType: lambda n, p: self.tree.new_node(
                mlr.IdentifierType(n.name), p
            ),
            hlr.FunctionType: self._lower_function_type,
            hlr.ArrayType: self._lower_array_type,
            hlr.UnitType: lambda n, p: self.tree.new_node(mlr.UnitType(), p),
        }

    def lower_file(self, file: hlr.File) -> FlatTree:
        if not isinstance(file, hlr.File):
            raise LowerFailure(f"Expected file, got {type(file).__name__}")

        functions = []
        for statement in file.statements:
            node_id = self.lower(statement, ROOT_ID)
            if not isinstance(self.tree.get_node_value(node_id), mlr.GaleFunction):
                raise LowerFailure(
                    "Expected each top-level statement to lower to a function"
                )
            functions.append(node_id)

        self.tree.set_node_value(ROOT_ID, mlr.File(functions + self._lifted))
        _assert_no_placeholders(self.tree)
        logger.debug(
            "lowered %d functions (%d lifted) into %d arena slots",
            len(functions) + len(self._lifted),
            len(self._lifted),
            len(self.tree),
        )
        return self.tree

    def lower(self, node: hlr.Tree, parent: NodeId) -> NodeId:
        handler = self._dispatch.get(type(node))
        if handler is None:
            raise InvariantViolation(f"No lowering rule for surface node {type(node).__name__}")
        return handler(node, parent)

    def _lower_all(self, nodes, parent: NodeId) -> list[NodeId]:
        return [self.lower(n, parent) for n in nodes]

    # -- functions ------------------------------------------------------

    def _lower_function(self, name: str, lam: hlr.Lambda, parent: NodeId) -> NodeId:
        fn_id = self.tree.new_node(mlr.GaleFunction(name), parent)
        parameters = self._lower_all(lam.parameters, fn_id)
        implementation = self.lower(lam.body, fn_id)
        self.tree.set_node_value(fn_id, mlr.GaleFunction(name, parameters, implementation))
        return fn_id

    def _lower_let(self, node: hlr.Let, parent: NodeId) -> NodeId:
        if not isinstance(node.id, hlr.Identifier):
            raise LowerFailure("Expected identifier to lower to identifier")
        if isinstance(node.exp, hlr.Lambda):
            return self._lower_function(node.id.name, node.exp, parent)

        let_id = self.tree.new_node(mlr.Let(), parent)
        ident = self.lower(node.id, let_id)
        exp_type = self.lower(node.exp_type, let_id)
        exp = self.lower(node.exp, let_id)
        self.tree.set_node_value(let_id, mlr.Let(ident, exp_type, exp))
        return let_id

    def _lower_lambda(self, node: hlr.Lambda, parent: NodeId) -> NodeId:
        raise LowerFailure("Lambda must be bound by let or applied directly")

    def _lower_app(self, node: hlr.App, parent: NodeId) -> NodeId:
        callee = node.fn_exp
        if isinstance(callee, hlr.Lambda):
            name = f"{LIFTED_LAMBDA_PREFIX}#{len(self._lifted)}"
            self._lifted.append(self._lower_function(name, callee, ROOT_ID))
            callee = hlr.Identifier(name)
        elif not isinstance(callee, hlr.Identifier):
            raise LowerFailure(
                f"Expected applied function to be a name, got {type(callee).__name__}"
            )

        apply_id = self.tree.new_node(mlr.Apply(), parent)
        fn_name = self.lower(callee, apply_id)
        param = self.lower(node.param_exp, apply_id)
        self.tree.set_node_value(apply_id, mlr.Apply(fn_name, param))
        return apply_id

    # -- structure ------------------------------------------------------

    def _lower_block(self, node: hlr.Block, parent: NodeId) -> NodeId:
        seq_id = self.tree.new_node(mlr.Seq(), parent)
        self.tree.set_node_value(seq_id, mlr.Seq(self._lower_all(node.statements, seq_id)))
        return seq_id

    def _lower_identifier(self, node: hlr.Identifier, parent: NodeId) -> NodeId:
        return self.tree.new_node(mlr.Identifier(node.name), parent)

    def _lower_binop(self, node: hlr.BinOp, parent: NodeId) -> NodeId:
        op_id = self.tree.new_node(mlr.BinOp(node.op_type), parent)
        lhs = self.lower(node.lhs, op_id)
        rhs = self.lower(node.rhs, op_id)
        self.tree.set_node_value(op_id, mlr.BinOp(node.op_type, lhs, rhs))
        return op_id

    def _lower_tuple(self, node: hlr.Tuple, parent: NodeId) -> NodeId:
        tuple_id = self.tree.new_node(mlr.Tuple(), parent)
        self.tree.set_node_value(tuple_id, mlr.Tuple(self._lower_all(node.elements, tuple_id)))
        return tuple_id

    def _lower_array(self, node: hlr.Array, parent: NodeId) -> NodeId:
        array_id = self.tree.new_node(mlr.Array(), parent)
        self.tree.set_node_value(array_id, mlr.Array(self._lower_all(node.elements, array_id)))
        return array_id

    def _lower_nested_file(self, node: hlr.File, parent: NodeId) -> NodeId:
        raise LowerFailure("File may only appear as the root of the surface tree")

    # -- type expressions -----------------------------------------------

    def _lower_sum_type(self, node: hlr.SumType, parent: NodeId) -> NodeId:
        sum_id = self.tree.new_node(mlr.SumType(), parent)
        self.tree.set_node_value(sum_id, mlr.SumType(self._lower_all(node.options, sum_id)))
        return sum_id

    def _lower_product_type(self, node: hlr.ProductType, parent: NodeId) -> NodeId:
        prod_id = self.tree.new_node(mlr.ProductType(), parent)
        self.tree.set_node_value(
            prod_id, mlr.ProductType(self._lower_all(node.elements, prod_id))
        )
        return prod_id

    def _lower_function_type(self, node: hlr.FunctionType, parent: NodeId) -> NodeId:
        fn_id = self.tree.new_node(mlr.FunctionType(), parent)
        from_type = self.lower(node.from_type, fn_id)
        to_type = self.lower(node.to_type, fn_id)
        self.tree.set_node_value(fn_id, mlr.FunctionType(from_type, to_type))
        return fn_id

    def _lower_array_type(self, node: hlr.ArrayType, parent: NodeId) -> NodeId:
        arr_id = self.tree.new_node(mlr.ArrayType(node.length), parent)
        value_type = self.lower(node.value_type, arr_id)
        self.tree.set_node_value(arr_id, mlr.ArrayType(node.length, value_type))
        return arr_id


def _assert_no_placeholders(tree: FlatTree) -> None:
    for node_id, node in tree.iter_live():
        if ERROR_ID in mlr.child_ids(node):
            raise InvariantViolation(
                f"Node {node_id} ({mlr.describe(node)}) still holds a placeholder child"
            )


def lower(file: hlr.File) -> FlatTree:
    """Lower a checked surface file into a fresh arena tree."""

    return Lowerer().lower_file(file)


__all__ = [
    "Lowerer",
    "lower",
]
