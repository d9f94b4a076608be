"""Arena payloads for the lowered tree (medium level representation).

Child references are :data:`NodeId` handles into the same
:class:`~gale.compiler.flat_tree.FlatTree`. Payloads are mutable so the
lowerer can allocate a node with placeholder children and fill the real ids
in once they exist.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Union

from .flat_tree import ERROR_ID, NodeId
from .hlr import BinOpType


@dataclass
class File:
    functions: list = field(default_factory=list)


@dataclass
class Let:
    id: NodeId = ERROR_ID
    exp_type: NodeId = ERROR_ID
    exp: NodeId = ERROR_ID


@dataclass
class Seq:
    elements: list = field(default_factory=list)


@dataclass
class Identifier:
    name: str


@dataclass
class BinOp:
    op_type: BinOpType
    lhs: NodeId = ERROR_ID
    rhs: NodeId = ERROR_ID


@dataclass
class Number:
    value: int


@dataclass
class Boolean:
    value: bool


@dataclass
class Text:
    text: str


@dataclass
class Tuple:
    elements: list = field(default_factory=list)


@dataclass
class Array:
    elements: list = field(default_factory=list)


@dataclass
class GaleFunction:
    """A function whose parameters and body live in the arena."""

    name: str
    parameters: list = field(default_factory=list)
    implementation: NodeId = ERROR_ID


@dataclass
class NativeFunction:
    """A host function; it has no arena-resident body."""

    name: str
    parameters: list
    implementation: Callable = field(repr=False)


@dataclass
class Apply:
    fn_name: NodeId = ERROR_ID
    param: NodeId = ERROR_ID


@dataclass
class SumType:
    options: list = field(default_factory=list)


@dataclass
class ProductType:
    elements: list = field(default_factory=list)


@dataclass
class IdentifierType:
    name: str


@dataclass
class FunctionType:
    from_type: NodeId = ERROR_ID
    to_type: NodeId = ERROR_ID


@dataclass
class ArrayType:
    length: int
    value_type: NodeId = ERROR_ID


@dataclass
class UnitType:
    pass


Function = Union[GaleFunction, NativeFunction]
FUNCTION_NODES = (GaleFunction, NativeFunction)
TYPE_NODES = (SumType, ProductType, IdentifierType, FunctionType, ArrayType, UnitType)

Node = Union[
    File,
    Let,
    Seq,
    Identifier,
    BinOp,
    Number,
    Boolean,
    Text,
    Tuple,
    Array,
    GaleFunction,
    NativeFunction,
    Apply,
    SumType,
    ProductType,
    IdentifierType,
    FunctionType,
    ArrayType,
    UnitType,
]


def node_kind(node) -> str:
    """Return the variant name, folding both function flavours together."""

    if isinstance(node, FUNCTION_NODES):
        return "Function"
    return type(node).__name__


def describe(node) -> str:
    """Short human-readable label used by graph exports."""

    kind = node_kind(node)
    if isinstance(node, (Identifier, IdentifierType)):
        return f"{kind}({node.name})"
    if isinstance(node, FUNCTION_NODES):
        return f"{kind}({node.name})"
    if isinstance(node, (Number, Boolean)):
        return f"{kind}({node.value})"
    if isinstance(node, Text):
        return f"{kind}({node.text!r})"
    if isinstance(node, BinOp):
        return f"{kind}({node.op_type.value})"
    if isinstance(node, ArrayType):
        return f"{kind}(;{node.length})"
    return kind


def child_ids(node) -> list[NodeId]:
    """Every arena id a payload refers to, in field order."""

    if isinstance(node, File):
        return list(node.functions)
    if isinstance(node, Let):
        return [node.id, node.exp_type, node.exp]
    if isinstance(node, (Seq, Tuple, Array)):
        return list(node.elements)
    if isinstance(node, BinOp):
        return [node.lhs, node.rhs]
    if isinstance(node, GaleFunction):
        return list(node.parameters) + [node.implementation]
    if isinstance(node, Apply):
        return [node.fn_name, node.param]
    if isinstance(node, SumType):
        return list(node.options)
    if isinstance(node, ProductType):
        return list(node.elements)
    if isinstance(node, FunctionType):
        return [node.from_type, node.to_type]
    if isinstance(node, ArrayType):
        return [node.value_type]
    return []


__all__ = [
    "Apply",
    "Array",
    "ArrayType",
    "BinOp",
    "BinOpType",
    "Boolean",
    "FUNCTION_NODES",
    "File",
    "Function",
    "FunctionType",
    "GaleFunction",
    "Identifier",
    "IdentifierType",
    "Let",
    "NativeFunction",
    "Node",
    "Number",
    "ProductType",
    "Seq",
    "SumType",
    "TYPE_NODES",
    "Text",
    "Tuple",
    "UnitType",
    "child_ids",
    "describe",
    "node_kind",
]
