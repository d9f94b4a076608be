"""Surface tree produced by the parser (high level representation).

Every node owns its children outright. The tree is built once by the parser
and only read afterwards by the checker and the lowerer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union


class BinOpType(Enum):
    MULT = "*"
    PLUS = "+"
    ARR_INDEX = "!!"


@dataclass
class Identifier:
    name: str


@dataclass
class File:
    statements: list = field(default_factory=list)


@dataclass
class Let:
    id: Identifier
    exp_type: "Tree"
    exp: "Tree"


@dataclass
class BinOp:
    lhs: "Tree"
    rhs: "Tree"
    op_type: BinOpType


@dataclass
class Lambda:
    parameters: list
    body: "Tree"


@dataclass
class App:
    fn_exp: "Tree"
    param_exp: "Tree"


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
class Block:
    statements: list = field(default_factory=list)


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
    from_type: "Tree"
    to_type: "Tree"


@dataclass
class ArrayType:
    value_type: "Tree"
    length: int


@dataclass
class UnitType:
    pass


Tree = Union[
    File,
    Let,
    Identifier,
    BinOp,
    Lambda,
    App,
    Number,
    Boolean,
    Text,
    Tuple,
    Array,
    Block,
    SumType,
    ProductType,
    IdentifierType,
    FunctionType,
    ArrayType,
    UnitType,
]

TYPE_NODES = (SumType, ProductType, IdentifierType, FunctionType, ArrayType, UnitType)


__all__ = [
    "App",
    "Array",
    "ArrayType",
    "BinOp",
    "BinOpType",
    "Block",
    "Boolean",
    "File",
    "FunctionType",
    "Identifier",
    "IdentifierType",
    "Lambda",
    "Let",
    "Number",
    "ProductType",
    "SumType",
    "TYPE_NODES",
    "Text",
    "Tree",
    "Tuple",
    "UnitType",
]
