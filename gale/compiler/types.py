"""Structural type model used by the checker and the prelude."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class AtomKind(Enum):
    I8 = "I8"
    I64 = "I64"
    UI8 = "UI8"
    UI64 = "UI64"
    BOOLEAN = "Boolean"
    TEXT = "Text"


INTEGER_KINDS = (AtomKind.I64, AtomKind.I8, AtomKind.UI64, AtomKind.UI8)


@dataclass(frozen=True)
class FunctionType:
    from_type: "Type"
    to_type: "Type"

    def __str__(self) -> str:
        return f"{self.from_type} -> {self.to_type}"


@dataclass(frozen=True)
class ProductType:
    elements: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "elements", tuple(self.elements))

    def __str__(self) -> str:
        return "(" + ", ".join(str(e) for e in self.elements) + ")"


@dataclass(frozen=True)
class ArrayType:
    element: "Type"
    length: int

    def __str__(self) -> str:
        return f"[{self.element}; {self.length}]"


@dataclass(frozen=True)
class SumType:
    options: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "options", tuple(self.options))

    def __str__(self) -> str:
        return " | ".join(str(o) for o in self.options)


@dataclass(frozen=True)
class AtomType:
    kind: AtomKind

    def __str__(self) -> str:
        return self.kind.value


@dataclass(frozen=True)
class ExternType:
    name: str

    def __str__(self) -> str:
        return f"extern {self.name}"


@dataclass(frozen=True)
class UnitType:
    def __str__(self) -> str:
        return "()"


@dataclass(frozen=True)
class UnknownType:
    def __str__(self) -> str:
        return "?"


Type = Union[
    FunctionType,
    ProductType,
    ArrayType,
    SumType,
    AtomType,
    ExternType,
    UnitType,
    UnknownType,
]

UNIT = UnitType()


def type_from_descriptor(descriptor: str) -> Type:
    """Map a prelude descriptor such as ``"UI8"`` or ``"Unit"`` to a type."""

    if descriptor == "Unit":
        return UNIT
    try:
        return AtomType(AtomKind(descriptor))
    except ValueError as exc:
        raise ValueError(f"Unknown type descriptor '{descriptor}'") from exc


__all__ = [
    "ArrayType",
    "AtomKind",
    "AtomType",
    "ExternType",
    "FunctionType",
    "INTEGER_KINDS",
    "ProductType",
    "SumType",
    "Type",
    "UNIT",
    "UnitType",
    "UnknownType",
    "type_from_descriptor",
]
