"""Runtime values produced by the interpreter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Number:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Boolean:
    value: bool

    def __str__(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class Tuple:
    elements: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "elements", tuple(self.elements))

    def __str__(self) -> str:
        return "(" + "".join(str(e) for e in self.elements) + ")"


@dataclass(frozen=True)
class Function:
    """A first-class reference to a program function, by name only."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Text:
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Array:
    elements: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "elements", tuple(self.elements))

    def __str__(self) -> str:
        return "[" + "".join(str(e) for e in self.elements) + "]"


@dataclass(frozen=True)
class ExternValue:
    elements: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "elements", tuple(self.elements))

    def __str__(self) -> str:
        return "".join(str(e) for e in self.elements)


@dataclass(frozen=True)
class VoidValue:
    def __str__(self) -> str:
        return "void"


Void = VoidValue()

Value = Union[Number, Boolean, Tuple, Function, Text, Array, ExternValue, VoidValue]


__all__ = [
    "Array",
    "Boolean",
    "ExternValue",
    "Function",
    "Number",
    "Text",
    "Tuple",
    "Value",
    "Void",
    "VoidValue",
]
