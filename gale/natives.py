"""Native function declarations making up the standard prelude."""

from dataclasses import dataclass, field
from typing import Callable, Optional

from .constants import NATIVE_PARAMETER

# Type descriptors understood by ``gale.compiler.types.type_from_descriptor``.
_DESCRIPTORS = {"I8", "I64", "UI8", "UI64", "Boolean", "Text", "Unit"}


@dataclass(frozen=True)
class NativeDeclaration:
    """Signature of a host-provided function visible to every program."""

    name: str
    arg_type: str
    return_type: str
    parameters: tuple = (NATIVE_PARAMETER,)
    # Host callable taking ``(program, environment)``; the interpreter
    # supplies the built-in ones itself.
    implementation: Optional[Callable] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        name = (self.name or "").strip()
        if not name:
            raise ValueError("Native declaration requires a name")
        object.__setattr__(self, "name", name)
        for descriptor in (self.arg_type, self.return_type):
            if descriptor not in _DESCRIPTORS:
                raise ValueError(
                    f"Native declaration {name} has unknown type: {descriptor}"
                )
        object.__setattr__(self, "parameters", tuple(self.parameters))

    @property
    def arity(self):
        return len(self.parameters)

    def to_dict(self):
        return {
            "name": self.name,
            "arg_type": self.arg_type,
            "return_type": self.return_type,
            "parameters": list(self.parameters),
        }


STANDARD_PRELUDE = (
    NativeDeclaration("std.print", "Text", "Unit"),
    NativeDeclaration("std.println", "Text", "Unit"),
    NativeDeclaration("std.read", "Text", "Text"),
    NativeDeclaration("std.to_string", "UI8", "Text"),
)


def standard_prelude(extra=None):
    """Return the prelude as a name → declaration mapping.

    ``extra`` declarations are merged on top; a name clash is an error so a
    program can never silently replace a built-in.
    """

    table = {decl.name: decl for decl in STANDARD_PRELUDE}
    for decl in extra or ():
        if decl.name in table:
            raise ValueError(f"Duplicate native declaration for {decl.name}")
        table[decl.name] = decl
    return table


__all__ = [
    "NativeDeclaration",
    "STANDARD_PRELUDE",
    "standard_prelude",
]
