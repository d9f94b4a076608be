"""Failure taxonomy shared by every compiler stage."""

from __future__ import annotations


class GaleError(Exception):
    """Base class for all failures raised by the Gale pipeline."""

    stage = "gale"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self) -> str:  # pragma: no cover - representation helper
        return f"{type(self).__name__}({self.message!r})"


class ParseFailure(GaleError):
    """Unexpected or missing token in the surface grammar."""

    stage = "parse"


class CheckFailure(GaleError):
    """Type mismatch, unknown name or unsatisfiable constraint."""

    stage = "check"


class LowerFailure(GaleError):
    """Surface tree shape does not match what lowering expects."""

    stage = "lower"


class InterpretFailure(GaleError):
    """Unresolved name or wrong-kind operand while evaluating."""

    stage = "interpret"


class InvariantViolation(GaleError):
    """A programming invariant was broken; not recoverable by the caller.

    Raised for arena ids that were never issued, array indices out of
    bounds, argument/parameter count mismatches and internal variant
    mismatches.
    """

    stage = "internal"


__all__ = [
    "GaleError",
    "ParseFailure",
    "CheckFailure",
    "LowerFailure",
    "InterpretFailure",
    "InvariantViolation",
]
