"""Recursive-descent parser for the Gale surface grammar."""

from __future__ import annotations

import logging
from typing import Optional

from . import hlr
from .errors import ParseFailure
from .tokenizer import Token, tokenize

logger = logging.getLogger(__name__)

# Tokens that may start the argument of a juxtaposed application.
APPLICATION_STARTS = {
    "LEFT_ROUND",
    "NUMBER",
    "IDENTIFIER",
    "LEFT_SQUARE",
    "QUOTED",
    "TRUE",
    "FALSE",
}

OPERATORS = {
    "MUL": hlr.BinOpType.MULT,
    "PLUS": hlr.BinOpType.PLUS,
    "ARR_INDEX": hlr.BinOpType.ARR_INDEX,
}


class Parser:
    """Single-use cursor over a token list."""

    def __init__(self, tokens: list[Token]):
        self.tokens = list(tokens)
        self.pos = 0

    # -- cursor helpers -------------------------------------------------

    def peek(self) -> Optional[Token]:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def peek_kind(self, kind: str) -> bool:
        tok = self.peek()
        return tok is not None and tok.kind == kind

    def advance(self) -> Optional[Token]:
        tok = self.peek()
        if tok is not None:
            self.pos += 1
        return tok

    def consume(self, kind: str) -> Token:
        tok = self.advance()
        if tok is None:
            raise ParseFailure(f"Expected {kind}, got nothing")
        if tok.kind != kind:
            raise ParseFailure(f"Expected {kind}, got {tok}")
        return tok

    def _name(self) -> str:
        tok = self.advance()
        if tok is None:
            raise ParseFailure("Expected identifier, got nothing")
        if tok.kind != "IDENTIFIER":
            raise ParseFailure(f"Expected identifier, got {tok}")
        return tok.value

    # -- types ----------------------------------------------------------

    def parse_type(self) -> hlr.Tree:
        if self.peek_kind("LEFT_SQUARE"):
            return self.parse_array_type()
        return self.parse_sum_type()

    def parse_sum_type(self) -> hlr.Tree:
        options = [self.parse_function_type()]
        while self.peek_kind("PIPE"):
            self.consume("PIPE")
            options.append(self.parse_function_type())
        if len(options) == 1:
            return options[0]
        return hlr.SumType(options)

    def parse_function_type(self) -> hlr.Tree:
        lhs = self.parse_product_type()
        if self.peek_kind("RIGHT_ARROW"):
            self.consume("RIGHT_ARROW")
            return hlr.FunctionType(lhs, self.parse_function_type())
        return lhs

    def parse_product_type(self) -> hlr.Tree:
        if not self.peek_kind("LEFT_ROUND"):
            return self._type_atom()

        self.consume("LEFT_ROUND")
        if self.peek_kind("RIGHT_ROUND"):
            self.consume("RIGHT_ROUND")
            return hlr.ProductType([])

        elements = [self._type_atom()]
        while not self.peek_kind("RIGHT_ROUND"):
            self.consume("COMMA")
            elements.append(self._type_atom())
        self.consume("RIGHT_ROUND")

        if len(elements) == 1:
            return elements[0]
        return hlr.ProductType(elements)

    def _type_atom(self) -> hlr.Tree:
        if self.peek_kind("LEFT_SQUARE"):
            return self.parse_array_type()
        return hlr.IdentifierType(self._name())

    def parse_array_type(self) -> hlr.Tree:
        self.consume("LEFT_SQUARE")
        value_type = hlr.IdentifierType(self._name())
        self.consume("SEMICOLON")
        tok = self.advance()
        if tok is None or tok.kind != "NUMBER":
            raise ParseFailure("Expected array type length to be number")
        self.consume("RIGHT_SQUARE")
        return hlr.ArrayType(value_type, tok.value)

    # -- expressions ----------------------------------------------------

    def parse_expression(self) -> hlr.Tree:
        lhs = self.parse_application()
        tok = self.peek()
        if tok is not None and tok.kind in OPERATORS:
            self.advance()
            rhs = self.parse_expression()
            return hlr.BinOp(lhs, rhs, OPERATORS[tok.kind])
        return lhs

    def parse_application(self) -> hlr.Tree:
        first = self.parse_lambda()
        tok = self.peek()
        if tok is not None and tok.kind in APPLICATION_STARTS:
            return hlr.App(first, self.parse_lambda())
        return first

    def parse_lambda(self) -> hlr.Tree:
        if not self.peek_kind("BACKSLASH"):
            return self.parse_value()

        self.consume("BACKSLASH")
        if self.peek_kind("LEFT_ROUND"):
            self.consume("LEFT_ROUND")
            parameters = []
            if not self.peek_kind("RIGHT_ROUND"):
                parameters.append(hlr.Identifier(self._name()))
                while self.peek_kind("COMMA"):
                    self.consume("COMMA")
                    parameters.append(hlr.Identifier(self._name()))
            self.consume("RIGHT_ROUND")
        else:
            parameters = [hlr.Identifier(self._name())]

        self.consume("FAT_RIGHT_ARROW")
        return hlr.Lambda(parameters, self.parse_expression())

    def parse_value(self) -> hlr.Tree:
        tok = self.peek()
        kind = tok.kind if tok is not None else None
        if kind == "IDENTIFIER":
            return hlr.Identifier(self.advance().value)
        if kind == "QUOTED":
            return hlr.Text(self.advance().value)
        if kind == "NUMBER":
            return hlr.Number(self.advance().value)
        if kind in ("TRUE", "FALSE"):
            self.advance()
            return hlr.Boolean(kind == "TRUE")
        if kind == "LEFT_SQUARE":
            return self.parse_array()
        if kind == "LEFT_ROUND":
            return self.parse_tuple()
        if kind == "LEFT_CURLY":
            return self.parse_block()
        raise ParseFailure(f"Expected value, got {tok if tok is not None else 'nothing'}")

    def _delimited(self, open_kind, close_kind, sep_kind, item):
        self.consume(open_kind)
        if self.peek_kind(close_kind):
            self.consume(close_kind)
            return []
        items = [item()]
        while not self.peek_kind(close_kind):
            self.consume(sep_kind)
            items.append(item())
        self.consume(close_kind)
        return items

    def parse_array(self) -> hlr.Tree:
        return hlr.Array(
            self._delimited("LEFT_SQUARE", "RIGHT_SQUARE", "COMMA", self.parse_expression)
        )

    def parse_tuple(self) -> hlr.Tree:
        elements = self._delimited("LEFT_ROUND", "RIGHT_ROUND", "COMMA", self.parse_expression)
        if len(elements) == 1:
            return elements[0]
        return hlr.Tuple(elements)

    def parse_block(self) -> hlr.Tree:
        statements = self._delimited(
            "LEFT_CURLY", "RIGHT_CURLY", "SEMICOLON", self.parse_statement
        )
        if len(statements) == 1:
            return statements[0]
        return hlr.Block(statements)

    # -- statements -----------------------------------------------------

    def parse_let(self) -> hlr.Tree:
        self.consume("LET")
        identifier = hlr.Identifier(self._name())
        self.consume("COLON")
        exp_type = self.parse_type()
        self.consume("EQUALS")
        return hlr.Let(identifier, exp_type, self.parse_expression())

    def parse_statement(self) -> hlr.Tree:
        tok = self.peek()
        if tok is None:
            raise ParseFailure("Expected let or expression, got end of stream")
        if tok.kind == "LET":
            return self.parse_let()
        return self.parse_expression()

    def parse_file(self) -> hlr.File:
        statements = []
        while self.peek() is not None:
            statements.append(self.parse_statement())
            self.consume("SEMICOLON")
        return hlr.File(statements)


def parse(tokens: list[Token]) -> hlr.File:
    """Parse a full token stream into a surface :class:`~gale.compiler.hlr.File`."""

    tree = Parser(tokens).parse_file()
    logger.debug("parsed %d top-level statements", len(tree.statements))
    return tree


def parse_source(src: str) -> hlr.File:
    return parse(tokenize(src))


__all__ = [
    "Parser",
    "parse",
    "parse_source",
]
