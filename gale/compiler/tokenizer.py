"""Character-classification scan turning source text into tokens."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from ..constants import KEYWORDS, PUNCTUATION

logger = logging.getLogger(__name__)

SINGLE_PUNCTUATION = set("[]():\\{};%+*<>,")
# First character → characters that may follow it to form a two-char token.
PAIRED_PUNCTUATION = {
    "-": ">",
    "=": ">=",
    "|": "|",
    "!": "!",
}


@dataclass(frozen=True)
class Token:
    kind: str
    value: Any = None

    def __str__(self) -> str:
        if self.value is None:
            return self.kind
        return f"{self.kind}({self.value!r})"


def _scan_word(src, pos):
    end = pos
    while end < len(src) and (src[end].isalnum() or src[end] in "._"):
        end += 1
    return src[pos:end], end


def _scan_number(src, pos):
    end = pos
    while end < len(src) and "0" <= src[end] <= "9":
        end += 1
    return int(src[pos:end]), end


def _scan_quoted(src, pos):
    # ``pos`` sits on the opening quote; an unterminated string runs to EOF.
    end = src.find('"', pos + 1)
    if end == -1:
        return src[pos + 1 :], len(src)
    return src[pos + 1 : end], end + 1


def _is_word_start(ch):
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def tokenize(src: str) -> list[Token]:
    """Split ``src`` into tokens; unknown characters become ``ERROR`` tokens."""

    tokens: list[Token] = []
    pos = 0
    while pos < len(src):
        ch = src[pos]
        if "0" <= ch <= "9":
            value, pos = _scan_number(src, pos)
            tokens.append(Token("NUMBER", value))
        elif _is_word_start(ch):
            word, pos = _scan_word(src, pos)
            if word in KEYWORDS:
                tokens.append(Token(KEYWORDS[word]))
            else:
                tokens.append(Token("IDENTIFIER", word))
        elif ch == '"':
            text, pos = _scan_quoted(src, pos)
            tokens.append(Token("QUOTED", text))
        elif ch.isspace():
            pos += 1
        elif ch in SINGLE_PUNCTUATION:
            tokens.append(Token(PUNCTUATION[ch]))
            pos += 1
        elif ch in PAIRED_PUNCTUATION:
            nxt = src[pos + 1] if pos + 1 < len(src) else ""
            if nxt and nxt in PAIRED_PUNCTUATION[ch]:
                tokens.append(Token(PUNCTUATION[ch + nxt]))
                pos += 2
            else:
                tokens.append(Token(PUNCTUATION[ch]))
                pos += 1
        else:
            logger.debug("unrecognised character %r at offset %d", ch, pos)
            tokens.append(Token("ERROR", ch))
            pos += 1

    logger.debug("tokenized %d characters into %d tokens", len(src), len(tokens))
    return tokens


__all__ = [
    "Token",
    "tokenize",
]
