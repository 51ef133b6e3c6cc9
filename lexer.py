from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np


class CalcError(Exception):
    """Base class for evaluator errors."""

    def __init__(
        self,
        message: str,
        *,
        position: Optional[int] = None,
        rule: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.position = position
        self.rule = rule
        self.step_index: Optional[int] = None


class InvalidToken(CalcError):
    """Raised when an argument is neither a number, an operator nor a bracket."""

    def __init__(self, raw: str, position: Optional[int] = None) -> None:
        super().__init__(f"Invalid token '{raw}'", position=position, rule="TOKEN")
        self.raw = raw


NUMBER = "NUMBER"
OPERATOR = "OPERATOR"
LBRACKET = "LBRACKET"
RBRACKET = "RBRACKET"

OPERATORS = ("+", "x", "/")

SYMBOLS = {
    "[": LBRACKET,
    "]": RBRACKET,
}

RADIX_PREFIXES = (
    ("0x", 16),
    ("0b", 2),
)

RADIX_DIGITS = {
    2: "01",
    10: "0123456789",
    16: "0123456789abcdefABCDEF",
}

INT64_MIN = int(np.iinfo(np.int64).min)
INT64_MAX = int(np.iinfo(np.int64).max)


@dataclass(frozen=True)
class Token:
    kind: str
    value: Union[int, str]
    position: int = 0


def _parse_radix(text: str, radix: int) -> Optional[int]:
    # int() on its own also accepts underscores and surrounding whitespace.
    digits = text[1:] if text[:1] in ("+", "-") else text
    if not digits:
        return None
    allowed = RADIX_DIGITS[radix]
    for ch in digits:
        if ch not in allowed:
            return None
    value = int(text, radix)
    if value < INT64_MIN or value > INT64_MAX:
        return None
    return value


def parse_number(text: str) -> Optional[int]:
    """Parse a decimal, ``0x`` hexadecimal or ``0b`` binary literal.

    Returns ``None`` when the whole string is not a signed 64-bit literal.
    """
    for prefix, radix in RADIX_PREFIXES:
        if text.startswith(prefix):
            return _parse_radix(text[len(prefix):], radix)
    return _parse_radix(text, 10)


def tokenize(raw: str, position: int = 0) -> Token:
    number = parse_number(raw)
    if number is not None:
        return Token(NUMBER, number, position)
    if len(raw) == 1 and raw in OPERATORS:
        return Token(OPERATOR, raw, position)
    if raw in SYMBOLS:
        return Token(SYMBOLS[raw], raw, position)
    raise InvalidToken(raw, position)


class Lexer:
    def __init__(self, arguments: Sequence[str]) -> None:
        self.arguments = list(arguments)

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        tokens_append = tokens.append
        for index, raw in enumerate(self.arguments):
            tokens_append(tokenize(raw, index))
        return tokens
