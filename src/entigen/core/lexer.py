"""
Lexer/Tokenizer for the entigen schema DSL.

Converts raw DSL text into a flat stream of classified tokens with source
location tracking. Token kinds are inferred from the lexical shape of the
token text alone, never from parser context.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class TokenKind(Enum):
    """Token kinds in the entigen DSL."""

    SEPARATOR = "separator"
    OPERATOR = "operator"
    SELECTOR = "selector"
    IDENTIFIER = "identifier"
    STRING = "string"
    NUMBER = "number"
    DECIMAL = "decimal"
    BOOL = "bool"


SEPARATOR_SYMBOLS = frozenset(";,{}()[].")
OPERATOR_SYMBOLS = frozenset("=+-*/%<>!:^")
KEYWORD_OPERATORS = frozenset({":=", "and", "or", "xor"})
WHITESPACE = frozenset(" \t\r\n")

UINT64_MAX = 2**64 - 1

_UNSIGNED_RE = re.compile(r"[0-9]+")
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


def is_separator_symbol(ch: str) -> bool:
    return ch in SEPARATOR_SYMBOLS


def is_operator_symbol(ch: str) -> bool:
    return ch in OPERATOR_SYMBOLS


def classify(value: str) -> TokenKind:
    """
    Infer the kind of a token from its text.

    Unsigned integers are tried before decimals, so ``42`` is a NUMBER and
    ``4.2`` (or an integer too large for 64 bits) is a DECIMAL.

    Args:
        value: Raw token text

    Returns:
        TokenKind for the text; every string maps to exactly one kind
    """
    if value in ("true", "false"):
        return TokenKind.BOOL

    if value == ".":
        return TokenKind.SELECTOR

    if value in KEYWORD_OPERATORS:
        return TokenKind.OPERATOR

    if _UNSIGNED_RE.fullmatch(value) and int(value) <= UINT64_MAX:
        return TokenKind.NUMBER

    if _DECIMAL_RE.fullmatch(value):
        return TokenKind.DECIMAL

    first = value[:1]
    if first == '"':
        return TokenKind.STRING
    if first and is_separator_symbol(first):
        return TokenKind.SEPARATOR
    if first and is_operator_symbol(first):
        return TokenKind.OPERATOR
    return TokenKind.IDENTIFIER


@dataclass(frozen=True)
class Token:
    """
    A single token in the DSL.

    Attributes:
        kind: Kind of token
        value: Verbatim token text (strings keep their quotes)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """

    kind: TokenKind
    value: str
    line: int
    column: int

    @classmethod
    def of(cls, value: str, line: int, column: int) -> Token:
        """Build a token, classifying its text."""
        return cls(classify(value), value, line, column)

    @property
    def string_value(self) -> str:
        """Text of a string token without its surrounding quotes."""
        if self.kind is not TokenKind.STRING:
            return self.value
        inner = self.value[1:]
        if inner.endswith('"'):
            inner = inner[:-1]
        return inner

    def __repr__(self) -> str:
        return f"Token({self.kind.value}, {self.value!r}, {self.line}:{self.column})"


class Lexer:
    """
    Lexer for the entigen DSL.

    Whitespace and comments separate tokens and are never emitted. Runs of
    operator characters form one token (``:=``), every separator character
    is its own token, and everything else accumulates into a word. A ``.``
    that follows the digits of a word starting with a digit belongs to that
    number instead of being a separator.
    """

    def __init__(self, text: str):
        """
        Initialize lexer.

        Args:
            text: Source text to tokenize
        """
        self.text = text
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

        self._buffer: list[str] = []
        self._buffer_is_operator = False
        self._inside_number = False
        self._token_line = 1
        self._token_column = 1

    def current_char(self) -> str | None:
        """Get current character or None if at end."""
        if self.pos >= len(self.text):
            return None
        return self.text[self.pos]

    def peek_char(self, offset: int = 1) -> str | None:
        """Peek ahead at character."""
        pos = self.pos + offset
        if pos >= len(self.text):
            return None
        return self.text[pos]

    def advance(self) -> None:
        """Move to next character, updating line/column."""
        if self.pos < len(self.text):
            if self.text[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def flush(self) -> None:
        """Emit the pending word or operator run, if any."""
        if self._buffer:
            value = "".join(self._buffer)
            self.tokens.append(Token.of(value, self._token_line, self._token_column))
            self._buffer.clear()
        self._buffer_is_operator = False
        self._inside_number = False

    def _append(self, ch: str, operator: bool) -> None:
        if not self._buffer:
            self._token_line = self.line
            self._token_column = self.column
            self._buffer_is_operator = operator
            self._inside_number = ch.isdigit()
        self._buffer.append(ch)
        self.advance()

    def skip_line_comment(self) -> None:
        """Skip a ``//`` comment up to (not including) the newline."""
        while self.current_char() is not None and self.current_char() != "\n":
            self.advance()

    def skip_block_comment(self) -> None:
        """Skip a ``/* */`` comment; an unterminated one runs to end of input."""
        self.advance()
        self.advance()
        while self.current_char() is not None:
            if self.current_char() == "*" and self.peek_char() == "/":
                self.advance()
                self.advance()
                return
            self.advance()

    def read_string(self) -> None:
        """Read a double-quoted string verbatim, quotes included."""
        line, column = self.line, self.column
        chars = ['"']
        self.advance()

        while True:
            current = self.current_char()
            if current is None:
                logger.warning("line %d: unterminated string literal", line)
                break

            chars.append(current)
            self.advance()

            if current == "\\":
                escaped = self.current_char()
                if escaped is not None:
                    chars.append(escaped)
                    self.advance()
            elif current == '"':
                break

        self.tokens.append(Token(TokenKind.STRING, "".join(chars), line, column))

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire source text.

        Returns:
            List of tokens in source order
        """
        while (ch := self.current_char()) is not None:
            if ch in WHITESPACE:
                self.flush()
                self.advance()

            elif ch == "/" and self.peek_char() == "/":
                self.flush()
                self.skip_line_comment()

            elif ch == "/" and self.peek_char() == "*":
                self.flush()
                self.skip_block_comment()

            elif ch == '"':
                self.flush()
                self.read_string()

            elif ch == "." and self._inside_number:
                self._append(ch, operator=False)

            elif is_separator_symbol(ch):
                self.flush()
                self.tokens.append(Token.of(ch, self.line, self.column))
                self.advance()

            elif is_operator_symbol(ch):
                if not self._buffer_is_operator:
                    self.flush()
                self._append(ch, operator=True)

            else:
                if self._buffer_is_operator:
                    self.flush()
                self._append(ch, operator=False)

        self.flush()
        return self.tokens


def tokenize(text: str) -> list[Token]:
    """
    Convenience function to tokenize DSL text.

    Args:
        text: Source text

    Returns:
        List of tokens
    """
    return Lexer(text).tokenize()
