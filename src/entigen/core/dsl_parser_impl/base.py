"""
Base parser class for the entigen DSL.

Provides the token manipulation used by all parser mixins: one-token fetch,
explicit rewind of fetched tokens, and expectation helpers that raise
located errors. All parsing state lives on the parser instance.
"""

from __future__ import annotations

from typing import NoReturn

from ..errors import make_parse_error, make_semantic_error
from ..lexer import Token, TokenKind


class BaseParser:
    """
    Base parser class with token manipulation utilities.

    The current line/column track the most recently fetched token so every
    error can be reported as ``line N: <message>``.
    """

    def __init__(self, tokens: list[Token]):
        """
        Initialize parser.

        Args:
            tokens: List of tokens from the lexer
        """
        self.tokens = tokens
        self.pos = 0
        self.line = tokens[0].line if tokens else 1
        self.column = tokens[0].column if tokens else 1

    def has_tokens(self) -> bool:
        return self.pos < len(self.tokens)

    def fetch_token(self) -> Token:
        """
        Consume and return the next token.

        Raises:
            ParseError: At end of input
        """
        if self.pos >= len(self.tokens):
            self.syntax_error("unexpected end of file")

        token = self.tokens[self.pos]
        self.pos += 1
        self.line = token.line
        self.column = token.column
        return token

    def rewind(self, steps: int = 1) -> None:
        """Push back the last ``steps`` fetched tokens."""
        if self.pos - steps < 0:
            self.syntax_error("unexpected rewind")
        self.pos -= steps

    def expect_token(self, value: str, message: str | None = None) -> Token:
        """Consume a token whose text must equal ``value``."""
        token = self.fetch_token()
        if token.value != value:
            self.syntax_error(message or f"expected {value}, got {token.value}")
        return token

    def expect_kind(self, kind: TokenKind) -> Token:
        """Consume a token of the given kind."""
        token = self.fetch_token()
        if token.kind is not kind:
            self.syntax_error(f"expected {kind.value}, got {token.kind.value} instead")
        return token

    def expect_identifier(self) -> Token:
        """Consume an identifier usable as a declaration name."""
        token = self.expect_kind(TokenKind.IDENTIFIER)
        if not token.value.isidentifier():
            self.syntax_error(f"invalid identifier: {token.value}")
        return token

    def expect_number(self) -> Token:
        return self.expect_kind(TokenKind.NUMBER)

    def syntax_error(self, message: str) -> NoReturn:
        raise make_parse_error(message, self.line, self.column)

    def semantic_error(self, message: str) -> NoReturn:
        raise make_semantic_error(message, self.line, self.column)
