"""
Recursive-descent parser for the entigen DSL.

Combines the grammar mixins into one Parser and exposes ``parse_dsl``.
The parser consumes one top-level declaration at a time (``entity`` or
``enum``) and produces the declaration tables; linking into the semantic
model happens afterwards in ``entigen.core.linker``.
"""

from __future__ import annotations

import logging

from .. import ir
from ..lexer import Token, tokenize
from .base import BaseParser
from .entity import EntityParserMixin
from .enum import EnumParserMixin
from .types import TypeParserMixin

logger = logging.getLogger(__name__)


class Parser(EntityParserMixin, EnumParserMixin, TypeParserMixin, BaseParser):
    """
    Parser for entigen declarations.

    Declaration tables are insertion-ordered and local to the instance.
    """

    def __init__(self, tokens: list[Token]):
        super().__init__(tokens)
        self.entities: dict[str, ir.EntityDeclaration] = {}
        self.enums: dict[str, ir.EnumDeclaration] = {}
        self.scalars: dict[str, ir.TypeDeclaration] = {
            name: ir.TypeDeclaration(name=name) for name in ir.SCALAR_TYPE_NAMES
        }

    def check_available(self, name: str) -> None:
        """Reject a declaration name that is already taken."""
        if name in self.scalars:
            self.semantic_error(f"{name} is a built-in type")
        if name in self.entities:
            self.semantic_error(f"duplicate entity {name}")
        if name in self.enums:
            self.semantic_error(f"duplicate enum {name}")

    def parse(self) -> ir.Declarations:
        """
        Parse the whole token stream.

        Returns:
            Declarations with entities, enums and built-in scalars

        Raises:
            ParseError: On unexpected tokens
            SemanticError: On unresolved or duplicate names
        """
        while self.has_tokens():
            token = self.fetch_token()

            if token.value == "entity":
                decl = self.parse_entity()
                logger.debug("line %d: parsed entity %s", decl.line, decl.name)
            elif token.value == "enum":
                decl = self.parse_enum()
                logger.debug("line %d: parsed enum %s", decl.line, decl.name)
            else:
                self.syntax_error(f"Unexpected token: {token.value}")

        return ir.Declarations(
            entities=self.entities, enums=self.enums, scalars=self.scalars
        )


def parse_dsl(text: str) -> ir.Declarations:
    """
    Tokenize and parse DSL text.

    Args:
        text: DSL source

    Returns:
        Declaration tables
    """
    return Parser(tokenize(text)).parse()


__all__ = ["Parser", "parse_dsl"]
