"""
Type and flag parsing for the entigen DSL.

Type names are resolved immediately against the declaration tables,
consulted in order: user entities, user enums, built-in scalars.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import ir
from ..lexer import TokenKind


class TypeParserMixin:
    """Parser mixin for type references and field flag lists."""

    if TYPE_CHECKING:
        fetch_token: Any
        syntax_error: Any
        semantic_error: Any
        entities: dict[str, ir.EntityDeclaration]
        enums: dict[str, ir.EnumDeclaration]
        scalars: dict[str, ir.TypeDeclaration]

    def resolve_type(self, name: str) -> ir.TypeDeclaration | None:
        if name in self.entities:
            return self.entities[name]
        if name in self.enums:
            return self.enums[name]
        return self.scalars.get(name)

    def expect_type(self) -> ir.TypeDeclaration:
        """
        Parse a type name and resolve it.

        Returns:
            Reference to the resolved declaration

        Raises:
            ParseError: If the token is not an identifier
            SemanticError: If the name does not resolve
        """
        token = self.fetch_token()

        if token.kind is not TokenKind.IDENTIFIER:
            self.syntax_error(f"expected type, got {token.kind.value}")

        decl = self.resolve_type(token.value)
        if decl is None:
            self.semantic_error(f"unknown type: {token.value}")

        return decl.ref()

    def parse_flags(self) -> ir.FieldFlags:
        """
        Parse a flag list after its opening ``[``.

        Grammar:
            FLAG ((',')? FLAG)* ']'

        Returns:
            Union of the parsed flags
        """
        flags = ir.FieldFlags.NONE
        count = 0
        after_comma = False

        while True:
            token = self.fetch_token()

            if token.value == "]":
                if after_comma:
                    self.syntax_error("expected flag name after ','")
                break

            if token.value == ",":
                if count == 0 or after_comma:
                    self.syntax_error("unexpected ',' in flag list")
                after_comma = True
                continue

            if token.kind is not TokenKind.IDENTIFIER:
                self.syntax_error(f"expected flag name, got {token.value}")

            flag = ir.FieldFlags.parse(token.value)
            if flag is None:
                self.semantic_error(f"Invalid field flag: {token.value}")

            flags |= flag
            count += 1
            after_comma = False

        return flags
