"""
Enum parser mixin for the entigen DSL.

DSL Syntax:

    enum Rarity { Common, Uncommon, Rare = 10, Legendary }

Members without an explicit value take the previous member's value + 1,
starting at 0, so the example yields 0, 1, 10, 11.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import ir
from .entity import UINT32_MAX


class EnumParserMixin:
    """Parser mixin for enum declarations."""

    if TYPE_CHECKING:
        fetch_token: Any
        rewind: Any
        expect_token: Any
        expect_identifier: Any
        expect_number: Any
        semantic_error: Any
        check_available: Any
        enums: dict[str, ir.EnumDeclaration]

    def parse_enum(self) -> ir.EnumDeclaration:
        """
        Parse an enum declaration after its ``enum`` keyword.

        Grammar:
            enum IDENTIFIER '{' (member (',' member)*)? '}'
            member := IDENTIFIER ('=' NUMBER)?

        Returns:
            EnumDeclaration with parsed entries
        """
        name_token = self.expect_identifier()
        name = name_token.value
        self.check_available(name)

        self.expect_token("{")

        entries: dict[str, int] = {}
        while True:
            token = self.fetch_token()
            if token.value == "}":
                break
            self.rewind()

            if entries:
                self.expect_token(",")

            member = self.expect_identifier().value

            token = self.fetch_token()
            if token.value == "=":
                literal = self.expect_number().value
                value = int(literal)
            else:
                self.rewind()
                literal = None
                value = list(entries.values())[-1] + 1 if entries else 0

            if value > UINT32_MAX:
                self.semantic_error(f"Invalid enum value for {member} => {literal or value}")

            if member in entries:
                self.semantic_error(f"Duplicated entry {member} in enum {name}")

            entries[member] = value

        decl = ir.EnumDeclaration(name=name, entries=entries, line=name_token.line)
        self.enums[name] = decl
        return decl
