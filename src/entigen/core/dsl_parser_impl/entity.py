"""
Entity parser mixin for the entigen DSL.

DSL Syntax:

    entity Stamp : Item {
        title: String [Editable, Searchable];
        owner: User;
    }

Declaring a parent registers the entity as the next member of the parent's
discriminator enum ``<Parent>Kind``, creating that enum on first use.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import ir

UINT32_MAX = 2**32 - 1


class EntityParserMixin:
    """Parser mixin for entity declarations."""

    if TYPE_CHECKING:
        fetch_token: Any
        rewind: Any
        expect_token: Any
        expect_identifier: Any
        expect_type: Any
        parse_flags: Any
        semantic_error: Any
        check_available: Any
        line: int
        entities: dict[str, ir.EntityDeclaration]
        enums: dict[str, ir.EnumDeclaration]
        scalars: dict[str, ir.TypeDeclaration]

    def parse_entity(self) -> ir.EntityDeclaration:
        """
        Parse an entity declaration after its ``entity`` keyword.

        Grammar:
            entity IDENTIFIER (':' IDENTIFIER)? '{' field* '}'

        Returns:
            EntityDeclaration with parsed fields
        """
        name_token = self.expect_identifier()
        name = name_token.value
        self.check_available(name)

        parent = None
        token = self.fetch_token()
        if token.value == ":":
            parent = self.expect_identifier().value
            self.register_subtype(parent, name)
        else:
            self.rewind()

        self.expect_token("{")

        fields: list[ir.EntityField] = []
        while True:
            token = self.fetch_token()
            if token.value == "}":
                break
            self.rewind()
            fields.append(self.parse_field())

        decl = ir.EntityDeclaration(
            name=name, parent=parent, fields=fields, line=name_token.line
        )
        self.entities[name] = decl
        return decl

    def parse_field(self) -> ir.EntityField:
        """
        Parse one field.

        Grammar:
            IDENTIFIER ':' TYPE ('[' flags ']')? ';'
        """
        name_token = self.expect_identifier()
        self.expect_token(":")
        field_type = self.expect_type()

        flags = ir.FieldFlags.NONE
        token = self.fetch_token()
        if token.value == "[":
            flags = self.parse_flags()
        else:
            self.rewind()

        self.expect_token(";")

        return ir.EntityField(
            name=name_token.value, type=field_type, flags=flags, line=name_token.line
        )

    def register_subtype(self, parent: str, child: str) -> None:
        """Add ``child`` as the next member of ``<parent>Kind``."""
        key = f"{parent}Kind"

        kind = self.enums.get(key)
        if kind is None:
            if key in self.entities or key in self.scalars:
                self.semantic_error(f"discriminator enum {key} conflicts with type {key}")
            kind = ir.EnumDeclaration(name=key, line=self.line)

        if child in kind.entries:
            self.semantic_error(f"Duplicated entry {child} in enum {key}")

        value = kind.next_value
        if value > UINT32_MAX:
            self.semantic_error(f"Invalid enum value for {child} => {value}")

        entries = dict(kind.entries)
        entries[child] = value
        self.enums[key] = kind.model_copy(
            update={"entries": entries, "discriminator_for": parent}
        )
