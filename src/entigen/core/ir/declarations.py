"""
Declaration types for entigen IR.

These are the parse-time nodes produced by the DSL parser: type
declarations (scalar, enum, entity), entity fields and the field flag set.
Type references inside fields are resolved at parse time and stored as
lightweight ``TypeDeclaration`` references carrying the type's category.

DSL Syntax:

    enum Rarity { Common, Rare = 5, Legendary }

    entity Stamp : Item {
        owner: User [Unique];
        rarity: Rarity [Editable, Searchable];
    }
"""

from __future__ import annotations

from enum import Enum, IntFlag

from pydantic import BaseModel, ConfigDict, Field

# Built-in scalar types, in registration order
SCALAR_TYPE_NAMES = (
    "String",
    "Bool",
    "Bytes",
    "Decimal",
    "Int16",
    "UInt16",
    "Int32",
    "UInt32",
    "Int64",
    "UInt64",
)


class FieldFlags(IntFlag):
    """Attributes that can be attached to an entity field."""

    NONE = 0
    EDITABLE = 1
    HIDDEN = 2
    SEARCHABLE = 4
    INTERNAL = 8
    UNIQUE = 16
    DYNAMIC = 32

    @classmethod
    def parse(cls, name: str) -> FieldFlags | None:
        """
        Look up a flag by its DSL spelling.

        Returns:
            The flag, or None when the name is not a known flag
        """
        return FLAG_NAMES.get(name)

    @property
    def names(self) -> list[str]:
        """DSL spellings of the flags set, in declaration order."""
        return [name for name, flag in FLAG_NAMES.items() if flag in self]


FLAG_NAMES: dict[str, FieldFlags] = {
    "Editable": FieldFlags.EDITABLE,
    "Hidden": FieldFlags.HIDDEN,
    "Searchable": FieldFlags.SEARCHABLE,
    "Internal": FieldFlags.INTERNAL,
    "Unique": FieldFlags.UNIQUE,
    "Dynamic": FieldFlags.DYNAMIC,
}


class TypeCategory(str, Enum):
    """The three kinds of named types."""

    SCALAR = "scalar"
    ENUM = "enum"
    ENTITY = "entity"


class TypeDeclaration(BaseModel):
    """
    A named type.

    Used directly for built-in scalars and as the resolved type reference
    held by entity fields.
    """

    name: str
    category: TypeCategory = TypeCategory.SCALAR
    line: int = 0

    model_config = ConfigDict(frozen=True)

    def ref(self) -> TypeDeclaration:
        """Lightweight reference to this declaration (name + category)."""
        return TypeDeclaration(name=self.name, category=self.category)

    @property
    def is_scalar(self) -> bool:
        return self.category is TypeCategory.SCALAR

    @property
    def is_enum(self) -> bool:
        return self.category is TypeCategory.ENUM

    @property
    def is_entity(self) -> bool:
        return self.category is TypeCategory.ENTITY


class EnumDeclaration(TypeDeclaration):
    """
    An enumeration: ordered member name -> unsigned value.

    Attributes:
        entries: Members in declaration order
        discriminator_for: Entity whose subtypes this enum discriminates,
            set when the enum was created or extended by ``entity X : Parent``
    """

    category: TypeCategory = TypeCategory.ENUM
    entries: dict[str, int] = Field(default_factory=dict)
    discriminator_for: str | None = None

    @property
    def next_value(self) -> int:
        """Auto value for the next member: previous value + 1, starting at 0."""
        if not self.entries:
            return 0
        return list(self.entries.values())[-1] + 1


class EntityField(BaseModel):
    """
    Declaration-time field of an entity.

    Attributes:
        name: Field identifier
        type: Resolved type reference
        flags: Field flag set
    """

    name: str
    type: TypeDeclaration
    flags: FieldFlags = FieldFlags.NONE
    line: int = 0

    model_config = ConfigDict(frozen=True)


class EntityDeclaration(TypeDeclaration):
    """
    An entity declaration.

    Attributes:
        parent: Name of the parent entity, if any (resolved at link time)
        fields: Declared fields in source order
    """

    category: TypeCategory = TypeCategory.ENTITY
    parent: str | None = None
    fields: list[EntityField] = Field(default_factory=list)


class Declarations(BaseModel):
    """
    Declaration tables produced by the parser, in insertion order.

    Attributes:
        entities: User entities by name
        enums: User and discriminator enums by name
        scalars: Built-in scalar types by name
    """

    entities: dict[str, EntityDeclaration] = Field(default_factory=dict)
    enums: dict[str, EnumDeclaration] = Field(default_factory=dict)
    scalars: dict[str, TypeDeclaration] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def lookup(self, name: str) -> TypeDeclaration | None:
        """Resolve a type name: entities, then enums, then scalars."""
        if name in self.entities:
            return self.entities[name]
        if name in self.enums:
            return self.enums[name]
        return self.scalars.get(name)
