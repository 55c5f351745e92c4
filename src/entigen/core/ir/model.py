"""
Semantic model types for entigen IR.

The Model is the fully resolved, read-only entity/enum graph handed to every
backend call. Entities are linked by name; the Model provides the graph
queries (parent chain, flattened fields, reference index) that backends use.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field as PydanticField

from ..strings import pluralize
from .declarations import FieldFlags, TypeCategory

# Implicit identity field carried by every entity
ID_FIELD = "ID"

# Scalar used for identities and resolved entity references
ID_TYPE = "UInt64"

# Output type normalisation for declared scalar names
EXPORT_TYPES = {
    "Bool": "bool",
    "Bytes": "bytes",
}


def export_type(type_name: str) -> str:
    """Normalise a declared type name to its output type name."""
    return EXPORT_TYPES.get(type_name, type_name)


class FieldDecl(BaseModel):
    """Output name and output type of a field."""

    name: str
    type: str

    model_config = ConfigDict(frozen=True)


class Field(BaseModel):
    """
    A resolved entity field.

    Attributes:
        name: Declared field name
        type: Declared type name
        category: Category of the declared type
        flags: Field flags
        decl: Output declaration (``ownerID: UInt64`` for entity references)
        owner: Name of the entity declaring the field
        synthetic: True for the implicit discriminator field
    """

    name: str
    type: str
    category: TypeCategory = TypeCategory.SCALAR
    flags: FieldFlags = FieldFlags.NONE
    decl: FieldDecl
    owner: str
    synthetic: bool = False
    line: int = 0

    model_config = ConfigDict(frozen=True)

    def has(self, flag: FieldFlags) -> bool:
        return bool(self.flags & flag)

    @property
    def is_editable(self) -> bool:
        return self.has(FieldFlags.EDITABLE)

    @property
    def is_hidden(self) -> bool:
        return self.has(FieldFlags.HIDDEN)

    @property
    def is_searchable(self) -> bool:
        return self.has(FieldFlags.SEARCHABLE)

    @property
    def is_internal(self) -> bool:
        return self.has(FieldFlags.INTERNAL)

    @property
    def is_unique(self) -> bool:
        return self.has(FieldFlags.UNIQUE)

    @property
    def is_dynamic(self) -> bool:
        return self.has(FieldFlags.DYNAMIC)

    @property
    def is_reference(self) -> bool:
        return self.category is TypeCategory.ENTITY

    @property
    def is_enum(self) -> bool:
        return self.category is TypeCategory.ENUM


class Reference(BaseModel):
    """
    A field on ``source`` whose type is the entity ``target``.

    Attributes:
        source: Referencing entity
        target: Referenced entity
        field: Declared name of the referencing field
        decl_name: Output name of the referencing field (``ownerID``)
        unique: One-to-one when the field is flagged Unique
        navigable: True when the field name matches the target entity name;
            only navigable references get aggregate accessors
    """

    source: str
    target: str
    field: str
    decl_name: str
    unique: bool = False
    navigable: bool = True

    model_config = ConfigDict(frozen=True)

    @property
    def accessor(self) -> str:
        """Aggregate accessor name: ``GetStampOfUser`` or ``GetStampsOfUser``."""
        source = self.source if self.unique else pluralize(self.source)
        return f"Get{source}Of{self.target}"


class EnumMember(BaseModel):
    name: str
    value: int

    model_config = ConfigDict(frozen=True)


class Enumerate(BaseModel):
    """
    A resolved enumeration.

    Attributes:
        name: Enum name
        members: Members in declaration order
        discriminator_for: Abstract entity this enum discriminates, if any
    """

    name: str
    members: list[EnumMember] = PydanticField(default_factory=list)
    discriminator_for: str | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def values(self) -> list[str]:
        return [member.name for member in self.members]

    def value_of(self, name: str) -> int | None:
        for member in self.members:
            if member.name == name:
                return member.value
        return None


class Entity(BaseModel):
    """
    A resolved entity.

    Attributes:
        name: Entity name
        parent: Parent entity name, if any
        fields: Own fields; abstract entities start with their discriminator
        sub_entities: Direct children in declaration order
        kind_enum: Discriminator enum name (abstract entities only)
        discriminator: Member of the parent's discriminator enum naming this entity
        discriminator_value: Value of that member
        references: Incoming references (entities holding a reference to this one)
    """

    name: str
    parent: str | None = None
    fields: list[Field] = PydanticField(default_factory=list)
    sub_entities: list[str] = PydanticField(default_factory=list)
    kind_enum: str | None = None
    discriminator: str | None = None
    discriminator_value: int | None = None
    references: list[Reference] = PydanticField(default_factory=list)
    line: int = 0

    model_config = ConfigDict(frozen=True)

    @property
    def is_abstract(self) -> bool:
        """An entity is abstract iff some other entity names it as parent."""
        return bool(self.sub_entities)

    @property
    def is_sub_entity(self) -> bool:
        return self.parent is not None

    @property
    def output_decls(self) -> dict[str, FieldDecl]:
        """Output name -> output declaration, in field order."""
        return {field.decl.name: field.decl for field in self.fields}

    @property
    def discriminator_field(self) -> Field | None:
        for field in self.fields:
            if field.synthetic:
                return field
        return None

    def get_field(self, name: str) -> Field | None:
        """Get own field by declared name."""
        for field in self.fields:
            if field.name == name:
                return field
        return None

    @property
    def searchable_fields(self) -> list[str]:
        """Output names usable for lookups: the implicit ID plus Searchable fields."""
        names = [ID_FIELD]
        for field in self.fields:
            if field.is_searchable and not field.is_dynamic:
                names.append(field.decl.name)
        return names


class Model(BaseModel):
    """
    Complete compiled model.

    Built once per compilation and read-only afterwards.
    """

    name: str
    enums: list[Enumerate] = PydanticField(default_factory=list)
    entities: list[Entity] = PydanticField(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def get_entity(self, name: str) -> Entity | None:
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def get_enum(self, name: str) -> Enumerate | None:
        for enum in self.enums:
            if enum.name == name:
                return enum
        return None

    def is_enum(self, type_name: str) -> bool:
        return self.get_enum(type_name) is not None

    def parent_of(self, entity: Entity) -> Entity | None:
        if entity.parent is None:
            return None
        return self.get_entity(entity.parent)

    def sub_entities_of(self, entity: Entity) -> list[Entity]:
        return [e for e in (self.get_entity(n) for n in entity.sub_entities) if e is not None]

    def ancestors(self, entity: Entity) -> list[Entity]:
        """Parent chain, nearest first."""
        chain = []
        current = self.parent_of(entity)
        while current is not None:
            chain.append(current)
            current = self.parent_of(current)
        return chain

    def root_of(self, entity: Entity) -> Entity:
        chain = self.ancestors(entity)
        return chain[-1] if chain else entity

    def all_fields(self, entity: Entity) -> list[Field]:
        """Own fields preceded by the parent's, recursively."""
        parent = self.parent_of(entity)
        inherited = self.all_fields(parent) if parent else []
        return inherited + list(entity.fields)

    def stored_fields(self, entity: Entity) -> list[Field]:
        """Flattened fields that are persisted and serialized (non-Dynamic)."""
        return [f for f in self.all_fields(entity) if not f.is_dynamic]

    def constructor_fields(self, entity: Entity) -> list[Field]:
        """Flattened fields passed to create: stored and not Internal."""
        return [f for f in self.stored_fields(entity) if not f.is_internal]

    def editable_fields(self, entity: Entity) -> list[Field]:
        return [f for f in self.stored_fields(entity) if f.is_editable]

    def references_to(self, entity: Entity) -> list[Reference]:
        return list(entity.references)

    def aggregates_of(self, entity: Entity) -> list[Reference]:
        """Incoming references that get an aggregate accessor."""
        return [ref for ref in entity.references if ref.navigable]

    @property
    def concrete_entities(self) -> list[Entity]:
        return [e for e in self.entities if not e.is_abstract]

    @property
    def abstract_entities(self) -> list[Entity]:
        return [e for e in self.entities if e.is_abstract]
