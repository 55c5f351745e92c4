"""
Common utilities for backends.

Provides helpers shared by the orchestrator and every backend:
- Naming of generated methods and storage members
- Python types and defaults for declared field types
- Identifier checks for generated source
"""

from __future__ import annotations

import keyword
from dataclasses import dataclass, field

from ...core import ir
from ...core.errors import BackendError
from ...core.strings import camel_to_snake, pluralize

# Names used as locals or parameters by generated methods
RESERVED_NAMES = frozenset({"self", "instance"})

# Module-level names of the generated models module
RESERVED_TYPE_NAMES = frozenset(
    {
        "Any",
        "Decimal",
        "InvalidOperation",
        "IntEnum",
        "dataclass",
        "INT_RANGES",
        "parse_int",
        "parse_bool",
        "parse_decimal",
        "parse_bytes",
        "parse_enum",
        "sqlite3",
    }
)

# Accepted range of each integer scalar, emitted into models.py for edit parsing
INT_RANGES: dict[str, tuple[int, int]] = {
    "Int16": (-(2**15), 2**15 - 1),
    "UInt16": (0, 2**16 - 1),
    "Int32": (-(2**31), 2**31 - 1),
    "UInt32": (0, 2**32 - 1),
    "Int64": (-(2**63), 2**63 - 1),
    "UInt64": (0, 2**64 - 1),
}

# Output type name -> Python annotation
PYTHON_TYPES: dict[str, str] = {
    "String": "str",
    "bool": "bool",
    "bytes": "bytes",
    "Decimal": "Decimal",
    **{name: "int" for name in INT_RANGES},
}

DEFAULT_VALUES: dict[str, str] = {
    "str": '""',
    "bool": "False",
    "bytes": 'b""',
    "Decimal": 'Decimal("0")',
    "int": "0",
}


def check_identifier(name: str, what: str) -> None:
    """
    Ensure ``name`` can be used verbatim in generated Python source.

    Raises:
        BackendError: If the name is a keyword or not an identifier
    """
    if not name.isidentifier() or keyword.iskeyword(name):
        raise BackendError(f"{what} {name!r} is not a valid Python identifier")


def check_type_name(name: str, what: str) -> None:
    """Like ``check_identifier``, also rejecting names the generated modules define."""
    check_identifier(name, what)
    if name in RESERVED_TYPE_NAMES:
        raise BackendError(f"{what} {name!r} clashes with a generated module name")


def snake(name: str) -> str:
    return camel_to_snake(name)


def plural_snake(name: str) -> str:
    """``StampCategory`` -> ``stamp_categories``."""
    return camel_to_snake(pluralize(name))


def database_class(model: ir.Model) -> str:
    return f"{model.name}Database"


def create_method(entity: ir.Entity) -> str:
    """Public for concrete entities, internal for abstract ones."""
    prefix = "_create" if entity.is_abstract else "create"
    return f"{prefix}_{snake(entity.name)}"


def delete_method(entity: ir.Entity) -> str:
    prefix = "_delete" if entity.is_abstract else "delete"
    return f"{prefix}_{snake(entity.name)}"


def find_method(entity: ir.Entity, field_name: str) -> str:
    return f"find_{snake(entity.name)}_by_{snake(field_name)}"


def list_method(entity: ir.Entity) -> str:
    return f"list_{plural_snake(entity.name)}"


def count_method(entity: ir.Entity) -> str:
    return f"count_{plural_snake(entity.name)}"


def edit_method(entity: ir.Entity) -> str:
    return f"edit_{snake(entity.name)}"


def aggregate_method(reference: ir.Reference) -> str:
    """``GetStampsOfUser`` -> ``get_stamps_of_user``."""
    return camel_to_snake(reference.accessor)


def kind_param(entity: ir.Entity) -> str:
    """Parameter carrying the concrete subtype into an abstract create."""
    return f"{snake(entity.name)}_kind"


def python_type(model: ir.Model, type_name: str) -> str:
    """
    Python annotation for an output type name.

    Enums map to their generated IntEnum; an enum without members can only
    hold None.
    """
    enum = model.get_enum(type_name)
    if enum is not None:
        return type_name if enum.members else f"{type_name} | None"
    return PYTHON_TYPES[type_name]


def default_value(model: ir.Model, type_name: str) -> str:
    """Python expression for the default value of an output type name."""
    enum = model.get_enum(type_name)
    if enum is not None:
        if not enum.members:
            return "None"
        return f"{enum.name}.{enum.members[0].name}"
    return DEFAULT_VALUES[PYTHON_TYPES[type_name]]


def parse_expression(model: ir.Model, decl: ir.FieldDecl, source: str) -> str | None:
    """
    Expression converting the text in ``source`` to a value of ``decl``'s type.

    The helpers it calls live in the generated models module and return None
    on malformed input.

    Returns:
        The expression, or None for strings, which need no parsing
    """
    if model.is_enum(decl.type):
        return f"parse_enum({decl.type}, {source})"
    if decl.type == "String":
        return None
    if decl.type == "bool":
        return f"parse_bool({source})"
    if decl.type == "bytes":
        return f"parse_bytes({source})"
    if decl.type == "Decimal":
        return f"parse_decimal({source})"
    return f"parse_int({source}, {decl.type!r})"


def signature(model: ir.Model, fields: list[ir.Field]) -> str:
    """Keyword parameters for ``fields``, each with its type default."""
    return ", ".join(
        f"{f.decl.name}: {python_type(model, f.decl.type)} = {default_value(model, f.decl.type)}"
        for f in fields
    )


@dataclass
class GenerationScope:
    """
    Entities and enums that can be generated for a model.

    Attributes:
        entities: Generatable entities in declaration order
        enums: Generatable enums in declaration order
        errors: One message per rejected declaration
    """

    entities: list[ir.Entity] = field(default_factory=list)
    enums: list[ir.Enumerate] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def includes(self, entity_name: str) -> bool:
        return any(entity.name == entity_name for entity in self.entities)


def select_scope(model: ir.Model) -> GenerationScope:
    """
    Split a model into what can be emitted as Python and what cannot.

    An enum is rejected when its name or a member name is not a usable
    identifier. An entity is rejected for the same reason on its name or a
    field name, or when a field is typed by a rejected enum; rejecting one
    entity rejects its whole inheritance tree, since parents dispatch to
    their subtypes.
    """
    scope = GenerationScope()

    rejected_enums: set[str] = set()
    for enum in model.enums:
        try:
            check_type_name(enum.name, "enum")
            for member in enum.members:
                check_identifier(member.name, f"member of enum {enum.name}")
        except BackendError as e:
            scope.errors.append(f"{enum.name}: {e.message}")
            rejected_enums.add(enum.name)
        else:
            scope.enums.append(enum)

    rejected_roots: set[str] = set()
    for entity in model.entities:
        try:
            check_type_name(entity.name, "entity")
            for f in entity.fields:
                check_identifier(f.decl.name, f"field of entity {entity.name}")
                if f.decl.name in RESERVED_NAMES:
                    raise BackendError(f"field name {f.decl.name!r} is reserved")
                if f.decl.type in rejected_enums:
                    raise BackendError(f"field {f.name} uses rejected enum {f.decl.type}")
        except BackendError as e:
            scope.errors.append(f"{entity.name}: {e.message}")
            rejected_roots.add(model.root_of(entity).name)

    scope.entities = [
        entity for entity in model.entities if model.root_of(entity).name not in rejected_roots
    ]
    return scope
