"""
Semantic model builder for entigen.

Links parsed declarations into the resolved Model:

1. Parent resolution and cycle detection
2. Sub-entity and abstract status computation
3. Field resolution (discriminator field, output declarations)
4. Duplicate field detection across the inheritance chain
5. Reference index construction
6. Discriminator assignment for sub-entities

Every step reads the complete declaration set, so the result does not
depend on the order in which entities were declared.
"""

from __future__ import annotations

import logging

from . import ir
from .errors import make_semantic_error
from .strings import cap_lower

logger = logging.getLogger(__name__)


def build_model(name: str, declarations: ir.Declarations) -> ir.Model:
    """
    Build a complete Model from declaration tables.

    Args:
        name: Model name
        declarations: Parser output

    Returns:
        Resolved, read-only Model

    Raises:
        SemanticError: On unknown parents, cyclic inheritance or duplicate fields
    """
    entities = declarations.entities

    # 1. Resolve parents and detect cycles
    resolve_parents(declarations)
    detect_cycles(entities)

    # 2. Children in declaration order
    children: dict[str, list[str]] = {entity_name: [] for entity_name in entities}
    for decl in entities.values():
        if decl.parent is not None:
            children[decl.parent].append(decl.name)

    # 3. Resolve fields
    fields = {
        decl.name: resolve_fields(decl, is_abstract=bool(children[decl.name]))
        for decl in entities.values()
    }

    # 4. Duplicate fields, inherited ones included
    validate_fields(entities, fields)

    # 5. Reference index
    references = build_reference_index(entities, fields)

    # 6. Discriminators
    resolved = []
    for decl in entities.values():
        discriminator = None
        discriminator_value = None
        if decl.parent is not None:
            kind = declarations.enums.get(f"{decl.parent}Kind")
            if kind is None or decl.name not in kind.entries:
                raise make_semantic_error(
                    f"entity {decl.name} is missing from discriminator enum {decl.parent}Kind",
                    decl.line,
                )
            discriminator = decl.name
            discriminator_value = kind.entries[decl.name]

        resolved.append(
            ir.Entity(
                name=decl.name,
                parent=decl.parent,
                fields=fields[decl.name],
                sub_entities=children[decl.name],
                kind_enum=f"{decl.name}Kind" if children[decl.name] else None,
                discriminator=discriminator,
                discriminator_value=discriminator_value,
                references=references[decl.name],
                line=decl.line,
            )
        )

    enums = [
        ir.Enumerate(
            name=decl.name,
            members=[
                ir.EnumMember(name=member, value=value)
                for member, value in decl.entries.items()
            ],
            discriminator_for=decl.discriminator_for,
        )
        for decl in declarations.enums.values()
    ]

    logger.debug("built model %s: %d entities, %d enums", name, len(resolved), len(enums))
    return ir.Model(name=name, enums=enums, entities=resolved)


def resolve_parents(declarations: ir.Declarations) -> None:
    """Check that every declared parent names an entity."""
    for decl in declarations.entities.values():
        if decl.parent is None or decl.parent in declarations.entities:
            continue
        if declarations.lookup(decl.parent) is not None:
            raise make_semantic_error(
                f"parent {decl.parent} of entity {decl.name} is not an entity", decl.line
            )
        raise make_semantic_error(
            f"unknown parent entity {decl.parent} of entity {decl.name}", decl.line
        )


def detect_cycles(entities: dict[str, ir.EntityDeclaration]) -> None:
    """
    Walk every parent chain; a chain longer than the entity count is a cycle.

    Raises:
        SemanticError: On self-referential or cyclic parent chains
    """
    bound = len(entities)
    for decl in entities.values():
        visited = {decl.name}
        current = decl.parent
        steps = 0
        while current is not None:
            steps += 1
            if current in visited or steps > bound:
                raise make_semantic_error(
                    f"cyclic inheritance: entity {decl.name} inherits from itself "
                    f"through {current}",
                    decl.line,
                )
            visited.add(current)
            current = entities[current].parent


def resolve_fields(decl: ir.EntityDeclaration, is_abstract: bool) -> list[ir.Field]:
    """
    Build the resolved field list of one entity.

    Abstract entities get a leading Internal discriminator field typed by
    their ``<Name>Kind`` enum; the list is built fresh, declarations are
    left untouched.
    """
    resolved: list[ir.Field] = []

    if is_abstract:
        kind = f"{decl.name}Kind"
        resolved.append(
            ir.Field(
                name=kind,
                type=kind,
                category=ir.TypeCategory.ENUM,
                flags=ir.FieldFlags.INTERNAL,
                decl=ir.FieldDecl(name=kind, type=kind),
                owner=decl.name,
                synthetic=True,
                line=decl.line,
            )
        )

    for field in decl.fields:
        if field.type.is_entity:
            output = ir.FieldDecl(name=f"{cap_lower(field.name)}ID", type=ir.ID_TYPE)
        else:
            output = ir.FieldDecl(name=field.name, type=ir.export_type(field.type.name))

        resolved.append(
            ir.Field(
                name=field.name,
                type=field.type.name,
                category=field.type.category,
                flags=field.flags,
                decl=output,
                owner=decl.name,
                line=field.line,
            )
        )

    return resolved


def validate_fields(
    entities: dict[str, ir.EntityDeclaration], fields: dict[str, list[ir.Field]]
) -> None:
    """
    Reject duplicate field names and output names along each parent chain.

    Raises:
        SemanticError: Naming the first duplicate found
    """
    for decl in entities.values():
        chain = []
        current: str | None = decl.name
        while current is not None:
            chain.append(current)
            current = entities[current].parent

        names: set[str] = set()
        outputs: set[str] = {ir.ID_FIELD}
        for entity_name in reversed(chain):
            for field in fields[entity_name]:
                if field.name in names:
                    raise make_semantic_error(
                        f"duplicate field {field.name} in entity {decl.name}", field.line
                    )
                if field.decl.name in outputs:
                    raise make_semantic_error(
                        f"field {field.name} of entity {decl.name} clashes with "
                        f"output field {field.decl.name}",
                        field.line,
                    )
                names.add(field.name)
                outputs.add(field.decl.name)


def build_reference_index(
    entities: dict[str, ir.EntityDeclaration], fields: dict[str, list[ir.Field]]
) -> dict[str, list[ir.Reference]]:
    """
    Compute, for every entity, the references other entities hold to it.

    A reference whose field name does not match the referenced entity name
    is kept in the index but marked non-navigable, and no aggregate
    accessor is generated for it. Dynamic fields are never stored, so they
    reference nothing.
    """
    index: dict[str, list[ir.Reference]] = {name: [] for name in entities}

    for decl in entities.values():
        for field in fields[decl.name]:
            if not field.is_reference or field.is_dynamic:
                continue

            navigable = cap_lower(field.name) == cap_lower(field.type)
            if not navigable:
                logger.warning(
                    "line %d: field %s.%s references %s under a different name, "
                    "skipping aggregate accessor",
                    field.line,
                    decl.name,
                    field.name,
                    field.type,
                )

            index[field.type].append(
                ir.Reference(
                    source=decl.name,
                    target=field.type,
                    field=field.name,
                    decl_name=field.decl.name,
                    unique=field.is_unique,
                    navigable=navigable,
                )
            )

    return index
