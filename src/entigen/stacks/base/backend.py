"""
Generation orchestration.

The Orchestrator renders database.py by walking the model in declaration
order and calling the backend once per entity and operation:

1. Backend namespaces and declarations
2. Per entity: create, delete, find (per searchable field), list, count,
   edit and the aggregate accessors for incoming references

Signatures and the parts of each method that are the same for every
backend (ID short-circuit, parent delete delegation) are emitted here; the
backend fills in the storage logic. ``generate`` runs the orchestrator
together with the backend-independent generators.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ...core import ir
from ...core.errors import BackendError
from .. import Backend
from .generator import (
    GenerationResult,
    Generator,
    ModelsGenerator,
    PackageGenerator,
    SerializationGenerator,
)
from .utils import (
    GenerationScope,
    aggregate_method,
    check_identifier,
    count_method,
    create_method,
    database_class,
    delete_method,
    edit_method,
    find_method,
    kind_param,
    list_method,
    python_type,
    select_scope,
    signature,
)
from .writer import CodeWriter

logger = logging.getLogger(__name__)

VALUE_PARSER_NAMES = ["parse_bool", "parse_bytes", "parse_decimal", "parse_enum", "parse_int"]

DEFAULT_PAGE_SIZE = 20


class Orchestrator(Generator):
    """
    Drives one backend over one model.

    Usage:
        result = Orchestrator(model, get_backend("memory")).generate()
        result.artifacts["database.py"]

    A BackendError raised while emitting one operation is recorded in the
    result as ``<Entity>.<operation>: <message>``; the partial method is
    dropped and generation continues with the next operation.
    """

    artifact = "database.py"

    def __init__(self, model: ir.Model, backend: Backend, scope: GenerationScope | None = None):
        super().__init__(model, scope or select_scope(model), backend.name)
        self.backend = backend
        self._methods: set[str] = set()

    def generate(self) -> GenerationResult:
        model = self.model
        result = GenerationResult()
        writer = CodeWriter()
        database = database_class(model)

        try:
            check_identifier(database, "database class")
        except BackendError as e:
            result.add_error(f"{model.name}: {e.message}")
            return result

        writer.line(
            f'"""{model.name} storage layer, generated by entigen ({self.backend_name} backend)."""'
        )
        writer.blank()
        writer.line("from __future__ import annotations")
        writer.blank()
        writer.line("from decimal import Decimal")

        try:
            self.backend.namespaces(model, writer)
        except BackendError as e:
            result.add_error(f"{model.name}.namespaces: {e.message}")
            return result

        writer.blank()
        with writer.block("from .models import ("):
            for name in self._entity_imports() + VALUE_PARSER_NAMES:
                writer.line(f"{name},")
        writer.line(")")
        writer.blank(2)

        with writer.block(f"class {database}:"):
            writer.line(f'"""{model.name} storage ({self.backend_name} backend)."""')
            writer.blank()
            try:
                self.backend.declarations(model, writer, self.scope.entities)
            except BackendError as e:
                result.add_error(f"{model.name}.declarations: {e.message}")
                return result

            for entity in self.scope.entities:
                logger.debug("generating %s operations for %s", self.backend_name, entity.name)
                for operation, emit in self._operations(entity):
                    mark = writer.mark()
                    try:
                        emit(writer)
                    except BackendError as e:
                        writer.truncate(mark)
                        result.add_error(f"{entity.name}.{operation}: {e.message}")
                        logger.warning("%s.%s: %s", entity.name, operation, e.message)

        result.add_artifact(self.artifact, writer.getvalue())
        return result

    def _operations(self, entity: ir.Entity) -> list[tuple[str, Callable[[CodeWriter], None]]]:
        """The narrowed call set for abstract entities, the full one for concrete ones."""
        operations: list[tuple[str, Callable[[CodeWriter], None]]] = [
            ("create", lambda w: self._create(w, entity)),
            ("delete", lambda w: self._delete(w, entity)),
        ]
        for field_name in entity.searchable_fields:
            operations.append(
                ("find", lambda w, name=field_name: self._find(w, entity, name))
            )
        if not entity.is_abstract:
            operations.append(("list", lambda w: self._list(w, entity)))
        operations.append(("count", lambda w: self._count(w, entity)))
        if not entity.is_abstract:
            operations.append(("edit", lambda w: self._edit(w, entity)))
        for reference in self.model.aggregates_of(entity):
            if self.scope.includes(reference.source):
                operations.append(
                    ("aggregate", lambda w, ref=reference: self._aggregate(w, entity, ref))
                )
        return operations

    def _open(self, writer: CodeWriter, name: str, header: str):
        """Start a method, rejecting names generated twice."""
        if name in self._methods:
            raise BackendError(f"method {name} is generated twice")
        self._methods.add(name)
        writer.blank()
        return writer.block(header)

    def _create(self, writer: CodeWriter, entity: ir.Entity) -> None:
        model = self.model
        params = model.constructor_fields(entity)
        name = create_method(entity)
        sig = signature(model, params)

        if entity.is_abstract:
            kind = kind_param(entity)
            if any(f.decl.name == kind for f in params):
                raise BackendError(f"field name {kind!r} clashes with the create parameter")
            extra = f", {sig}" if sig else ""
            header = (
                f"def {name}(self, instance: {entity.name}, {kind}: {entity.kind_enum}"
                f"{extra}) -> {entity.name}:"
            )
            with self._open(writer, name, header):
                self.backend.create(model, writer, entity, "instance")
        else:
            extra = f", {sig}" if sig else ""
            header = f"def {name}(self{extra}) -> {entity.name}:"
            with self._open(writer, name, header):
                writer.line(f"instance = {entity.name}()")
                self.backend.create(model, writer, entity, "instance")

    def _delete(self, writer: CodeWriter, entity: ir.Entity) -> None:
        name = delete_method(entity)
        with self._open(writer, name, f"def {name}(self, {ir.ID_FIELD}: int) -> bool:"):
            parent = self.model.parent_of(entity)
            if parent is not None:
                self.backend.guard(self.model, writer, entity)
                with writer.block(f"if not self.{delete_method(parent)}({ir.ID_FIELD}):"):
                    writer.line("return False")
            self.backend.delete(self.model, writer, entity)

    def _find(self, writer: CodeWriter, entity: ir.Entity, field_name: str) -> None:
        if field_name == ir.ID_FIELD:
            type_name = ir.ID_TYPE
        else:
            type_name = entity.output_decls[field_name].type

        name = find_method(entity, field_name)
        annotation = python_type(self.model, type_name)
        header = f"def {name}(self, {field_name}: {annotation}) -> {entity.name} | None:"
        with self._open(writer, name, header):
            if field_name == ir.ID_FIELD:
                with writer.block(f"if not {ir.ID_FIELD}:"):
                    writer.line("return None")
            self.backend.find(self.model, writer, entity, field_name)

    def _list(self, writer: CodeWriter, entity: ir.Entity) -> None:
        name = list_method(entity)
        header = (
            f"def {name}(self, page: int = 0, count: int = {DEFAULT_PAGE_SIZE}) "
            f"-> list[{entity.name}]:"
        )
        with self._open(writer, name, header):
            writer.line("offset = page * count")
            self.backend.list(self.model, writer, entity)

    def _count(self, writer: CodeWriter, entity: ir.Entity) -> None:
        name = count_method(entity)
        with self._open(writer, name, f"def {name}(self) -> int:"):
            self.backend.count(self.model, writer, entity)

    def _edit(self, writer: CodeWriter, entity: ir.Entity) -> None:
        name = edit_method(entity)
        header = f"def {name}(self, instance: {entity.name}, field: str, value: str) -> bool:"
        with self._open(writer, name, header):
            self.backend.edit(self.model, writer, entity, "instance")

    def _aggregate(self, writer: CodeWriter, target: ir.Entity, reference: ir.Reference) -> None:
        source = self.model.get_entity(reference.source)
        name = aggregate_method(reference)
        returns = f"{source.name} | None" if reference.unique else f"list[{source.name}]"
        header = f"def {name}(self, {reference.decl_name}: int) -> {returns}:"
        with self._open(writer, name, header):
            self.backend.aggregate(
                self.model, writer, source, target, reference.decl_name, reference.unique
            )


def generate(model: ir.Model, backend: Backend) -> GenerationResult:
    """
    Generate every artifact for ``model`` with ``backend``.

    Returns:
        GenerationResult with models.py, serialization.py, database.py and
        __init__.py; declarations that cannot be emitted and backend failures
        are reported in ``errors``
    """
    logger.info("generating %s with the %s backend", model.name, backend.name)
    scope = select_scope(model)

    result = GenerationResult()
    for error in scope.errors:
        result.add_error(error)

    for entity in model.entities:
        for reference in entity.references:
            if not reference.navigable:
                result.add_warning(
                    f"{reference.source}.{reference.field} references {reference.target} "
                    f"under a different name; no aggregate accessor generated"
                )

    generators: list[Generator] = [
        ModelsGenerator(model, scope, backend.name),
        SerializationGenerator(model, scope, backend.name),
        Orchestrator(model, backend, scope),
        PackageGenerator(model, scope, backend.name),
    ]
    for generator in generators:
        result.merge(generator.generate())

    return result
