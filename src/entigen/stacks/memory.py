"""
In-memory backend.

Generated storage keeps one dict per entity, keyed by ID. A sub-entity
instance is stored in its own dict and in every ancestor's dict, so each
level of the hierarchy can be queried and deleted on its own. Identities
come from a counter starting at 1; 0 is never a valid ID.

This is the reference backend the conformance tests run against.
"""

from __future__ import annotations

from ..core import ir
from . import Backend, BackendCapabilities
from .base.utils import create_method, kind_param, plural_snake
from .base.writer import CodeWriter


def store_name(entity: ir.Entity) -> str:
    """Attribute holding the entity's dict: ``_stamps``."""
    return f"_{plural_snake(entity.name)}"


class MemoryBackend(Backend):
    """Dict-per-entity storage living inside the database object."""

    name = "memory"

    def get_capabilities(self) -> BackendCapabilities:
        return BackendCapabilities(
            name=self.name,
            description="In-memory dict storage (reference backend)",
        )

    def namespaces(self, model: ir.Model, writer: CodeWriter) -> None:
        # Generated code only needs the models module
        pass

    def declarations(self, model: ir.Model, writer: CodeWriter, entities: list[ir.Entity]) -> None:
        with writer.block("def __init__(self) -> None:"):
            writer.line("self._next_id = 1")
            for entity in entities:
                writer.line(f"self.{store_name(entity)}: dict[int, {entity.name}] = {{}}")

    def create(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity, instance: str) -> None:
        parent = model.parent_of(entity)
        if parent is None:
            writer.line(f"{instance}.{ir.ID_FIELD} = self._next_id")
            writer.line("self._next_id += 1")
        else:
            args = [instance, f"{parent.kind_enum}.{entity.discriminator}"]
            args.extend(f.decl.name for f in model.constructor_fields(parent))
            writer.line(f"self.{create_method(parent)}({', '.join(args)})")

        for f in entity.fields:
            if f.is_dynamic:
                continue
            if f.synthetic:
                writer.line(f"{instance}.{f.decl.name} = {kind_param(entity)}")
            elif not f.is_internal:
                writer.line(f"{instance}.{f.decl.name} = {f.decl.name}")

        writer.line(f"self.{store_name(entity)}[{instance}.{ir.ID_FIELD}] = {instance}")
        writer.line(f"return {instance}")

    def delete(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity) -> None:
        writer.line(f"return self.{store_name(entity)}.pop({ir.ID_FIELD}, None) is not None")

    def guard(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity) -> None:
        with writer.block(f"if {ir.ID_FIELD} not in self.{store_name(entity)}:"):
            writer.line("return False")

    def find(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity, field_name: str) -> None:
        store = f"self.{store_name(entity)}"
        if field_name == ir.ID_FIELD:
            if not entity.is_abstract:
                writer.line(f"return {store}.get({ir.ID_FIELD})")
                return
            writer.line(f"instance = {store}.get({ir.ID_FIELD})")
            with writer.block("if instance is None:"):
                writer.line("return None")
            self.emit_dispatch(
                model, writer, entity, f"instance.{entity.kind_enum}", ir.ID_FIELD
            )
            return

        writer.line(
            f"return next((instance for instance in {store}.values() "
            f"if instance.{field_name} == {field_name}), None)"
        )

    def list(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity) -> None:
        writer.line(f"return list(self.{store_name(entity)}.values())[offset:offset + count]")

    def count(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity) -> None:
        writer.line(f"return len(self.{store_name(entity)})")

    def aggregate(
        self,
        model: ir.Model,
        writer: CodeWriter,
        source: ir.Entity,
        target: ir.Entity,
        field_name: str,
        unique: bool,
    ) -> None:
        rows = (
            f"instance for instance in self.{store_name(source)}.values() "
            f"if instance.{field_name} == {field_name}"
        )
        if unique:
            writer.line(f"return next(({rows}), None)")
        else:
            writer.line(f"return [{rows}]")

    def edit(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity, instance: str) -> None:
        def persist(writer: CodeWriter, f: ir.Field, instance: str, value: str) -> None:
            writer.line(f"{instance}.{f.decl.name} = {value}")

        self.emit_edit(model, writer, entity, instance, persist)
