"""
Base generator classes for artifact generation.

Generators are responsible for creating specific artifacts:
- ModelsGenerator: enums, entity dataclasses and value parsers (models.py)
- SerializationGenerator: dictionary conversion functions (serialization.py)
- PackageGenerator: package entry point (__init__.py)

The storage layer (database.py) is produced by the Orchestrator, which drives
a backend entity by entity.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from ...core import ir
from .utils import (
    INT_RANGES,
    GenerationScope,
    database_class,
    default_value,
    python_type,
    snake,
)
from .writer import CodeWriter


@dataclass
class GenerationResult:
    """
    Result from a generation run.

    Attributes:
        artifacts: Generated text by artifact name, in generation order
        files_created: Paths written by ``write``
        errors: Non-fatal backend errors, one per entity/operation
        warnings: Warnings to display to user
    """

    artifacts: dict[str, str] = field(default_factory=dict)
    files_created: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Whether generation succeeded (no errors)."""
        return len(self.errors) == 0

    def add_artifact(self, name: str, text: str) -> None:
        self.artifacts[name] = text

    def add_error(self, error: str) -> None:
        """Record an error."""
        self.errors.append(error)

    def add_warning(self, warning: str) -> None:
        """Record a warning."""
        self.warnings.append(warning)

    def merge(self, other: GenerationResult) -> None:
        """Merge another result into this one."""
        self.artifacts.update(other.artifacts)
        self.files_created.extend(other.files_created)
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def write(self, output_dir: Path) -> list[Path]:
        """
        Write every artifact under ``output_dir``.

        Returns:
            Paths written, in artifact order
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        written = []
        for name, text in self.artifacts.items():
            path = output_dir / name
            path.write_text(text, encoding="utf-8")
            written.append(path)
        self.files_created.extend(written)
        return written


class Generator(ABC):
    """
    Base class for all generators.

    A generator renders one artifact from the model, restricted to the
    declarations in ``scope``.
    """

    artifact: str = ""

    def __init__(self, model: ir.Model, scope: GenerationScope, backend_name: str = ""):
        self.model = model
        self.scope = scope
        self.backend_name = backend_name

    @abstractmethod
    def generate(self) -> GenerationResult:
        """
        Generate the artifact.

        Returns:
            GenerationResult holding the artifact text
        """
        pass

    def _header(self, writer: CodeWriter, description: str) -> None:
        writer.line(f'"""{self.model.name} {description}, generated by entigen."""')
        writer.blank()
        writer.line("from __future__ import annotations")
        writer.blank()

    def _entity_imports(self) -> list[str]:
        names = [enum.name for enum in self.scope.enums]
        names.extend(entity.name for entity in self.scope.entities)
        return sorted(names)


VALUE_PARSERS = '''

def parse_int(value: str, type_name: str) -> int | None:
    """Parse a base-10 integer within the range of ``type_name``."""
    try:
        number = int(value.strip())
    except ValueError:
        return None
    low, high = INT_RANGES[type_name]
    if not low <= number <= high:
        return None
    return number


def parse_bool(value: str) -> bool | None:
    text = value.strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    return None


def parse_decimal(value: str) -> Decimal | None:
    try:
        number = Decimal(value.strip())
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def parse_bytes(value: str) -> bytes | None:
    """Parse hexadecimal text."""
    try:
        return bytes.fromhex(value)
    except ValueError:
        return None


def parse_enum(enum_type: type[IntEnum], value: str) -> IntEnum | None:
    """Parse an enum member from its name or its numeric value."""
    text = value.strip()
    if text in enum_type.__members__:
        return enum_type[text]
    try:
        return enum_type(int(text))
    except ValueError:
        return None
'''


class ModelsGenerator(Generator):
    """Renders models.py: one IntEnum per enum, one dataclass per entity."""

    artifact = "models.py"

    def generate(self) -> GenerationResult:
        writer = CodeWriter()
        self._header(writer, "data model")
        writer.line("from dataclasses import dataclass")
        writer.line("from decimal import Decimal, InvalidOperation")
        writer.line("from enum import IntEnum")
        writer.blank()

        with writer.block("INT_RANGES = {"):
            for type_name, (low, high) in INT_RANGES.items():
                writer.line(f'"{type_name}": ({low}, {high}),')
        writer.line("}")
        for text in VALUE_PARSERS.splitlines():
            writer.line(text)

        for enum in self.scope.enums:
            self._enum(writer, enum)
        for entity in self.scope.entities:
            self._entity(writer, entity)

        result = GenerationResult()
        result.add_artifact(self.artifact, writer.getvalue())
        return result

    def _enum(self, writer: CodeWriter, enum: ir.Enumerate) -> None:
        writer.blank(2)
        with writer.block(f"class {enum.name}(IntEnum):"):
            if enum.discriminator_for:
                writer.line(f'"""Subtypes of {enum.discriminator_for}."""')
                if enum.members:
                    writer.blank()
            for member in enum.members:
                writer.line(f"{member.name} = {member.value}")
            if not enum.members and not enum.discriminator_for:
                writer.line("pass")

    def _entity(self, writer: CodeWriter, entity: ir.Entity) -> None:
        model = self.model
        base = f"({entity.parent})" if entity.parent else ""

        writer.blank(2)
        writer.line("@dataclass")
        with writer.block(f"class {entity.name}{base}:"):
            if entity.is_abstract:
                subtypes = ", ".join(entity.sub_entities)
                writer.line(f'"""Abstract entity; subtypes: {subtypes}."""')
                writer.blank()

            if not entity.is_sub_entity:
                writer.line(f"{ir.ID_FIELD}: int = 0")
            else:
                # Subtypes pin the parent's discriminator to their own member
                parent = model.parent_of(entity)
                writer.line(
                    f"{parent.kind_enum}: {parent.kind_enum} = "
                    f"{parent.kind_enum}.{entity.discriminator}"
                )

            for f in entity.fields:
                annotation = python_type(model, f.decl.type)
                writer.line(f"{f.decl.name}: {annotation} = {default_value(model, f.decl.type)}")


class SerializationGenerator(Generator):
    """
    Renders serialization.py.

    ``<entity>_to_dict`` and ``<entity>_from_dict`` cover the stored fields
    in positional order, parent fields first. Hidden fields are only
    exported on request.
    """

    artifact = "serialization.py"

    def generate(self) -> GenerationResult:
        writer = CodeWriter()
        self._header(writer, "dictionary serialization")
        writer.line("from decimal import Decimal")
        writer.line("from typing import Any")
        writer.blank()
        imports = self._entity_imports()
        if imports:
            writer.line(f"from .models import {', '.join(imports)}")

        for entity in self.scope.entities:
            self._to_dict(writer, entity)
            if not entity.is_abstract:
                self._from_dict(writer, entity)

        result = GenerationResult()
        result.add_artifact(self.artifact, writer.getvalue())
        return result

    def _encode(self, f: ir.Field) -> str:
        value = f"instance.{f.decl.name}"
        if self.model.is_enum(f.decl.type):
            return f"{value}.name"
        if f.decl.type == "Decimal":
            return f"str({value})"
        if f.decl.type == "bytes":
            return f"{value}.hex()"
        return value

    def _decode(self, f: ir.Field) -> str:
        value = f'data["{f.decl.name}"]'
        if self.model.is_enum(f.decl.type):
            return f"{f.decl.type}[{value}]"
        if f.decl.type == "Decimal":
            return f"Decimal(str({value}))"
        if f.decl.type == "bytes":
            return f"bytes.fromhex({value})"
        return f"{python_type(self.model, f.decl.type)}({value})"

    def _to_dict(self, writer: CodeWriter, entity: ir.Entity) -> None:
        name = snake(entity.name)
        writer.blank(2)
        header = (
            f"def {name}_to_dict(instance: {entity.name}, "
            f"include_hidden: bool = False) -> dict[str, Any]:"
        )
        with writer.block(header):
            if entity.is_abstract:
                # Dispatch on the discriminator over the closed set of subtypes
                for sub in self.model.sub_entities_of(entity):
                    kind = f"{entity.kind_enum}.{sub.discriminator}"
                    with writer.block(f"if instance.{entity.kind_enum} == {kind}:"):
                        writer.line(f"return {snake(sub.name)}_to_dict(instance, include_hidden)")
                writer.line(
                    f'raise ValueError(f"unknown {entity.name} kind: '
                    f'{{instance.{entity.kind_enum}!r}}")'
                )
                return

            writer.line(f'data: dict[str, Any] = {{"{ir.ID_FIELD}": instance.{ir.ID_FIELD}}}')
            for f in self.model.stored_fields(entity):
                if f.is_hidden:
                    with writer.block("if include_hidden:"):
                        writer.line(f'data["{f.decl.name}"] = {self._encode(f)}')
                else:
                    writer.line(f'data["{f.decl.name}"] = {self._encode(f)}')
            writer.line("return data")

    def _from_dict(self, writer: CodeWriter, entity: ir.Entity) -> None:
        writer.blank(2)
        header = f"def {snake(entity.name)}_from_dict(data: dict[str, Any]) -> {entity.name}:"
        with writer.block(header):
            writer.line(f"instance = {entity.name}()")
            with writer.block(f'if "{ir.ID_FIELD}" in data:'):
                writer.line(f'instance.{ir.ID_FIELD} = int(data["{ir.ID_FIELD}"])')
            for f in self.model.stored_fields(entity):
                with writer.block(f'if "{f.decl.name}" in data:'):
                    writer.line(f"instance.{f.decl.name} = {self._decode(f)}")
            writer.line("return instance")


class PackageGenerator(Generator):
    """Renders the package __init__.py exporting the database class."""

    artifact = "__init__.py"

    def generate(self) -> GenerationResult:
        database = database_class(self.model)
        writer = CodeWriter()
        writer.line(
            f'"""{self.model.name} persistence layer, generated by entigen '
            f'({self.backend_name} backend)."""'
        )
        writer.blank()
        writer.line(f"from .database import {database}")
        writer.blank()
        writer.line(f'__all__ = ["{database}"]')

        result = GenerationResult()
        result.add_artifact(self.artifact, writer.getvalue())
        return result
