"""
Backend plugin system for entigen.

A backend is the pluggable half of code generation: the orchestrator walks
the compiled Model entity by entity and asks the backend to emit the body of
each storage operation into a shared CodeWriter.
"""

from __future__ import annotations

import importlib
import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from ..core import ir
from ..core.errors import BackendError
from .base.utils import find_method, parse_expression
from .base.writer import CodeWriter

logger = logging.getLogger(__name__)

# Emits the storage update for one edited field: (writer, field, instance, value)
PersistEdit = Callable[[CodeWriter, ir.Field, str, str], None]


@dataclass
class BackendCapabilities:
    """
    Describes what a backend generates.

    Used for introspection and CLI help text.
    """

    name: str
    description: str
    output_formats: list[str] = field(default_factory=lambda: ["python"])
    persistent: bool = False  # Data outlives the generated database object


class Backend(ABC):
    """
    Abstract base class for all entigen backends (the generator contract).

    Every operation receives the read-only Model and the shared CodeWriter,
    positioned inside the method the orchestrator has opened. The
    orchestrator emits method signatures, the ID short-circuit of find and
    the parent delegation of delete; backends emit storage-specific bodies.

    A backend raises BackendError for anything it cannot express in its
    storage medium; the orchestrator records it against the entity and
    operation and moves on.
    """

    name: str = ""

    @abstractmethod
    def namespaces(self, model: ir.Model, writer: CodeWriter) -> None:
        """Emit module-level imports needed by the generated storage code."""
        pass

    @abstractmethod
    def declarations(self, model: ir.Model, writer: CodeWriter, entities: list[ir.Entity]) -> None:
        """
        Emit backend-wide state inside the database class.

        Called once per run with every generatable entity; emits ``__init__``
        and any helpers the per-entity operations rely on.
        """
        pass

    @abstractmethod
    def create(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity, instance: str) -> None:
        """
        Emit the body of a create method.

        Root entities assign the identity; sub-entities call their parent's
        internal create with their discriminator value first. Abstract
        entities store the kind passed in ``kind_param(entity)``. The body
        persists every non-Dynamic field and returns ``instance``.
        """
        pass

    @abstractmethod
    def delete(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity) -> None:
        """Emit the body removing the row for ``ID``; returns whether one was removed."""
        pass

    @abstractmethod
    def guard(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity) -> None:
        """
        Emit an early ``return False`` when ``entity`` holds no row for ``ID``.

        Sub-entity deletes run it before delegating to the parent, so an ID
        owned by a sibling subtype never reaches the parent's storage.
        """
        pass

    @abstractmethod
    def find(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity, field_name: str) -> None:
        """
        Emit the body of a lookup by one searchable field.

        The parameter is named after the field's output name. Lookups by ID
        on abstract entities dispatch to the subtype's own lookup.
        """
        pass

    @abstractmethod
    def list(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity) -> None:
        """Emit the body of a paginated listing; ``offset = page * count``."""
        pass

    @abstractmethod
    def count(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity) -> None:
        pass

    @abstractmethod
    def aggregate(
        self,
        model: ir.Model,
        writer: CodeWriter,
        source: ir.Entity,
        target: ir.Entity,
        field_name: str,
        unique: bool,
    ) -> None:
        """
        Emit the body returning the ``source`` rows whose ``field_name`` holds
        the given ``target`` id: a list, or the single row (or None) if unique.
        """
        pass

    @abstractmethod
    def edit(self, model: ir.Model, writer: CodeWriter, entity: ir.Entity, instance: str) -> None:
        """
        Emit the body updating one Editable field named by ``field`` from the
        text in ``value``; returns False without mutating on parse failure.
        """
        pass

    def get_capabilities(self) -> BackendCapabilities:
        """
        Get backend capabilities for introspection.

        Override to provide backend metadata.
        """
        return BackendCapabilities(
            name=self.name or self.__class__.__name__,
            description="No description provided",
        )

    # Helpers shared by concrete backends

    def emit_dispatch(
        self, model: ir.Model, writer: CodeWriter, entity: ir.Entity, kind: str, key: str
    ) -> None:
        """
        Dispatch an abstract lookup on the discriminator held in ``kind``.

        The subtype set is closed, so every member gets a branch and anything
        else yields None.
        """
        for sub in model.sub_entities_of(entity):
            with writer.block(f"if {kind} == {entity.kind_enum}.{sub.discriminator}:"):
                writer.line(f"return self.{find_method(sub, ir.ID_FIELD)}({key})")
        writer.line("return None")

    def emit_edit(
        self,
        model: ir.Model,
        writer: CodeWriter,
        entity: ir.Entity,
        instance: str,
        persist: PersistEdit,
    ) -> None:
        """
        Emit the edit dispatch over the entity's Editable fields, inherited ones included.

        Fields are named as declared; a reference field also answers to its
        output name (``user`` or ``userID``).
        """
        for f in model.editable_fields(entity):
            if f.decl.name == f.name:
                condition = f'field == "{f.name}"'
            else:
                condition = f'field in ("{f.name}", "{f.decl.name}")'
            with writer.block(f"if {condition}:"):
                expression = parse_expression(model, f.decl, "value")
                if expression is None:
                    writer.line("parsed = value")
                else:
                    writer.line(f"parsed = {expression}")
                    with writer.block("if parsed is None:"):
                        writer.line("return False")
                persist(writer, f, instance, "parsed")
                writer.line("return True")
        writer.line("return False")


class BackendRegistry:
    """
    Registry for backend plugins.

    Supports:
    - Manual registration via register()
    - Auto-discovery of backend modules in the stacks package
    - Lookup by name
    """

    def __init__(self) -> None:
        self._backends: dict[str, type[Backend]] = {}

    def register(self, name: str, backend_class: type[Backend]) -> None:
        """
        Register a backend class.

        Args:
            name: Backend name (used in CLI: --backend <name>)
            backend_class: Backend class (must extend Backend)

        Raises:
            BackendError: If name already registered or class invalid
        """
        if name in self._backends:
            raise BackendError(
                f"Backend '{name}' is already registered. Cannot register {backend_class.__name__}."
            )

        if not issubclass(backend_class, Backend):
            raise BackendError(f"Backend class {backend_class.__name__} must extend Backend")

        self._backends[name] = backend_class

    def get(self, name: str) -> Backend:
        """
        Get a fresh backend instance by name.

        Raises:
            BackendError: If backend not found
        """
        if name not in self._backends:
            available = list(self._backends.keys())
            raise BackendError(f"Backend '{name}' not found. Available backends: {available}")

        return self._backends[name]()

    def list_backends(self) -> list[str]:
        return list(self._backends.keys())

    def discover(self) -> None:
        """
        Auto-discover backends among the modules of this package.

        Each module defining a Backend subclass is registered under the
        module name (``memory`` from memory.py).
        """
        stacks_dir = Path(__file__).parent

        for py_file in sorted(stacks_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            self._try_register_module(py_file.stem)

    def _try_register_module(self, module_name: str) -> None:
        """Import a backend module and register its Backend subclass."""
        if module_name in self._backends:
            return

        try:
            module = importlib.import_module(f"{__name__}.{module_name}")
        except ImportError as e:
            # Optional backends may depend on packages that are not installed
            logger.warning("Skipping backend module %s: %s", module_name, e)
            return

        for _name, obj in inspect.getmembers(module, inspect.isclass):
            if issubclass(obj, Backend) and obj is not Backend and obj.__module__ == module.__name__:
                if module_name not in self._backends:
                    self.register(module_name, obj)


# Global registry instance
_registry: BackendRegistry | None = None


def get_registry() -> BackendRegistry:
    """
    Get the global backend registry.

    Performs auto-discovery on first call.
    """
    global _registry
    if _registry is None:
        _registry = BackendRegistry()
        _registry.discover()
    return _registry


def register_backend(name: str, backend_class: type[Backend]) -> None:
    """Register a backend in the global registry."""
    get_registry().register(name, backend_class)


def get_backend(name: str) -> Backend:
    """
    Get a backend instance by name.

    Raises:
        BackendError: If backend not found
    """
    return get_registry().get(name)


def list_backends() -> list[str]:
    """List all available backend names."""
    return get_registry().list_backends()


__all__ = [
    "Backend",
    "BackendCapabilities",
    "BackendRegistry",
    "BackendError",
    "PersistEdit",
    "get_registry",
    "register_backend",
    "get_backend",
    "list_backends",
]
