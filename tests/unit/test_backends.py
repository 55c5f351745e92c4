"""Tests for the backend plugin system and the shared code writer."""

import pytest

from entigen import stacks
from entigen.stacks import (
    Backend,
    BackendCapabilities,
    BackendError,
    BackendRegistry,
    get_backend,
    list_backends,
    register_backend,
)
from entigen.stacks.base.writer import CodeWriter
from entigen.stacks.memory import MemoryBackend
from entigen.stacks.sqlite import SQLiteBackend


class MockBackend(MemoryBackend):
    """Mock backend for testing."""

    name = "mock"

    def get_capabilities(self) -> BackendCapabilities:
        return BackendCapabilities(name="mock", description="Mock backend for testing")


class TestRegistry:
    def test_register_and_get(self):
        registry = BackendRegistry()
        registry.register("mock", MockBackend)

        assert registry.list_backends() == ["mock"]
        backend = registry.get("mock")
        assert isinstance(backend, MockBackend)
        assert backend.get_capabilities().description == "Mock backend for testing"

    def test_get_returns_fresh_instances(self):
        registry = BackendRegistry()
        registry.register("mock", MockBackend)
        assert registry.get("mock") is not registry.get("mock")

    def test_duplicate_registration(self):
        registry = BackendRegistry()
        registry.register("mock", MockBackend)
        with pytest.raises(BackendError, match="already registered"):
            registry.register("mock", MockBackend)

    def test_not_found(self):
        registry = BackendRegistry()
        with pytest.raises(BackendError, match="not found"):
            registry.get("missing")

    def test_rejects_non_backend(self):
        registry = BackendRegistry()
        with pytest.raises(BackendError, match="must extend Backend"):
            registry.register("bad", dict)

    def test_abstract_contract(self):
        with pytest.raises(TypeError):
            Backend()

    def test_discover(self):
        registry = BackendRegistry()
        registry.discover()
        assert registry.list_backends() == ["memory", "sqlite"]

    def test_global_registry(self):
        assert {"memory", "sqlite"} <= set(list_backends())
        assert isinstance(get_backend("memory"), MemoryBackend)
        assert isinstance(get_backend("sqlite"), SQLiteBackend)

    def test_register_backend_globally(self, monkeypatch):
        monkeypatch.setattr(stacks, "_registry", None)
        register_backend("mock", MockBackend)

        assert list_backends() == ["memory", "sqlite", "mock"]
        assert isinstance(get_backend("mock"), MockBackend)


class TestCapabilities:
    def test_memory(self):
        caps = MemoryBackend().get_capabilities()
        assert caps.name == "memory"
        assert caps.output_formats == ["python"]
        assert not caps.persistent

    def test_sqlite(self):
        caps = SQLiteBackend().get_capabilities()
        assert caps.name == "sqlite"
        assert caps.persistent


class TestCodeWriter:
    def test_indentation(self):
        writer = CodeWriter()
        with writer.block("def f():"):
            with writer.block("if x:"):
                writer.line("return 1")
            writer.line("return 0")
        assert writer.getvalue() == "def f():\n    if x:\n        return 1\n    return 0\n"

    def test_blank_lines_have_no_indent(self):
        writer = CodeWriter()
        with writer.indented():
            writer.line("a")
            writer.line()
            writer.line("b")
        assert writer.getvalue() == "    a\n\n    b\n"

    def test_truncate_to_mark(self):
        writer = CodeWriter()
        writer.line("keep")
        mark = writer.mark()
        with pytest.raises(RuntimeError):
            with writer.block("def broken():"):
                writer.line("x = 1")
                raise RuntimeError("boom")
        writer.truncate(mark)
        assert writer.level == 0
        assert writer.getvalue() == "keep\n"

    def test_trailing_blank_lines_collapse(self):
        writer = CodeWriter()
        writer.line("x = 1")
        writer.blank(2)
        assert writer.getvalue() == "x = 1\n"
