"""Shared pytest fixtures for entigen tests."""

import importlib
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

from entigen.core import ir
from entigen.core.compiler import compile_source
from entigen.stacks.base.generator import GenerationResult

STAMPS_DSL = """\
// Stamp collection
enum Rarity { Common, Uncommon, Rare = 10, Legendary }

entity User {
    name: String [Editable, Searchable];
    age: UInt16 [Editable];
    password: String [Hidden];
    active: Bool [Editable];
}

/* Items are abstract: Stamp and Coin
   derive from them */
entity Item {
    title: String [Editable Searchable];
    user: User;
}

entity Stamp : Item {
    rarity: Rarity [Editable, Searchable];
    price: Decimal [Editable];
    views: UInt32 [Dynamic];
}

entity Coin : Item {
    weight: UInt32 [Editable];
    image: Bytes [Editable];
}

entity Profile {
    user: User [Unique];
    bio: String [Editable, Hidden];
}
"""


@pytest.fixture
def stamps_source() -> str:
    """DSL source of the stamp collection model."""
    return STAMPS_DSL


@pytest.fixture
def stamps_model() -> ir.Model:
    """Compiled stamp collection model."""
    return compile_source(STAMPS_DSL, "Stamps")


@pytest.fixture
def load_generated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """
    Write a GenerationResult as an importable package and import it.

    Returns a namespace with the package's ``models``, ``serialization``
    and ``database`` modules.
    """
    loaded: list[str] = []
    monkeypatch.syspath_prepend(str(tmp_path))

    def load(result: GenerationResult) -> SimpleNamespace:
        package = f"{tmp_path.name}_pkg{len(loaded)}"
        result.write(tmp_path / package)
        importlib.invalidate_caches()
        loaded.append(package)
        return SimpleNamespace(
            models=importlib.import_module(f"{package}.models"),
            serialization=importlib.import_module(f"{package}.serialization"),
            database=importlib.import_module(f"{package}.database"),
        )

    yield load

    for name in list(sys.modules):
        if name.split(".")[0] in loaded:
            del sys.modules[name]
