"""
Base infrastructure for entigen backends.

Provides:
- CodeWriter, the shared output buffer
- Base generator classes and GenerationResult
- Naming and type helpers

The Orchestrator lives in ``entigen.stacks.base.backend``.
"""

from .generator import (
    GenerationResult,
    Generator,
    ModelsGenerator,
    PackageGenerator,
    SerializationGenerator,
)
from .utils import GenerationScope, select_scope
from .writer import CodeWriter

__all__ = [
    "CodeWriter",
    "GenerationResult",
    "GenerationScope",
    "Generator",
    "ModelsGenerator",
    "PackageGenerator",
    "SerializationGenerator",
    "select_scope",
]
