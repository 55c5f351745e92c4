"""
entigen - schema compiler with pluggable CRUD code generation.

Compiles a small entity/enum DSL into a resolved semantic model and drives a
backend that emits a persistence layer for it.
"""

from __future__ import annotations

from ._version import get_version
from .core import ir
from .core.compiler import compile_file, compile_source
from .core.errors import (
    BackendError,
    CompileError,
    EntigenError,
    ParseError,
    SemanticError,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "compile_file",
    "compile_source",
    "EntigenError",
    "CompileError",
    "ParseError",
    "SemanticError",
    "BackendError",
]
