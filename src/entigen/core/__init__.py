"""Core entigen functionality: scanner, parser, IR, linker, compiler, manifest."""

from . import ir
from .compiler import compile_file, compile_source, compile_tokens
from .errors import (
    BackendError,
    CompileError,
    ConfigError,
    EntigenError,
    ErrorContext,
    LexicalError,
    ParseError,
    SemanticError,
)
from .lexer import Token, TokenKind, tokenize
from .linker import build_model
from .manifest import ProjectManifest, load_manifest

__all__ = [
    "ir",
    "compile_file",
    "compile_source",
    "compile_tokens",
    "build_model",
    "tokenize",
    "Token",
    "TokenKind",
    "EntigenError",
    "CompileError",
    "LexicalError",
    "ParseError",
    "SemanticError",
    "BackendError",
    "ConfigError",
    "ErrorContext",
    "ProjectManifest",
    "load_manifest",
]
