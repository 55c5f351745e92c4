"""
Error types for entigen scanning, parsing, linking and generation.

Compile-stage errors (lexical, syntax, semantic) abort the whole compilation.
Backend errors belong to a separate channel: they are raised while generating
code for one entity and the orchestrator records them instead of aborting.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class EntigenError(Exception):
    """Base exception for all entigen errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message

    @property
    def line(self) -> int | None:
        return self.context.line if self.context else None


class CompileError(EntigenError):
    """Base class for fatal errors raised while compiling DSL source."""

    pass


class LexicalError(CompileError):
    """
    Raised for malformed tokens.

    Scanning is total, so the scanner itself never raises this; it is kept
    for callers that validate token streams built by hand.
    """

    pass


class ParseError(CompileError):
    """
    Raised when DSL syntax cannot be parsed.

    Examples:
    - Unknown top-level keyword
    - Missing expected punctuation
    - Unexpected end of file
    """

    pass


class SemanticError(CompileError):
    """
    Raised when declarations parse but cannot be resolved.

    Examples:
    - Unknown type name or flag name
    - Duplicate enum member, field or declaration
    - Cyclic inheritance
    """

    pass


class BackendError(EntigenError):
    """
    Raised when a backend fails to generate output for an entity.

    Examples:
    - Field type the storage medium cannot represent
    - Operation the backend does not support
    """

    pass


class ConfigError(EntigenError):
    """Raised when a project manifest is missing or malformed."""

    pass


@dataclass
class ErrorContext:
    """
    Source location of an error.

    Attributes:
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
        file: Optional source file path
    """

    line: int
    column: int = 0
    file: Path | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            ``line N``, prefixed with the file name when one is known
        """
        if self.file:
            return f"{self.file}: line {self.line}"
        return f"line {self.line}"


def make_parse_error(message: str, line: int, column: int = 0) -> ParseError:
    """Create a ParseError located at ``line``/``column``."""
    return ParseError(message, ErrorContext(line=line, column=column))


def make_semantic_error(message: str, line: int, column: int = 0) -> SemanticError:
    """Create a SemanticError located at ``line``/``column``."""
    return SemanticError(message, ErrorContext(line=line, column=column))
