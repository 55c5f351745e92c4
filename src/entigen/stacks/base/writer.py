"""
Shared output buffer for generated Python source.

The orchestrator owns one CodeWriter per artifact for the duration of a run
and hands it to every backend call, which appends lines at the current
indentation level.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

INDENT = "    "


class CodeWriter:
    """
    Line-oriented text buffer with indentation management.

    Example:
        writer = CodeWriter()
        with writer.block("def count(self) -> int:"):
            writer.line("return 0")
    """

    def __init__(self, indent: str = INDENT) -> None:
        self._indent = indent
        self._lines: list[str] = []
        self._level = 0

    @property
    def level(self) -> int:
        return self._level

    def line(self, text: str = "") -> None:
        """Append one line at the current indentation; empty text gives a blank line."""
        if text:
            self._lines.append(self._indent * self._level + text)
        else:
            self._lines.append("")

    def blank(self, count: int = 1) -> None:
        for _ in range(count):
            self._lines.append("")

    @contextmanager
    def indented(self) -> Iterator[None]:
        self._level += 1
        try:
            yield
        finally:
            self._level -= 1

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        """Write ``header`` and indent everything written inside the block."""
        self.line(header)
        with self.indented():
            yield

    def mark(self) -> tuple[int, int]:
        """Position to roll back to with ``truncate``."""
        return len(self._lines), self._level

    def truncate(self, mark: tuple[int, int]) -> None:
        """Drop everything written since ``mark``."""
        size, level = mark
        del self._lines[size:]
        self._level = level

    def getvalue(self) -> str:
        # Trailing blank lines collapse into a single final newline
        lines = list(self._lines)
        while lines and not lines[-1]:
            lines.pop()
        return "\n".join(lines) + "\n"

    def __len__(self) -> int:
        return len(self._lines)
