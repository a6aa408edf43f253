"""In-memory script buffer and cursor positions."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass

# Only real line terminators; form feeds and Unicode separators stay in the line
_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class OutOfRange(IndexError):
    """A line or column index does not address the document."""


class TextDocument:
    """Ordered lines of characters; always holds at least one line.

    Lines never contain a newline; line breaks only exist between
    elements of ``lines``. Positions are not clamped here, callers
    must pass valid ones.
    """

    def __init__(self, text: str | None = None):
        self.lines: list[list[str]] = [[]]
        if text:
            self.lines = [list(line) for line in _LINE_BREAK.split(text)]

    def _check_line(self, line: int) -> None:
        if not 0 <= line < len(self.lines):
            raise OutOfRange(f"line {line} outside 0..{len(self.lines) - 1}")

    def _check_position(self, line: int, col: int) -> None:
        self._check_line(line)
        if not 0 <= col <= len(self.lines[line]):
            raise OutOfRange(f"column {col} outside 0..{len(self.lines[line])} on line {line}")

    def line_count(self) -> int:
        return len(self.lines)

    def line(self, i: int) -> list[str]:
        """Return a copy of the characters of line ``i``."""
        self._check_line(i)
        return list(self.lines[i])

    def line_text(self, i: int) -> str:
        self._check_line(i)
        return ''.join(self.lines[i])

    def line_length(self, i: int) -> int:
        self._check_line(i)
        return len(self.lines[i])

    def insert_char(self, line: int, col: int, c: str) -> None:
        if len(c) != 1 or c in '\r\n':
            raise ValueError(f"cannot insert {c!r} as a single character")
        self._check_position(line, col)
        self.lines[line].insert(col, c)

    def delete_char_before(self, line: int, col: int) -> None:
        """Remove the character left of ``col``; a no-op at column 0."""
        self._check_position(line, col)
        if col > 0:
            del self.lines[line][col - 1]

    def delete_char_at(self, line: int, col: int) -> None:
        """Remove the character under ``col``; a no-op at end of line."""
        self._check_position(line, col)
        if col < len(self.lines[line]):
            del self.lines[line][col]

    def split_line(self, line: int, col: int) -> None:
        """Move everything after ``col`` onto a new line below."""
        self._check_position(line, col)
        tail = self.lines[line][col:]
        del self.lines[line][col:]
        self.lines.insert(line + 1, tail)

    def join_lines(self, line: int) -> None:
        """Append line ``line + 1`` to ``line`` and remove it."""
        self._check_line(line)
        self._check_line(line + 1)
        self.lines[line].extend(self.lines.pop(line + 1))

    def to_text(self, newline: str = os.linesep) -> str:
        return newline.join(''.join(line) for line in self.lines)

    def __repr__(self):
        return f"TextDocument({[''.join(line) for line in self.lines]!r})"


@dataclass(frozen=True)
class CursorPosition:
    """Insertion point; every move returns a new position clamped to ``document``."""
    line: int = 0
    column: int = 0

    def __lt__(self, other):
        if self.line != other.line:
            return self.line < other.line
        return self.column < other.column

    def clamped(self, document: TextDocument) -> CursorPosition:
        line = min(max(self.line, 0), document.line_count() - 1)
        column = min(max(self.column, 0), document.line_length(line))
        return CursorPosition(line, column)

    def is_valid(self, document: TextDocument) -> bool:
        return self.clamped(document) == self

    # Horizontal moves stay on the current line.
    def move_left(self, document: TextDocument) -> CursorPosition:
        return CursorPosition(self.line, self.column - 1).clamped(document)

    def move_right(self, document: TextDocument) -> CursorPosition:
        return CursorPosition(self.line, self.column + 1).clamped(document)

    # Vertical moves keep the column and reclamp it against the target line.
    def move_up(self, document: TextDocument) -> CursorPosition:
        return CursorPosition(self.line - 1, self.column).clamped(document)

    def move_down(self, document: TextDocument) -> CursorPosition:
        return CursorPosition(self.line + 1, self.column).clamped(document)

    def move_home(self, document: TextDocument) -> CursorPosition:
        return CursorPosition(self.line, 0).clamped(document)

    def move_end(self, document: TextDocument) -> CursorPosition:
        line = self.clamped(document).line
        return CursorPosition(line, document.line_length(line))

    def move_page_up(self, document: TextDocument, page_size: int) -> CursorPosition:
        return CursorPosition(self.line - max(page_size, 1), self.column).clamped(document)

    def move_page_down(self, document: TextDocument, page_size: int) -> CursorPosition:
        return CursorPosition(self.line + max(page_size, 1), self.column).clamped(document)

    @classmethod
    def end_of(cls, document: TextDocument) -> CursorPosition:
        last = document.line_count() - 1
        return cls(last, document.line_length(last))
