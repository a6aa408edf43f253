"""Mapping of document lines onto the terminal rows the editor owns."""

from __future__ import annotations


def scroll_to_include(cursor_line: int, current_start: int, height: int) -> int:
    """Return the smallest scroll from ``current_start`` that shows ``cursor_line``."""
    if cursor_line < current_start:
        return cursor_line
    if cursor_line >= current_start + height:
        return cursor_line - height + 1
    return current_start


class Viewport:
    """A window of ``height`` document lines starting at ``start_line``.

    ``start_line + height`` may run past the end of the document; the
    extra rows are painted blank.
    """

    def __init__(self, height: int, start_line: int = 0):
        self.height = max(height, 1)
        self.start_line = max(start_line, 0)

    @property
    def end_line(self) -> int:
        """One past the last visible document line."""
        return self.start_line + self.height

    def contains(self, line: int) -> bool:
        return self.start_line <= line < self.end_line

    def scroll_to_include(self, cursor_line: int) -> None:
        # Only moves when the cursor left the window
        self.start_line = max(scroll_to_include(cursor_line, self.start_line, self.height), 0)

    def page_up(self) -> None:
        self.start_line = max(self.start_line - self.height, 0)

    def page_down(self, line_count: int) -> None:
        # Never scroll so far that the last page shows fewer lines than fit
        target = min(self.start_line + self.height, line_count - self.height)
        self.start_line = max(target, self.start_line, 0)

    def visible_lines(self) -> range:
        return range(self.start_line, self.end_line)

    def __repr__(self):
        return f"Viewport(height={self.height}, start_line={self.start_line})"
