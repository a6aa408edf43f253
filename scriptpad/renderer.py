"""Paints the editor's rows below a fixed anchor on the terminal."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .constants import EditorConstants
from .highlight import (
    Highlighter,
    display_column,
    display_segments,
    line_segments,
    truncate_segments,
)
from .model import CursorPosition, TextDocument
from .terminal import TerminalHandle, TerminalIoError
from .view import Viewport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Anchor:
    """Terminal position of the first visible row."""
    row: int
    col: int


class Renderer:
    """Repaints the visible document slice, touching only rows that changed.

    The renderer owns ``viewport.height`` rows plus an optional status row
    starting at the anchor. Everything it painted is erased again by
    ``finish``.
    """

    def __init__(
        self,
        terminal: TerminalHandle,
        highlighter: Optional[Highlighter] = None,
        line_numbers: bool = False,
        status_text: Optional[str] = None,
    ):
        self.terminal = terminal
        self.highlighter = highlighter
        self.line_numbers = line_numbers
        self.status_text = status_text
        self.anchor: Optional[Anchor] = None
        # Virtual screen state for minimal updates
        self._last_rows: dict[int, tuple] = {}
        self._last_gutter_width: Optional[int] = None

    @property
    def reserved_rows(self) -> int:
        return EditorConstants.RESERVED_ROWS if self.status_text else 0

    def begin(self, height: int) -> Anchor:
        """Capture the anchor, scrolling the terminal up if the rows would not fit."""
        row, col = self.terminal.get_location()
        needed = height + self.reserved_rows
        overflow = row + needed - self.terminal.height
        if overflow > 0:
            self.terminal.move(self.terminal.height - 1, 0)
            self.terminal.write('\n' * overflow)
            row = max(row - overflow, 0)
        self.anchor = Anchor(row, col)
        self._last_rows.clear()
        self._last_gutter_width = None
        logger.debug(f"Editor anchored at row {row}, column {col}")
        return self.anchor

    def gutter_width(self, document: TextDocument) -> int:
        if not self.line_numbers:
            return 0
        return len(str(document.line_count())) + EditorConstants.GUTTER_PADDING

    def text_origin(self, document: TextDocument) -> int:
        """Terminal column where column 0 of every line is painted."""
        if self.anchor is None:
            raise RuntimeError("renderer has no anchor; call begin() first")
        return self.anchor.col + self.gutter_width(document)

    def paint(self, document: TextDocument, cursor: CursorPosition, viewport: Viewport) -> None:
        """Repaint changed rows and place the terminal cursor on the insertion point."""
        if self.anchor is None:
            self.begin(viewport.height)
        self.terminal.hide_cursor()
        try:
            self._paint(document, cursor, viewport)
        except BaseException:
            self._restore_cursor_quietly()
            raise
        self.terminal.show_cursor()
        self.terminal.flush()

    def _paint(self, document, cursor, viewport):
        anchor = self.anchor
        gutter = self.gutter_width(document)
        if gutter != self._last_gutter_width:
            # Geometry changed, every row must be rewritten
            self._last_rows.clear()
            self._last_gutter_width = gutter
        screen_width = self.terminal.width
        screen_height = self.terminal.height
        text_width = max(screen_width - anchor.col - gutter, 0)

        count = document.line_count()
        texts = [document.line_text(i) for i in range(count)]
        segments = line_segments(texts, self.highlighter, viewport.start_line, viewport.end_line)
        tab_stop = EditorConstants.TAB_STOP

        for offset, line_index in enumerate(viewport.visible_lines()):
            row = anchor.row + offset
            if row >= screen_height:
                break
            if line_index < count:
                prefix = f"{line_index + 1:>{gutter - EditorConstants.GUTTER_PADDING}}" if gutter else ''
                prefix = prefix.ljust(gutter)
                shown = display_segments(segments[offset], tab_stop)
                row_segments = tuple(truncate_segments(shown, text_width))
            else:
                prefix = ' ' * gutter
                row_segments = ()
            self._paint_row(row, prefix, row_segments)

        if self.status_text:
            status_row = anchor.row + viewport.height
            if status_row < screen_height:
                status = self.status_text[:max(screen_width - anchor.col, 0)]
                self._paint_row(status_row, '', ((status, EditorConstants.STATUS_STYLE),))

        # Finally position cursor
        cursor_row = anchor.row + (cursor.line - viewport.start_line)
        cursor_col = self.text_origin(document) + display_column(texts[cursor.line], cursor.column, tab_stop)
        cursor_col = min(cursor_col, max(screen_width - 1, 0))
        self.terminal.move(cursor_row, cursor_col)

    def _paint_row(self, row: int, prefix: str, segments: tuple) -> None:
        key = (prefix, segments)
        if self._last_rows.get(row) == key:
            return
        term = self.terminal
        term.move(row, self.anchor.col)
        term.clear_eol()
        if prefix.strip():
            term.write(term.styled(prefix, EditorConstants.GUTTER_STYLE))
        elif prefix:
            term.write(prefix)
        for text, style in segments:
            term.write(term.styled(text, style))
        self._last_rows[row] = key

    def finish(self) -> None:
        """Erase every painted row, bottom first, and leave the cursor at the anchor."""
        if self.anchor is None:
            return
        try:
            for row in sorted(self._last_rows, reverse=True):
                self.terminal.move(row, self.anchor.col)
                self.terminal.clear_eol()
            self.terminal.move(self.anchor.row, self.anchor.col)
        finally:
            self._last_rows.clear()
            self._last_gutter_width = None
        self.terminal.show_cursor()
        self.terminal.flush()

    def _restore_cursor_quietly(self) -> None:
        try:
            self.terminal.show_cursor()
        except TerminalIoError as e:
            logger.debug(f"Could not show cursor after failed repaint: {e}")
