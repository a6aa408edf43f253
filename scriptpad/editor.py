"""Edit session: the keystroke loop behind the edit-before-running mode."""

from __future__ import annotations

import logging
import signal
import threading
from dataclasses import dataclass
from typing import Iterable, Optional

from .commands import Command, KeyBinding, KeyRouter, Outcome
from .constants import EditorConstants
from .highlight import Highlighter
from .keyboard import KeyboardHandler, KeyEvent
from .model import CursorPosition, TextDocument
from .renderer import Renderer
from .terminal import TerminalHandle, TerminalInterface, TerminalIoError
from .view import Viewport

logger = logging.getLogger(__name__)

__all__ = ['EditResult', 'EditSession', 'Outcome', 'run_edit_session']


@dataclass(frozen=True)
class EditResult:
    """What the caller gets back: how editing ended and the text, if any."""
    outcome: Outcome
    final_text: Optional[str] = None

    @property
    def persist(self) -> bool:
        """True when the caller must write ``final_text`` back before running it."""
        return self.outcome is Outcome.SAVE


class EditSession:
    """Owns one document, cursor, viewport and renderer for a single editing pass."""

    def __init__(
        self,
        terminal: TerminalHandle,
        initial_text: Optional[str] = None,
        can_persist: bool = False,
        *,
        height: Optional[int] = None,
        highlighter: Optional[Highlighter] = None,
        line_numbers: bool = False,
        show_help: bool = True,
        merge_lines: bool = False,
        tab_width: int = EditorConstants.TAB_WIDTH,
        poll_interval: float = EditorConstants.POLL_INTERVAL,
        overrides: Iterable[KeyBinding] = (),
        resume: bool = False,
        cancel_event: Optional[threading.Event] = None,
    ):
        self.terminal = terminal
        self.document = TextDocument(initial_text)
        self.cursor = CursorPosition.end_of(self.document) if resume else CursorPosition()
        self.router = KeyRouter(can_persist=can_persist, overrides=overrides, tab_width=tab_width)
        self.keyboard = KeyboardHandler(terminal)
        self.renderer = Renderer(
            terminal,
            highlighter=highlighter,
            line_numbers=line_numbers,
            status_text=self.router.help_text() if show_help else None,
        )
        if height is None:
            height = terminal.height - self.renderer.reserved_rows
        self.viewport = Viewport(height)
        self.viewport.scroll_to_include(self.cursor.line)
        self.merge_lines = merge_lines
        self.poll_interval = poll_interval
        self.cancel_event = cancel_event or threading.Event()
        self.outcome: Optional[Outcome] = None

    @property
    def can_persist(self) -> bool:
        return self.router.can_persist

    # --- Document edits; each leaves the cursor valid ---

    def insert_text(self, text: str) -> None:
        for ch in text:
            self.document.insert_char(self.cursor.line, self.cursor.column, ch)
            self.cursor = CursorPosition(self.cursor.line, self.cursor.column + 1)

    def insert_newline(self) -> None:
        self.document.split_line(self.cursor.line, self.cursor.column)
        self.cursor = CursorPosition(self.cursor.line + 1, 0)

    def backspace(self) -> None:
        """Delete left of the cursor; at column 0 only joins lines when ``merge_lines`` is on."""
        line, col = self.cursor.line, self.cursor.column
        if col > 0:
            self.document.delete_char_before(line, col)
            self.cursor = CursorPosition(line, col - 1)
        elif self.merge_lines and line > 0:
            previous_length = self.document.line_length(line - 1)
            self.document.join_lines(line - 1)
            self.cursor = CursorPosition(line - 1, previous_length)

    def delete_char(self) -> None:
        line, col = self.cursor.line, self.cursor.column
        if col < self.document.line_length(line):
            self.document.delete_char_at(line, col)
        elif self.merge_lines and line < self.document.line_count() - 1:
            self.document.join_lines(line)

    def terminate(self, outcome: Outcome) -> None:
        if outcome is Outcome.SAVE and not self.can_persist:
            # Save has no target; stay in the editor
            logger.debug("Ignoring save request for a session without a file")
            return
        self.outcome = outcome

    # --- Loop ---

    def apply(self, command: Command) -> None:
        """Apply one command; never interrupted halfway by cancellation."""
        command.apply(self)

    def handle_key_event(self, event: KeyEvent) -> Command:
        command = self.router.route(event)
        self.apply(command)
        return command

    def result(self) -> EditResult:
        if self.outcome is None or self.outcome is Outcome.QUIT:
            return EditResult(Outcome.QUIT, None)
        return EditResult(self.outcome, self.document.to_text())

    def run(self) -> EditResult:
        """Read and apply keys until a submit command or cancellation."""
        logger.debug(
            f"Edit session started: {self.document.line_count()} lines, "
            f"height {self.viewport.height}, can_persist={self.can_persist}"
        )
        self.renderer.begin(self.viewport.height)
        try:
            self.renderer.paint(self.document, self.cursor, self.viewport)
            while self.outcome is None:
                # Cancellation is only observed between commands
                if self.cancel_event.is_set():
                    logger.debug("Edit session cancelled")
                    self.outcome = Outcome.QUIT
                    break
                try:
                    event = self.keyboard.get_key_event(timeout=self.poll_interval)
                except KeyboardInterrupt:
                    self.cancel_event.set()
                    continue
                if event is None:
                    continue
                self.handle_key_event(event)
                if self.outcome is None:
                    self.renderer.paint(self.document, self.cursor, self.viewport)
        except BaseException:
            self._finish_quietly()
            raise
        self.renderer.finish()
        logger.debug(f"Edit session ended with {self.outcome.value}")
        return self.result()

    def _finish_quietly(self) -> None:
        try:
            self.renderer.finish()
        except TerminalIoError as e:
            logger.debug(f"Could not clear editor rows: {e}")


def run_edit_session(
    initial_text: Optional[str] = None,
    can_persist: bool = False,
    terminal: Optional[TerminalHandle] = None,
    **options,
) -> EditResult:
    """Run one editing pass on ``terminal`` and return its result.

    Raises:
        TerminalIoError: the terminal failed to read, write or report its size.
    """
    if terminal is None:
        terminal = TerminalInterface()
    cancel_event = options.pop('cancel_event', None) or threading.Event()

    def _handle_sigint(signum, frame):
        """Handle SIGINT (Ctrl-C) - abandon editing."""
        del signum, frame  # Unused
        cancel_event.set()

    original_int_handler = None
    if threading.current_thread() is threading.main_thread():
        original_int_handler = signal.signal(signal.SIGINT, _handle_sigint)
    try:
        with terminal:
            session = EditSession(
                terminal,
                initial_text,
                can_persist,
                cancel_event=cancel_event,
                **options,
            )
            return session.run()
    finally:
        if original_int_handler is not None:
            signal.signal(signal.SIGINT, original_int_handler)
