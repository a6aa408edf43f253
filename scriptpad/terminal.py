"""Terminal interface using Blessed for display and Curtsies for input."""

from __future__ import annotations

import logging
import select
import sys
import termios
from abc import ABC, abstractmethod
from collections import deque
from typing import Optional

import blessed
from curtsies import Input
from curtsies.events import PasteEvent

from .constants import EditorConstants

logger = logging.getLogger(__name__)


class TerminalIoError(OSError):
    """The underlying terminal failed to read, write or report its state."""


class TerminalHandle(ABC):
    """Capabilities the editor needs from a raw terminal.

    All coordinates are zero-based ``(row, col)``.
    """

    @abstractmethod
    def read_key(self, timeout: Optional[float] = None) -> Optional[str]:
        """Return the next key token, or None if none arrived within ``timeout``."""

    @abstractmethod
    def write(self, text: str) -> None:
        """Write raw text at the current position."""

    @abstractmethod
    def move(self, row: int, col: int) -> None:
        """Move the cursor to an absolute position."""

    @abstractmethod
    def clear_eol(self) -> None:
        """Erase from the cursor to the end of the row."""

    @abstractmethod
    def hide_cursor(self) -> None: ...

    @abstractmethod
    def show_cursor(self) -> None: ...

    @abstractmethod
    def get_location(self) -> tuple[int, int]:
        """Return the current cursor position."""

    def styled(self, text: str, style: Optional[str]) -> str:
        """Wrap ``text`` in the escape codes for ``style``; plain by default."""
        return text

    def flush(self) -> None:
        pass

    @property
    @abstractmethod
    def width(self) -> int: ...

    @property
    @abstractmethod
    def height(self) -> int: ...

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return None


class TerminalInterface(TerminalHandle):
    """Handles terminal I/O using Blessed, with keys read through Curtsies."""

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        """Initialize with a terminal instance (or create one)."""
        self.term = terminal or blessed.Terminal()
        self._curtsies_input: Optional[object] = None
        # Keys of a paste not yet handed out
        self._pending_keys: deque[str] = deque()

    def setup(self) -> None:
        """Put the terminal in raw key mode for the length of a session."""
        try:
            # Ctrl-Q and Ctrl-S must arrive as keys, not XON/XOFF
            self._curtsies_input = Input(keynames='curtsies', disable_terminal_start_stop=True)
            self._curtsies_input.__enter__()
        except (OSError, termios.error) as e:
            self._curtsies_input = None
            raise TerminalIoError(f"cannot read keys from this terminal: {e}") from e

    def cleanup(self) -> None:
        """Leave raw mode and make sure the cursor is visible again."""
        self._pending_keys.clear()
        if self._curtsies_input is not None:
            try:
                self._curtsies_input.__exit__(None, None, None)  # type: ignore
            except (OSError, termios.error) as e:
                # Terminal may already be gone; nothing left to restore
                logger.warning(f"Could not restore terminal mode: {e}")
            finally:
                self._curtsies_input = None
        try:
            print(self.term.normal_cursor, end='', flush=True)
        except OSError as e:
            logger.warning(f"Could not restore cursor: {e}")

    def __enter__(self):
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.cleanup()
        return None

    def _print(self, text: str, flush: bool = False) -> None:
        try:
            print(text, end='', flush=flush)
        except OSError as e:
            raise TerminalIoError(f"terminal write failed: {e}") from e

    def read_key(self, timeout=None):
        """Get a single keypress from the user.

        Args:
            timeout: Timeout in seconds (None for blocking, 0 for non-blocking)

        Returns:
            The curtsies token as a string, or None on timeout. A paste
            is handed out one key token per call.
        """
        if self._curtsies_input is None:
            raise TerminalIoError("terminal input is not set up")
        if self._pending_keys:
            return self._pending_keys.popleft()
        try:
            # Use select on stdin to implement timeouts
            if timeout is not None:
                r, _, _ = select.select([sys.stdin], [], [], max(float(timeout), 0.0))
                if not r:
                    return None
            evt = next(self._curtsies_input)  # type: ignore
        except (OSError, ValueError, StopIteration) as e:
            raise TerminalIoError(f"terminal read failed: {e}") from e
        if evt is None:
            return None
        if isinstance(evt, PasteEvent):
            self._pending_keys.extend(str(key) for key in evt.events)
            logger.debug(f"Paste of {len(self._pending_keys)} keys")
            return self._pending_keys.popleft() if self._pending_keys else None
        return str(evt)

    def write(self, text: str) -> None:
        self._print(text)

    def move(self, row: int, col: int) -> None:
        self._print(self.term.move(row, col))

    def clear_eol(self) -> None:
        self._print(self.term.clear_eol)

    def hide_cursor(self) -> None:
        self._print(self.term.hide_cursor)

    def show_cursor(self) -> None:
        self._print(self.term.normal_cursor, flush=True)

    def flush(self) -> None:
        try:
            sys.stdout.flush()
        except OSError as e:
            raise TerminalIoError(f"terminal write failed: {e}") from e

    def styled(self, text: str, style: Optional[str]) -> str:
        if not style:
            return text
        # Blessed resolves compound names such as 'bold_blue'
        return getattr(self.term, style)(text)

    def get_location(self) -> tuple[int, int]:
        """Ask the terminal where the cursor is; (0, 0) if it does not answer."""
        try:
            row, col = self.term.get_location(timeout=EditorConstants.LOCATION_TIMEOUT)
        except OSError as e:
            raise TerminalIoError(f"cursor position query failed: {e}") from e
        if row < 0 or col < 0:
            logger.debug("Terminal did not report a cursor position; assuming top left")
            return 0, 0
        return row, col

    @property
    def width(self) -> int:
        """Terminal width in columns."""
        try:
            return self.term.width
        except OSError as e:
            raise TerminalIoError(f"terminal size query failed: {e}") from e

    @property
    def height(self) -> int:
        """Terminal height in rows."""
        try:
            return self.term.height
        except OSError as e:
            raise TerminalIoError(f"terminal size query failed: {e}") from e
