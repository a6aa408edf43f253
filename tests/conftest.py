"""Shared test helpers: an in-memory terminal with a virtual screen."""

from collections import deque

import pytest

from scriptpad.terminal import TerminalHandle, TerminalIoError


class FakeTerminal(TerminalHandle):
    """Terminal handle backed by a character grid and a queue of key tokens.

    Queue entries may be strings (returned as key tokens), None (a poll
    timeout) or callables (run for their side effect, then treated as a
    timeout). Reading past the end of the queue fails with
    TerminalIoError so a broken loop cannot spin forever.
    """

    def __init__(self, keys=(), width=40, height=12, location=(0, 0)):
        self._width = width
        self._height = height
        self.screen = [[' '] * width for _ in range(height)]
        self.row, self.col = location
        self.keys = deque(keys)
        self.cursor_visible = True
        self.entered = False
        self.exited = False
        self.ops = []
        self.timeouts = []
        self.fail_on = set()

    # --- TerminalHandle ---

    def read_key(self, timeout=None):
        self.timeouts.append(timeout)
        if 'read' in self.fail_on:
            raise TerminalIoError("read failed")
        if not self.keys:
            raise TerminalIoError("no more scripted keys")
        key = self.keys.popleft()
        if callable(key):
            key()
            return None
        return key

    def write(self, text):
        if 'write' in self.fail_on:
            raise TerminalIoError("write failed")
        self.ops.append(('write', text))
        for ch in text:
            if ch == '\n':
                self.col = 0
                if self.row == self._height - 1:
                    self.screen.pop(0)
                    self.screen.append([' '] * self._width)
                else:
                    self.row += 1
            elif self.col < self._width:
                self.screen[self.row][self.col] = ch
                self.col += 1

    def move(self, row, col):
        self.ops.append(('move', row, col))
        self.row, self.col = row, col

    def clear_eol(self):
        self.ops.append(('clear_eol', self.row))
        for c in range(self.col, self._width):
            self.screen[self.row][c] = ' '

    def hide_cursor(self):
        self.ops.append(('hide',))
        self.cursor_visible = False

    def show_cursor(self):
        self.ops.append(('show',))
        self.cursor_visible = True

    def get_location(self):
        return self.row, self.col

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        if 'size' in self.fail_on:
            raise TerminalIoError("size query failed")
        return self._height

    def __enter__(self):
        self.entered = True
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exited = True
        return None

    # --- Helpers for assertions ---

    def row_text(self, row):
        return ''.join(self.screen[row]).rstrip()

    def rows(self):
        return [self.row_text(r) for r in range(self._height)]

    def written_rows(self):
        """Rows touched by a clear_eol since the ops log was last reset."""
        return [op[1] for op in self.ops if op[0] == 'clear_eol']

    def reset_ops(self):
        self.ops.clear()


@pytest.fixture
def make_terminal():
    """Factory for FakeTerminal instances."""
    def _make(*keys, **kwargs):
        return FakeTerminal(keys=keys, **kwargs)
    return _make
