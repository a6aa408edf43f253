"""Scriptpad - run short Python scripts, optionally typed in a terminal editor."""

from .model import TextDocument, CursorPosition, OutOfRange
from .view import Viewport
from .editor import EditSession, EditResult, Outcome, run_edit_session
from .terminal import TerminalHandle, TerminalInterface, TerminalIoError

__all__ = [
    'TextDocument',
    'CursorPosition',
    'OutOfRange',
    'Viewport',
    'EditSession',
    'EditResult',
    'Outcome',
    'run_edit_session',
    'TerminalHandle',
    'TerminalInterface',
    'TerminalIoError',
]
