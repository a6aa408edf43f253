"""Editor commands and the key router that produces them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterable, Mapping, Optional, Tuple

from .constants import EditorConstants
from .keyboard import KeyEvent, KeyType

if TYPE_CHECKING:
    from .editor import EditSession


class Outcome(Enum):
    """How an editing session ended."""
    RUN = "run"
    SAVE = "save"
    QUIT = "quit"


class Command(ABC):
    """Base class for routed editor commands."""

    @abstractmethod
    def apply(self, session: 'EditSession') -> None:
        """Apply the command to the session's document, cursor and viewport."""


@dataclass(frozen=True)
class NoOp(Command):
    def apply(self, session):
        pass


class MovementCommand(Command):
    """Base class for cursor movement commands."""

    def apply(self, session):
        session.cursor = self._move(session)
        session.viewport.scroll_to_include(session.cursor.line)

    @abstractmethod
    def _move(self, session):
        """Return the new cursor position."""


@dataclass(frozen=True)
class MoveLeft(MovementCommand):
    def _move(self, session):
        return session.cursor.move_left(session.document)


@dataclass(frozen=True)
class MoveRight(MovementCommand):
    def _move(self, session):
        return session.cursor.move_right(session.document)


@dataclass(frozen=True)
class MoveUp(MovementCommand):
    def _move(self, session):
        return session.cursor.move_up(session.document)


@dataclass(frozen=True)
class MoveDown(MovementCommand):
    def _move(self, session):
        return session.cursor.move_down(session.document)


@dataclass(frozen=True)
class Home(MovementCommand):
    def _move(self, session):
        return session.cursor.move_home(session.document)


@dataclass(frozen=True)
class End(MovementCommand):
    def _move(self, session):
        return session.cursor.move_end(session.document)


@dataclass(frozen=True)
class PageUp(MovementCommand):
    def apply(self, session):
        # Scroll first so the cursor lands on the same screen row when possible
        session.viewport.page_up()
        super().apply(session)

    def _move(self, session):
        return session.cursor.move_page_up(session.document, session.viewport.height)


@dataclass(frozen=True)
class PageDown(MovementCommand):
    def apply(self, session):
        session.viewport.page_down(session.document.line_count())
        super().apply(session)

    def _move(self, session):
        return session.cursor.move_page_down(session.document, session.viewport.height)


class EditCommand(Command):
    """Base class for commands that change the document."""

    def apply(self, session):
        self._edit(session)
        session.viewport.scroll_to_include(session.cursor.line)

    @abstractmethod
    def _edit(self, session):
        """Perform the edit."""


@dataclass(frozen=True)
class Backspace(EditCommand):
    def _edit(self, session):
        session.backspace()


@dataclass(frozen=True)
class Delete(EditCommand):
    def _edit(self, session):
        session.delete_char()


@dataclass(frozen=True)
class NewLine(EditCommand):
    def _edit(self, session):
        session.insert_newline()


@dataclass(frozen=True)
class InsertChar(EditCommand):
    char: str

    def _edit(self, session):
        session.insert_text(self.char)


@dataclass(frozen=True)
class InsertText(EditCommand):
    """Insert several characters at once; only produced by explicit bindings."""
    text: str

    def _edit(self, session):
        session.insert_text(self.text)


class SubmitCommand(Command):
    """Base class for commands that end the session."""
    outcome: Outcome

    def apply(self, session):
        session.terminate(self.outcome)


@dataclass(frozen=True)
class SubmitRun(SubmitCommand):
    outcome = Outcome.RUN


@dataclass(frozen=True)
class SubmitSave(SubmitCommand):
    outcome = Outcome.SAVE


@dataclass(frozen=True)
class SubmitQuit(SubmitCommand):
    outcome = Outcome.QUIT


CTRL = frozenset({'ctrl'})
CTRL_ALT = frozenset({'ctrl', 'alt'})
NONE = frozenset()


@dataclass(frozen=True)
class KeyBinding:
    """One entry of a routing table."""
    key: str
    modifiers: frozenset
    command: Command


DEFAULT_BINDINGS: Tuple[KeyBinding, ...] = (
    KeyBinding('left', NONE, MoveLeft()),
    KeyBinding('right', NONE, MoveRight()),
    KeyBinding('up', NONE, MoveUp()),
    KeyBinding('down', NONE, MoveDown()),
    KeyBinding('home', NONE, Home()),
    KeyBinding('end', NONE, End()),
    KeyBinding('page_up', NONE, PageUp()),
    KeyBinding('page_down', NONE, PageDown()),
    KeyBinding('backspace', NONE, Backspace()),
    KeyBinding('delete', NONE, Delete()),
    KeyBinding('enter', NONE, NewLine()),
    # Emacs-style line movement and delete
    KeyBinding('a', CTRL, Home()),
    KeyBinding('e', CTRL, End()),
    KeyBinding('d', CTRL, Delete()),
    KeyBinding('r', CTRL, SubmitRun()),
    KeyBinding('q', CTRL, SubmitQuit()),
)

# Only bound when the session edits a file that can be written back
SAVE_BINDING = KeyBinding('s', CTRL_ALT, SubmitSave())


class KeyRouter:
    """Immutable mapping from (key, modifiers) to Command.

    The table is built once from the default bindings, the save binding
    when ``can_persist`` is set, and ``overrides``; later entries replace
    earlier ones for the same key.
    """

    def __init__(
        self,
        can_persist: bool = False,
        overrides: Iterable[KeyBinding] = (),
        tab_width: int = EditorConstants.TAB_WIDTH,
    ):
        self.can_persist = can_persist
        bindings = list(DEFAULT_BINDINGS)
        if tab_width > 0:
            bindings.append(KeyBinding('tab', NONE, InsertText(' ' * tab_width)))
        if can_persist:
            bindings.append(SAVE_BINDING)
        bindings.extend(overrides)
        table = {}
        for binding in bindings:
            table[(binding.key, frozenset(binding.modifiers))] = binding.command
        self._table: Mapping[Tuple[str, frozenset], Command] = MappingProxyType(table)

    @property
    def table(self) -> Mapping[Tuple[str, frozenset], Command]:
        return self._table

    def lookup(self, key: str, modifiers: Iterable[str] = ()) -> Optional[Command]:
        return self._table.get((key, frozenset(modifiers)))

    def route(self, event: KeyEvent) -> Command:
        """Return the command for ``event``; unknown keys give NoOp."""
        command = self._table.get((event.value, event.modifiers))
        if command is not None:
            return command
        # Handle regular text input; control characters are never inserted
        if event.key_type == KeyType.REGULAR and len(event.value) == 1 and event.value.isprintable():
            return InsertChar(event.value)
        return NoOp()

    def help_text(self) -> str:
        parts = [EditorConstants.RUN_HELP]
        if self.can_persist:
            parts.append(EditorConstants.SAVE_HELP)
        parts.append(EditorConstants.QUIT_HELP)
        return ', '.join(parts)
