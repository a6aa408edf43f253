"""Test keyboard input handling."""

import pytest

from scriptpad.keyboard import KeyboardHandler, KeyEvent, KeyType


class MockTerminal:
    """Mock terminal interface for testing."""

    def __init__(self):
        self._key_queue = []
        self.timeouts = []

    def read_key(self, timeout=None):
        """Mock read_key that returns from queue."""
        self.timeouts.append(timeout)
        if self._key_queue:
            return self._key_queue.pop(0)
        return None

    def add_key(self, key_str):
        self._key_queue.append(key_str)


@pytest.fixture
def handler():
    return KeyboardHandler(MockTerminal())


def test_get_key_event_returns_none_on_timeout():
    terminal = MockTerminal()
    handler = KeyboardHandler(terminal)
    assert handler.get_key_event(timeout=0.05) is None
    assert terminal.timeouts == [0.05]


def test_get_key_event_parses_queued_token():
    terminal = MockTerminal()
    handler = KeyboardHandler(terminal)
    terminal.add_key('<LEFT>')
    event = handler.get_key_event()
    assert event.key_type == KeyType.SPECIAL
    assert event.value == 'left'
    assert event.modifiers == frozenset()


@pytest.mark.parametrize("token,value", [
    ('<UP>', 'up'),
    ('<DOWN>', 'down'),
    ('<HOME>', 'home'),
    ('<END>', 'end'),
    ('<PAGEUP>', 'page_up'),
    ('<PAGEDOWN>', 'page_down'),
    ('<BACKSPACE>', 'backspace'),
    ('<DELETE>', 'delete'),
    ('<TAB>', 'tab'),
    ('<ESC>', 'escape'),
])
def test_special_tokens(handler, token, value):
    event = handler.parse_key(token)
    assert event.key_type == KeyType.SPECIAL
    assert event.value == value
    assert not event.modifiers


@pytest.mark.parametrize("token", ['<Ctrl-j>', '<Ctrl-m>', '\n', '\r'])
def test_enter_variants(handler, token):
    event = handler.parse_key(token)
    assert event.key_type == KeyType.SPECIAL
    assert event.value == 'enter'


def test_ctrl_letter_token(handler):
    event = handler.parse_key('<Ctrl-r>')
    assert event.key_type == KeyType.CTRL
    assert event.value == 'r'
    assert event.is_ctrl
    assert event.modifiers == frozenset({'ctrl'})


def test_raw_control_characters(handler):
    event = handler.parse_key('\x11')  # Ctrl-Q
    assert event.key_type == KeyType.CTRL
    assert event.value == 'q'

    assert handler.parse_key('\x7f').value == 'backspace'
    assert handler.parse_key('\x08').value == 'backspace'
    assert handler.parse_key('\t').value == 'tab'

    event = handler.parse_key('\x1c')  # Ctrl-\
    assert event.key_type == KeyType.CTRL
    assert event.value == '\\'


def test_ctrl_alt_token(handler):
    event = handler.parse_key('<Esc+Ctrl-S>')
    assert event.value == 's'
    assert event.is_ctrl and event.is_alt
    assert not event.is_shift
    assert event.modifiers == frozenset({'ctrl', 'alt'})


def test_ctrl_alt_raw_sequence(handler):
    event = handler.parse_key('\x1b\x13')
    assert event.value == 's'
    assert event.modifiers == frozenset({'ctrl', 'alt'})


def test_alt_letter(handler):
    event = handler.parse_key('<Esc+b>')
    assert event.key_type == KeyType.ALT
    assert event.value == 'b'
    assert event.is_alt

    event = handler.parse_key('\x1bf')
    assert event.key_type == KeyType.ALT
    assert event.value == 'f'


def test_meta_is_alt(handler):
    event = handler.parse_key('<Meta-left>')
    assert event.key_type == KeyType.ALT
    assert event.value == 'left'


def test_space_token_is_regular(handler):
    event = handler.parse_key('<SPACE>')
    assert event.key_type == KeyType.REGULAR
    assert event.value == ' '


def test_regular_characters(handler):
    for ch in ('a', 'Z', '<', '>', '"', 'é'):
        event = handler.parse_key(ch)
        assert event.key_type == KeyType.REGULAR
        assert event.value == ch
        assert event.raw == ch


def test_unknown_sequences_do_not_raise(handler):
    for token in ('<F13>', '<KEY_BTAB>', '\x1b[99~', ''):
        event = handler.parse_key(token)
        assert isinstance(event, KeyEvent)
        assert event.key_type != KeyType.REGULAR


def test_key_event_is_immutable():
    event = KeyEvent(KeyType.REGULAR, 'a', 'a')
    with pytest.raises(Exception):
        event.value = 'b'
