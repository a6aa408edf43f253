"""Keyboard input handling using curtsies-style tokens."""

from typing import Optional
from dataclasses import dataclass
from enum import Enum


class KeyType(Enum):
    """Types of key events."""
    REGULAR = "regular"
    ALT = "alt"
    CTRL = "ctrl"
    SPECIAL = "special"


SPECIAL_KEYS = frozenset({
    'left', 'right', 'up', 'down', 'home', 'end', 'enter', 'backspace',
    'delete', 'page_up', 'page_down', 'insert', 'tab', 'escape',
})

_KEY_ALIASES = {
    'pageup': 'page_up',
    'pagedown': 'page_down',
    'page_up': 'page_up',
    'page_down': 'page_down',
    'del': 'delete',
    'esc': 'escape',
    'return': 'enter',
    'space': ' ',
    'spacebar': ' ',
    'spc': ' ',
}


@dataclass(frozen=True)
class KeyEvent:
    """Represents a parsed keyboard event."""
    key_type: KeyType
    value: str  # The base key (e.g., 'a', 'left', 'backspace')
    raw: str  # The raw token from the input source
    is_alt: bool = False
    is_ctrl: bool = False
    is_shift: bool = False

    @property
    def modifiers(self) -> frozenset:
        mods = set()
        if self.is_ctrl:
            mods.add('ctrl')
        if self.is_alt:
            mods.add('alt')
        if self.is_shift:
            mods.add('shift')
        return frozenset(mods)


def _event(base: str, raw: str, ctrl: bool = False, alt: bool = False, shift: bool = False) -> KeyEvent:
    """Build an event from a normalized base name and modifier flags."""
    if ctrl and len(base) == 1:
        # Terminals deliver Enter as Ctrl-J/Ctrl-M and Backspace as Ctrl-H
        if base in ('j', 'm') and not alt:
            return KeyEvent(KeyType.SPECIAL, 'enter', raw)
        if base == 'h' and not alt:
            return KeyEvent(KeyType.SPECIAL, 'backspace', raw)
        if base == 'i' and not alt:
            return KeyEvent(KeyType.SPECIAL, 'tab', raw)
        return KeyEvent(KeyType.CTRL, base, raw, is_alt=alt, is_ctrl=True, is_shift=shift)
    if alt and (base in SPECIAL_KEYS or len(base) == 1):
        return KeyEvent(KeyType.ALT, base, raw, is_alt=True, is_ctrl=ctrl, is_shift=shift)
    if len(base) == 1 and not (ctrl or alt):
        return KeyEvent(KeyType.REGULAR, base, raw, is_shift=shift)
    # Specials and anything unknown; routing decides what to do with them
    return KeyEvent(KeyType.SPECIAL, base, raw, is_alt=alt, is_ctrl=ctrl, is_shift=shift)


class KeyboardHandler:
    """Reads tokens from a terminal handle and parses them into KeyEvents."""

    def __init__(self, terminal_interface):
        self.terminal = terminal_interface

    def get_key_event(self, timeout: Optional[float] = None) -> Optional[KeyEvent]:
        """Get next key event, or None when nothing arrived within ``timeout``."""
        key = self.terminal.read_key(timeout)
        if not key:
            return None
        return self.parse_key(key)

    def parse_key(self, key) -> KeyEvent:
        """Parse a curtsies token or raw character string into a KeyEvent."""
        key_str = str(key)

        # Curtsies-style key names like '<LEFT>', '<Ctrl-r>', '<Esc+Ctrl-S>'
        if len(key_str) > 2 and key_str.startswith('<') and key_str.endswith('>'):
            name = key_str[1:-1]
            lower = name.lower().replace('+', '-')
            if lower.endswith('--'):
                # A literal '-' as the base key, e.g. '<Esc+->'
                parts = lower[:-2].split('-') + ['-']
            else:
                parts = lower.split('-')
            base = parts[-1]
            mods = set(parts[:-1])
            if base.startswith('shift_'):
                mods.add('shift')
                base = base[len('shift_'):]
            if name[-1:].isupper() and len(base) == 1 and base.isalpha() and 'ctrl' not in mods:
                mods.add('shift')
            base = _KEY_ALIASES.get(base, base)
            alt = bool(mods & {'alt', 'meta', 'esc'})
            return _event(base, key_str, ctrl='ctrl' in mods, alt=alt, shift='shift' in mods)

        # ESC-prefixed pair: Alt (or Ctrl-Alt) + key
        if len(key_str) == 2 and key_str[0] == '\x1b':
            inner = self.parse_key(key_str[1])
            if inner.key_type == KeyType.REGULAR:
                return KeyEvent(KeyType.ALT, inner.value, key_str, is_alt=True)
            return KeyEvent(
                KeyType.CTRL if inner.is_ctrl else KeyType.ALT,
                inner.value,
                key_str,
                is_alt=True,
                is_ctrl=inner.is_ctrl,
            )

        if len(key_str) == 1:
            o = ord(key_str)
            if 1 <= o <= 26:  # Ctrl-A .. Ctrl-Z (exclude ESC=27)
                return _event(chr(ord('a') + o - 1), key_str, ctrl=True)
            if key_str == '\x1b':
                return KeyEvent(KeyType.SPECIAL, 'escape', key_str)
            if key_str == '\x7f':
                return KeyEvent(KeyType.SPECIAL, 'backspace', key_str)
            if o < 32:
                # Remaining C0 controls (Ctrl-\, Ctrl-], Ctrl-^, Ctrl-_)
                return KeyEvent(KeyType.CTRL, chr(o + 64).lower(), key_str, is_ctrl=True)
            return KeyEvent(KeyType.REGULAR, key_str, key_str)

        # Unparsed multi-character sequences are kept for routing to ignore
        return KeyEvent(KeyType.SPECIAL, key_str, key_str)
