"""Scriptpad CLI entry point.

Allows running via `python -m scriptpad` and provides the console script
defined in `pyproject.toml`.

Usage:
    scriptpad FILE [ARGS...]          Run FILE with ARGS
    scriptpad -  [ARGS...]            Type a script in the editor, then run it
    scriptpad --edit FILE [ARGS...]   Edit FILE, then run (or save and run) it
    command | scriptpad [ARGS...]     Run the script read from stdin
"""

from __future__ import annotations

import errno
import logging
import os
import subprocess
import sys
import tempfile
from typing import Optional

from .constants import EditorConstants
from .version import get_version_string

logger = logging.getLogger(__name__)


def _escape_bytes(s: str) -> str:
    """Return a printable representation of raw key string."""
    return s.encode('unicode_escape').decode('ascii')


def _error(message: str) -> None:
    print(message, file=sys.stderr)


def configure_debug_logging() -> str:
    """Send debug logs to a file, since the editor owns the terminal."""
    import platformdirs
    from .settings import APP_NAME

    log_dir = platformdirs.user_log_dir(APP_NAME)
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, f"{APP_NAME}.log")
    handler = logging.FileHandler(log_path, encoding='utf-8')
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger(APP_NAME)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)
    return log_path


def save_file(filename: str, content: str) -> bool:
    """Save content to a file atomically.

    Returns:
        True if save succeeded, False otherwise
    """
    dir_name = os.path.dirname(filename) or '.'
    suffix = os.path.splitext(filename)[1]
    temp_filename = None
    try:
        # Same directory keeps the rename on one filesystem
        with tempfile.NamedTemporaryFile(mode='w', encoding='utf-8', newline='',
                                         dir=dir_name, suffix=suffix,
                                         delete=False) as temp_file:
            temp_filename = temp_file.name
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        os.replace(temp_filename, filename)
        return True
    except OSError as e:
        if e.errno == errno.ENOSPC:
            _error("Error: No space left on device")
        elif isinstance(e, PermissionError):
            _error(f"Error: Permission denied saving {filename}")
        else:
            _error(f"Error: Cannot save to {filename}")
        logger.warning(f"Saving {filename} failed: {e}")
        if temp_filename and os.path.exists(temp_filename):
            try:
                os.remove(temp_filename)
            except OSError:
                pass
        return False


def run_script(path: str, args: list[str]) -> int:
    """Run a script with the current interpreter and return its exit status."""
    logger.debug(f"Running {path} with {len(args)} argument(s)")
    return subprocess.call([sys.executable, path, *args])


def run_text(text: str, args: list[str]) -> int:
    """Run script text through a temporary file."""
    with tempfile.NamedTemporaryFile(mode='w', encoding='utf-8', newline='',
                                     suffix=EditorConstants.SCRIPT_SUFFIX,
                                     delete=False) as temp_file:
        temp_file.write(text)
    try:
        return run_script(temp_file.name, args)
    finally:
        try:
            os.remove(temp_file.name)
        except OSError as e:
            logger.warning(f"Could not remove {temp_file.name}: {e}")


def edit_and_run(filename: Optional[str], args: list[str]) -> int:
    """Open the editor, then save and/or run whatever the user submitted."""
    from .commands import KeyRouter, Outcome
    from .editor import run_edit_session
    from .settings import get_persistence
    from .terminal import TerminalIoError

    initial_text = None
    if filename and os.path.exists(filename):
        try:
            with open(filename, 'r', encoding='utf-8') as f:
                initial_text = f.read()
        except OSError as e:
            _error(f"Error loading file: {e}")
            return 1

    can_persist = filename is not None
    settings = get_persistence().load()
    help_text = KeyRouter(can_persist=can_persist).help_text()
    print(EditorConstants.EDITOR_BANNER.format(help_text))

    try:
        result = run_edit_session(
            initial_text,
            can_persist,
            resume=bool(initial_text),
            **settings.session_options(),
        )
    except TerminalIoError as e:
        _error(f"Terminal error: {e}")
        return 1

    if result.outcome is Outcome.QUIT:
        return 1

    text = result.final_text or ''
    if result.persist:
        if not save_file(filename, text):
            return 1
        print(f"Saved to {filename}")
        print("Running...")
        return run_script(os.path.abspath(filename), args)

    if not text.strip():
        _error(EditorConstants.NO_INPUT_MESSAGE)
        return 1
    print("Running...")
    return run_text(text, args)


def run_keyboard_test() -> None:
    """Print parsed key events and the commands they route to. Quit with ESC."""
    from .commands import KeyRouter
    from .keyboard import KeyboardHandler
    from .terminal import TerminalInterface

    print("Keyboard test mode - press keys to see parsed events.")
    print("Quit with ESC.")

    router = KeyRouter(can_persist=True)
    with TerminalInterface() as term:
        kb = KeyboardHandler(term)
        while True:
            ev = kb.get_key_event(timeout=None)
            if not ev:
                continue
            if ev.value == 'escape' and not ev.modifiers:
                print("Exiting keyboard test.")
                break
            mods = '+'.join(sorted(ev.modifiers)) or '-'
            command = router.route(ev)
            print(f"type={ev.key_type.value} value={ev.value!r} raw='{_escape_bytes(ev.raw)}' "
                  f"mods={mods} command={command!r}", end='\r\n', flush=True)


def main(argv: Optional[list[str]] = None) -> int:
    # Very small arg parsing; everything after the target goes to the script
    args = list(sys.argv[1:] if argv is None else argv)
    if args and args[0] in ("--version", "-V"):
        print(get_version_string())
        return 0
    if args and args[0] in ("--debug", "-d"):
        args.pop(0)
        log_path = configure_debug_logging()
        logger.debug(f"Debug logging to {log_path}")
    if args and args[0] in ('--keytest', '--keyboard-test'):
        run_keyboard_test()
        return 0

    if args and args[0] in ("--edit", "-e"):
        if len(args) < 2:
            _error("--edit needs a file name")
            return 1
        return edit_and_run(args[1], args[2:])

    target = args[0] if args else None
    script_args = args[1:]

    if target == EditorConstants.INTERACTIVE_TARGET:
        return edit_and_run(None, script_args)

    if target is None or not os.path.isfile(target):
        if not sys.stdin.isatty():
            # Read the script from stdin; a given target is an argument then
            text = sys.stdin.read()
            if not text.strip():
                _error(EditorConstants.NO_INPUT_MESSAGE)
                return 1
            return run_text(text, args)
        if target is None:
            _error(EditorConstants.NO_TARGET_MESSAGE)
        else:
            _error(EditorConstants.FILE_NOT_FOUND_MESSAGE.format(target))
        return 1

    return run_script(os.path.abspath(target), script_args)


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
