"""Tests for the command line entry point."""

import os
import sys
from unittest.mock import Mock, patch

import pytest

from scriptpad.__main__ import main, run_text, save_file
from scriptpad.constants import EditorConstants
from scriptpad.editor import EditResult, Outcome
from scriptpad.settings import SettingsPersistence
from scriptpad.terminal import TerminalIoError


@pytest.fixture
def tty_stdin(monkeypatch):
    monkeypatch.setattr(sys, 'stdin', Mock(isatty=Mock(return_value=True)))


@pytest.fixture
def settings_dir(tmp_path):
    persistence = SettingsPersistence(tmp_path / "config")
    with patch('scriptpad.settings.get_persistence', return_value=persistence):
        yield persistence


@pytest.fixture
def script(tmp_path):
    path = tmp_path / "hello.py"
    path.write_text("x = 1\n", encoding='utf-8')
    return path


def test_version(capsys):
    with patch('scriptpad.__main__.get_version_string', return_value="1.2.3"):
        assert main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == "1.2.3"


def test_no_target(tty_stdin, capsys):
    assert main([]) == 1
    assert EditorConstants.NO_TARGET_MESSAGE in capsys.readouterr().err


def test_missing_file(tty_stdin, capsys):
    assert main(["nope.py"]) == 1
    assert EditorConstants.FILE_NOT_FOUND_MESSAGE.format("nope.py") in capsys.readouterr().err


def test_edit_needs_file(capsys):
    assert main(["--edit"]) == 1
    assert "--edit" in capsys.readouterr().err


def test_runs_existing_file_with_arguments(script):
    with patch('subprocess.call', return_value=3) as call:
        assert main([str(script), "a", "b"]) == 3
    call.assert_called_once_with([sys.executable, str(script), "a", "b"])


def test_runs_script_from_stdin(monkeypatch):
    stdin = Mock()
    stdin.isatty.return_value = False
    stdin.read.return_value = "print('hi')\n"
    monkeypatch.setattr(sys, 'stdin', stdin)
    seen = {}

    def fake_call(cmd):
        seen['cmd'] = cmd
        with open(cmd[1], encoding='utf-8') as f:
            seen['text'] = f.read()
        return 0

    with patch('subprocess.call', side_effect=fake_call):
        assert main(["arg"]) == 0
    assert seen['text'] == "print('hi')\n"
    assert seen['cmd'][2:] == ["arg"]
    assert seen['cmd'][1].endswith(EditorConstants.SCRIPT_SUFFIX)
    assert not os.path.exists(seen['cmd'][1])


def test_empty_stdin(monkeypatch, capsys):
    stdin = Mock()
    stdin.isatty.return_value = False
    stdin.read.return_value = "  \n"
    monkeypatch.setattr(sys, 'stdin', stdin)
    with patch('subprocess.call') as call:
        assert main([]) == 1
    call.assert_not_called()
    assert EditorConstants.NO_INPUT_MESSAGE in capsys.readouterr().err


def test_run_text_removes_temp_file_on_failure():
    seen = []

    def failing_call(cmd):
        seen.append(cmd[1])
        raise OSError("cannot start interpreter")

    with patch('subprocess.call', side_effect=failing_call):
        with pytest.raises(OSError):
            run_text("pass\n", [])
    assert not os.path.exists(seen[0])


class TestEditFlow:

    def test_save_writes_file_then_runs_it(self, script, settings_dir, capsys):
        result = EditResult(Outcome.SAVE, "x = 2\n")
        with patch('scriptpad.editor.run_edit_session', return_value=result) as edit, \
                patch('subprocess.call', return_value=0) as call:
            assert main(["--edit", str(script), "arg"]) == 0

        assert script.read_text(encoding='utf-8') == "x = 2\n"
        call.assert_called_once_with([sys.executable, os.path.abspath(script), "arg"])
        args, kwargs = edit.call_args
        assert args == ("x = 1\n", True)
        assert kwargs['resume'] is True
        assert kwargs['line_numbers'] is True
        out = capsys.readouterr().out
        assert f"Saved to {script}" in out
        assert "Ctrl+Alt+S to save" in out

    def test_run_without_saving_leaves_file_alone(self, script, settings_dir):
        result = EditResult(Outcome.RUN, "x = 3\n")
        with patch('scriptpad.editor.run_edit_session', return_value=result), \
                patch('subprocess.call', return_value=0) as call:
            assert main(["-e", str(script)]) == 0
        assert script.read_text(encoding='utf-8') == "x = 1\n"
        assert call.call_args[0][0][1] != str(script)

    def test_quit_exits_with_failure(self, script, settings_dir):
        result = EditResult(Outcome.QUIT, None)
        with patch('scriptpad.editor.run_edit_session', return_value=result), \
                patch('subprocess.call') as call:
            assert main(["--edit", str(script)]) == 1
        call.assert_not_called()
        assert script.read_text(encoding='utf-8') == "x = 1\n"

    def test_new_file_starts_empty(self, tmp_path, settings_dir):
        target = tmp_path / "new.py"
        result = EditResult(Outcome.SAVE, "print(1)\n")
        with patch('scriptpad.editor.run_edit_session', return_value=result) as edit, \
                patch('subprocess.call', return_value=0):
            assert main(["--edit", str(target)]) == 0
        assert edit.call_args[0] == (None, True)
        assert edit.call_args[1]['resume'] is False
        assert target.read_text(encoding='utf-8') == "print(1)\n"

    def test_interactive_editor_runs_typed_text(self, settings_dir, capsys):
        result = EditResult(Outcome.RUN, "print('hi')")
        with patch('scriptpad.editor.run_edit_session', return_value=result) as edit, \
                patch('subprocess.call', return_value=0) as call:
            assert main(["-", "x"]) == 0
        assert edit.call_args[0] == (None, False)
        assert call.call_args[0][0][2:] == ["x"]
        out = capsys.readouterr().out
        assert "Running..." in out
        assert "to save" not in out

    def test_interactive_editor_with_empty_text(self, settings_dir, capsys):
        result = EditResult(Outcome.RUN, "")
        with patch('scriptpad.editor.run_edit_session', return_value=result), \
                patch('subprocess.call') as call:
            assert main(["-"]) == 1
        call.assert_not_called()
        assert EditorConstants.NO_INPUT_MESSAGE in capsys.readouterr().err

    def test_terminal_error(self, settings_dir, capsys):
        with patch('scriptpad.editor.run_edit_session',
                   side_effect=TerminalIoError("not a terminal")):
            assert main(["-"]) == 1
        assert "not a terminal" in capsys.readouterr().err


class TestSaveFile:

    def test_writes_content_exactly(self, tmp_path):
        target = tmp_path / "out.py"
        assert save_file(str(target), "a\r\nb\n")
        with open(target, newline='', encoding='utf-8') as f:
            assert f.read() == "a\r\nb\n"
        assert os.listdir(tmp_path) == ["out.py"]

    def test_replaces_existing_file(self, script):
        assert save_file(str(script), "y = 2\n")
        assert script.read_text(encoding='utf-8') == "y = 2\n"

    def test_missing_directory_fails(self, tmp_path, capsys):
        target = tmp_path / "missing" / "out.py"
        assert not save_file(str(target), "x")
        assert "Cannot save" in capsys.readouterr().err
