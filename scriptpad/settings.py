"""Persistent editor preferences.

Settings live in a JSON file in the OS-appropriate config directory and
survive application restarts. Missing, unreadable or invalid values fall
back to their defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .constants import EditorConstants

logger = logging.getLogger(__name__)

APP_NAME = "scriptpad"


@dataclass
class EditorSettings:
    merge_lines: bool = False
    line_numbers: bool = True
    tab_width: int = EditorConstants.TAB_WIDTH
    poll_interval: float = EditorConstants.POLL_INTERVAL

    def session_options(self) -> Dict[str, Any]:
        """Keyword arguments for ``run_edit_session``."""
        return asdict(self)


def validate_setting(key: str, value: Any) -> bool:
    """Validate a setting value.

    Args:
        key: Setting key name.
        value: Setting value to validate.

    Returns:
        True if setting is valid, False otherwise.
    """
    if key in ('merge_lines', 'line_numbers'):
        return isinstance(value, bool)

    if key == 'tab_width':
        # bool is an int subclass; reject it explicitly
        if not isinstance(value, int) or isinstance(value, bool):
            return False
        return 1 <= value <= 8

    if key == 'poll_interval':
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            return False
        return 0.01 <= value <= 0.5

    # Unknown settings are considered valid (forward compatibility)
    return True


class SettingsPersistence:
    """Reads and writes ``settings.json`` in the user's config directory."""

    def __init__(self, config_dir: Optional[Path] = None):
        self._config_dir = Path(config_dir or platformdirs.user_config_dir(APP_NAME))
        self._settings_file = self._config_dir / "settings.json"
        self._settings_cache: Optional[Dict[str, Any]] = None

    @property
    def settings_file(self) -> Path:
        return self._settings_file

    def _ensure_config_dir(self) -> None:
        try:
            self._config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Could not create config directory {self._config_dir}: {e}")

    def _load_raw(self) -> Dict[str, Any]:
        if self._settings_cache is not None:
            return self._settings_cache

        if not self._settings_file.exists():
            self._settings_cache = {}
            return self._settings_cache

        try:
            with open(self._settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not load settings from {self._settings_file}: {e}")
            data = {}

        if not isinstance(data, dict):
            logger.warning("Settings file has invalid format (not a dict), ignoring")
            data = {}

        self._settings_cache = data
        return self._settings_cache

    def load(self) -> EditorSettings:
        """Return the stored settings; invalid entries keep their defaults."""
        raw = self._load_raw()
        settings = EditorSettings()
        for field in fields(EditorSettings):
            if field.name not in raw:
                continue
            value = raw[field.name]
            if validate_setting(field.name, value):
                setattr(settings, field.name, value)
            else:
                logger.warning(f"Ignoring invalid value {value!r} for setting {field.name!r}")
        return settings

    def save(self, settings: EditorSettings) -> bool:
        """Save settings atomically.

        Returns:
            True if save was successful, False otherwise.
        """
        self._ensure_config_dir()
        data = dict(self._load_raw())
        data.update(asdict(settings))

        # Use atomic write pattern (temp file + rename)
        temp_file = self._settings_file.with_suffix('.tmp')
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
            temp_file.replace(self._settings_file)
            self._settings_cache = data
            return True
        except OSError as e:
            logger.warning(f"Could not save settings to {self._settings_file}: {e}")
            try:
                if temp_file.exists():
                    temp_file.unlink()
            except OSError:
                pass
            return False

    def clear_cache(self) -> None:
        """Clear the in-memory cache of settings."""
        self._settings_cache = None


# Global instance
_persistence: Optional[SettingsPersistence] = None


def get_persistence() -> SettingsPersistence:
    """Get the global settings persistence instance."""
    global _persistence
    if _persistence is None:
        _persistence = SettingsPersistence()
    return _persistence
