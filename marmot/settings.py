"""Persistent application settings stored as a JSON document."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

APPLICATION_DIR = "marmot"
SETTINGS_FILE = "settings.json"


def default_settings_path() -> Path:
    """Location of the settings file in the user's configuration directory."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / APPLICATION_DIR / SETTINGS_FILE


def to_bool(value: Any) -> bool:
    """Convert a stored value to a boolean.

    Text is true unless it is empty, "0" or "false" (in any case); numbers are
    true when non-zero; a missing value is false.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() not in ("", "0", "false")
    return bool(value)


class Settings:
    """Key/value settings that survive between runs."""

    def __init__(self, path: str | os.PathLike[str] | None = None) -> None:
        self.path = Path(path) if path is not None else default_settings_path()
        self._values: dict[str, Any] = self._load()

    def _load(self) -> dict[str, Any]:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        if not text.strip():
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path}: settings must be a JSON object")
        return data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".settings-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._values, handle, indent=2, sort_keys=True)
            os.replace(temp_name, self.path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise

    def value(self, key: str, default: Any = None) -> Any:
        """The value stored under key, or default when there is none."""
        return self._values.get(key, default)

    def boolean_value(self, key: str, default: Any = None) -> bool:
        """The value stored under key (or default) converted to a boolean."""
        return to_bool(self._values.get(key, default))

    def set_value(self, key: str, value: Any) -> None:
        """Store value under key and write the settings to disk."""
        json.dumps(value)  # reject values that cannot be persisted before changing anything
        self._values[key] = value
        self._save()

    def contains(self, key: str) -> bool:
        """Whether a value is stored under key."""
        return key in self._values

    def __contains__(self, key: object) -> bool:
        return key in self._values