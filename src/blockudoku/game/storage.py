"""High-score and preference persistence.

The engine only needs ``load()`` and ``save(value)``. Storage problems are
handled here and never surface as game errors.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

HIGH_SCORE_KEY = "highScore"
THEME_KEY = "blockudoku-theme"
THEMES = ("dark", "light")


class JsonSettingsFile:
    """A small JSON object on disk; each write keeps the keys it does not touch."""

    def __init__(self, path: str) -> None:
        self.path = path

    def read(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as fh:
                data = json.load(fh)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("Could not read settings file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self.read().get(key, default)

    def set(self, key: str, value: Any) -> bool:
        data = self.read()
        data[key] = value
        directory = os.path.dirname(self.path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as fh:
                json.dump(data, fh)
        except OSError as exc:
            logger.warning("Could not write %s to %s: %s", key, self.path, exc)
            return False
        return True


class HighScoreStore:
    def load(self) -> int:
        raise NotImplementedError

    def save(self, value: int) -> None:
        raise NotImplementedError


class MemoryHighScoreStore(HighScoreStore):
    def __init__(self, value: int = 0) -> None:
        self.value = max(0, int(value))

    def load(self) -> int:
        return self.value

    def save(self, value: int) -> None:
        self.value = max(0, int(value))


class JsonHighScoreStore(HighScoreStore):
    """Keeps the high score in a settings file under a fixed key."""

    def __init__(self, path: str, key: str = HIGH_SCORE_KEY) -> None:
        self.path = path
        self.key = key
        self._file = JsonSettingsFile(path)

    def load(self) -> int:
        raw = self._file.get(self.key, 0)
        try:
            return max(0, int(raw))
        except (TypeError, ValueError):
            logger.warning("Ignoring malformed high score %r in %s", raw, self.path)
            return 0

    def save(self, value: int) -> None:
        self._file.set(self.key, max(0, int(value)))


class ThemePreference:
    """Dark or light, remembered between sessions."""

    def __init__(self, settings: Optional[JsonSettingsFile] = None, key: str = THEME_KEY) -> None:
        self.settings = settings
        self.key = key

    def load(self, default: str = "dark") -> str:
        if self.settings is None:
            return default
        value = self.settings.get(self.key, default)
        return value if value in THEMES else default

    def save(self, theme: str) -> None:
        if theme not in THEMES:
            raise ValueError(f"unknown theme {theme!r}")
        if self.settings is not None:
            self.settings.set(self.key, theme)
