"""
Local key-value storage for user preferences.

Preferences are a single JSON object stored under one fixed key. Anything
unreadable under that key (missing, corrupt JSON, not an object) reads back
as an empty dict.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)

PREFERENCES_KEY = "userPreferences"


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileKeyValueStore:
    """String key-value pairs persisted as one JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable key-value file %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = str(value)
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._save(data)


class PreferenceStore:
    def __init__(self, backend: KeyValueStore, key: str = PREFERENCES_KEY) -> None:
        self.backend = backend
        self.key = key

    def get_preferences(self) -> Dict[str, Any]:
        raw = self.backend.get_item(self.key)
        if not raw:
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Stored preferences under %s are not valid JSON; treating as empty", self.key)
            return {}
        return data if isinstance(data, dict) else {}

    def update_preferences(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        merged = {**self.get_preferences(), **(updates or {})}
        self.backend.set_item(self.key, json.dumps(merged))
        return merged

    def clear(self) -> None:
        self.backend.remove_item(self.key)
