import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class LocalStore:
    """Durable key-value store backed by one JSON file.

    Plays the part of the browser's local storage: values survive a restart,
    and concurrent writers from two processes are last-write-wins.
    """

    def __init__(self, path):
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError):
            logger.warning("Failed to read local store %s, starting empty", self.path, exc_info=True)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(data, fh)
        os.replace(tmp_path, self.path)

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any):
        data = self._load()
        data[key] = value
        self._dump(data)

    def remove(self, key: str):
        data = self._load()
        if key in data:
            del data[key]
            self._dump(data)
