# services/local_storage.py
"""
Key/value stores with the same surface as Flet's page.client_storage
(get / set / remove / get_keys / contains_key), so the queue and the cache
work the same on a device and in a headless run.
"""
import json
import logging
import os
import threading
from typing import Any, Optional

logger = logging.getLogger(__name__)


class StorageQuotaExceeded(OSError):
    """The store would grow past its allotted size."""


class MemoryStorage:
    def __init__(self):
        self._data: dict[str, Any] = {}

    def get(self, key: str):
        return self._data.get(key)

    def set(self, key: str, value) -> bool:
        self._data[key] = value
        return True

    def contains_key(self, key: str) -> bool:
        return key in self._data

    def remove(self, key: str) -> bool:
        self._data.pop(key, None)
        return True

    def get_keys(self, key_prefix: str) -> list[str]:
        return [k for k in self._data if k.startswith(key_prefix)]


class JsonFileStorage(MemoryStorage):
    """
    Everything lives in one JSON file, rewritten on each set/remove.
    With max_bytes set, a write that would make the file larger raises
    StorageQuotaExceeded and leaves both memory and disk untouched.
    """

    def __init__(self, path: str, max_bytes: Optional[int] = None):
        super().__init__()
        self.path = path
        self.max_bytes = max_bytes
        self._lock = threading.Lock()
        self._load()

    def _load(self):
        if not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error("Could not read local storage %s: %s", self.path, e)
            return
        if isinstance(data, dict):
            self._data = data

    def _flush(self, data: dict):
        raw = json.dumps(data)
        if self.max_bytes is not None and len(raw.encode("utf-8")) > self.max_bytes:
            raise StorageQuotaExceeded(f"Local storage quota of {self.max_bytes} bytes exceeded")
        tmp = f"{self.path}.tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(raw)
        os.replace(tmp, self.path)

    def set(self, key: str, value) -> bool:
        with self._lock:
            data = {**self._data, key: value}
            self._flush(data)
            self._data = data
        return True

    def remove(self, key: str) -> bool:
        with self._lock:
            if key not in self._data:
                return True
            data = {k: v for k, v in self._data.items() if k != key}
            self._flush(data)
            self._data = data
        return True
