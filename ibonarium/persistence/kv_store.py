from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Dict, Protocol

from ibonarium.utils.filesystem import FileSystem
from ibonarium import logs


class KeyValueStore(Protocol):
    def get(self, key: str) -> Any | None:
        ...

    def set(self, key: str, value: Any) -> None:
        ...


class InMemoryKeyValueStore:
    def __init__(self):
        self._data: Dict[str, Any] = {}

    def get(self, key: str) -> Any | None:
        return self._data.get(key)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value


class JsonKeyValueStore:
    """
    One JSON document holding every key.

    set() rewrites the whole file atomically (tmp + replace), so a crash
    mid-save leaves the previous content readable.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, Any]:
        if not FileSystem.file_exists(self.path):
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            logs.warning(f"[JsonKeyValueStore] {self.path} is not valid JSON, starting empty")
            return {}

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            data = self._read_all()
            data[key] = value
            payload = json.dumps(data, ensure_ascii=False, indent=2).encode("utf-8")
            FileSystem.safe_write(self.path, payload)
