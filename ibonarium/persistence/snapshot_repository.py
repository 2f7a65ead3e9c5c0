from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Dict

from ibonarium.core.state import LayerSnapshot, LayerState
from ibonarium.persistence.kv_store import KeyValueStore
from ibonarium import logs

DEFAULT_KEY = "ibonarium_snapshot"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotRepository:
    """
    Saves {"date": ISO-8601, "state": {...}} under one fixed key.

    No schema versioning: every save overwrites the previous blob.
    """

    def __init__(
            self,
            store: KeyValueStore,
            key: str = DEFAULT_KEY,
            clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.key = key
        self._clock = clock

    @logs.catch("snapshot save failed")
    def save(self, snapshot: LayerSnapshot | LayerState) -> Dict[str, Any]:
        blob = {
            "date": self._clock().isoformat(),
            "state": snapshot.to_dict(),
        }
        self.store.set(self.key, blob)
        logs.info(f"[SnapshotRepository] saved {self.key} at {blob['date']}")
        return blob

    def load(self) -> Dict[str, Any] | None:
        return self.store.get(self.key)

    def load_state(self) -> LayerState | None:
        blob = self.load()
        if blob is None:
            return None
        return LayerState.from_dict(blob["state"])
