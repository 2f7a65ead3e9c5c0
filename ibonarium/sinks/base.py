from __future__ import annotations

from datetime import datetime
from typing import Protocol, runtime_checkable

from ibonarium.core.state import LayerSnapshot


@runtime_checkable
class SnapshotSink(Protocol):
    """Receives the snapshot once per fast tick. Must not mutate it."""

    def update(self, snapshot: LayerSnapshot) -> None:
        ...


@runtime_checkable
class UISink(SnapshotSink, Protocol):
    """Text widgets: log lines, cosmetic clock, per-layer stats."""

    def append(self, timestamp: datetime, message: str) -> None:
        ...

    def display_clock(self, timestamp: datetime) -> None:
        ...


class NullSink:
    """Accepts everything, shows nothing (headless runs / tests)."""

    def update(self, snapshot: LayerSnapshot) -> None:
        pass

    def append(self, timestamp: datetime, message: str) -> None:
        pass

    def display_clock(self, timestamp: datetime) -> None:
        pass

    def close(self) -> None:
        pass
