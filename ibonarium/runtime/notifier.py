from __future__ import annotations

from typing import Iterable, List

from ibonarium.core.state import LayerSnapshot
from ibonarium.sinks.base import SnapshotSink
from ibonarium import logs


class SinkNotifier:
    """
    Hands each fast-tick snapshot to every sink.

    Sinks must not break the evolver loop: exceptions are logged
    (first occurrence per sink with traceback, later ones counted).
    """

    def __init__(self, sinks: Iterable[SnapshotSink] = ()):
        self.sinks: List[SnapshotSink] = list(sinks)
        self.failures: dict[str, int] = {}

    def add(self, sink: SnapshotSink) -> None:
        self.sinks.append(sink)

    def notify(self, snapshot: LayerSnapshot) -> None:
        for sink in self.sinks:
            try:
                sink.update(snapshot)
            except Exception:
                name = type(sink).__name__
                count = self.failures.get(name, 0) + 1
                self.failures[name] = count
                if count == 1:
                    logs.exception(f"[SinkNotifier] {name}.update failed")
                else:
                    logs.warning(f"[SinkNotifier] {name}.update failed ({count} times)")
