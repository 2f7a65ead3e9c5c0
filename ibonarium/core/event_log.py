from __future__ import annotations

import threading
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Deque, List, Tuple

from ibonarium import logs


@dataclass(frozen=True)
class LogEntry:
    timestamp: datetime
    message: str

    def format(self) -> str:
        return f"[{self.timestamp:%H:%M:%S}] {self.message}"


Listener = Callable[[LogEntry], None]


class EventLog:
    """
    Bounded, ordered log of human-readable lab events.

    - append() is the only mutation; the oldest entry is evicted past capacity
    - entries() returns oldest-first copies
    - listeners (UI sinks) get every appended entry, outside the lock
    """

    DEFAULT_CAPACITY = 20

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1 (got {capacity})")
        self.capacity = capacity
        self._clock = clock
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()

    def append(self, message: str, timestamp: datetime | None = None) -> LogEntry:
        entry = LogEntry(timestamp=timestamp or self._clock(), message=message)
        with self._lock:
            self._entries.append(entry)
            listeners = list(self._listeners)

        logs.debug(f"[EventLog] {message}")

        for listener in listeners:
            try:
                listener(entry)
            except Exception:
                # a broken sink must not stop the producer
                logs.exception(f"[EventLog] listener {listener!r} failed")
        return entry

    def subscribe(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def entries(self) -> Tuple[LogEntry, ...]:
        with self._lock:
            return tuple(self._entries)

    def messages(self) -> List[str]:
        return [e.message for e in self.entries()]

    def lines(self) -> List[str]:
        return [e.format() for e in self.entries()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
