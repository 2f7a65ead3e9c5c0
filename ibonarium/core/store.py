from __future__ import annotations

import threading
from typing import Callable, TypeVar

from ibonarium.core.state import LayerSnapshot, LayerState
from ibonarium.utils.errors import StoreClosedError

T = TypeVar("T")


class StateStore:
    """
    Owner of the single LayerState.

    - read()            -> frozen snapshot, never a half-applied update
    - update(mutator)   -> the only write path; mutator(live_state)
    - close()           -> explicit disposal at shutdown

    Cadences run on OS threads, so every access goes through one lock.
    No clamping / validation here: callers own their invariants.
    """

    def __init__(self, initial: LayerState | None = None):
        self._state = initial.copy() if initial is not None else LayerState.default()
        self._lock = threading.RLock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def read(self) -> LayerSnapshot:
        with self._lock:
            return self._state.freeze()

    def update(self, mutator: Callable[[LayerState], T]) -> T:
        with self._lock:
            if self._closed:
                raise StoreClosedError("state store already closed")
            return mutator(self._state)

    def close(self) -> None:
        with self._lock:
            self._closed = True
