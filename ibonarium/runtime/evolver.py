from __future__ import annotations

from typing import List

from ibonarium.core.event_log import EventLog
from ibonarium.core.random_source import RandomSource
from ibonarium.core.state import LayerSnapshot, LayerState
from ibonarium.core.store import StateStore
from ibonarium.engines.coupling import CouplingParams, DEFAULT_PARAMS, evolve
from ibonarium.observability.instrumentation import (
    Instrumentation,
    NoOpInstrumentation,
)


class Evolver:
    """
    Fast-cadence driver of the coupling function.

    tick():
        1. evolve() under StateStore.update (single writer)
        2. append emitted events to the EventLog
        3. return the snapshot taken inside the same update

    InvariantViolation from evolve() propagates: it is a bug, not a
    condition to continue from.
    """

    def __init__(
            self,
            store: StateStore,
            log: EventLog,
            rng: RandomSource,
            params: CouplingParams = DEFAULT_PARAMS,
            inst: Instrumentation | None = None,
    ):
        self.store = store
        self.log = log
        self.rng = rng
        self.params = params
        self.inst = inst if inst is not None else NoOpInstrumentation()
        self.tick_count = 0

    def _apply(self, state: LayerState):
        outcome = evolve(state, self.rng, self.params)
        return outcome, state.freeze()

    def tick(self) -> LayerSnapshot:
        with self.inst.timer("evolver_tick"):
            outcome, snapshot = self.store.update(self._apply)

        for message in outcome.events:
            self.log.append(message)

        self.tick_count += 1
        return snapshot

    def run(self, ticks: int) -> List[LayerSnapshot]:
        """Offline helper: N ticks back to back, no scheduler."""
        return [self.tick() for _ in range(ticks)]
