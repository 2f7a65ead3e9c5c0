#!filepath: tests/core/test_state_store.py
import threading

import pytest

from ibonarium.core.state import LayerState
from ibonarium.core.store import StateStore
from ibonarium.utils.errors import StoreClosedError


def test_starts_from_defaults():
    assert StateStore().read() == LayerState.default().freeze()


def test_initial_state_is_copied():
    initial = LayerState.default()
    store = StateStore(initial)

    initial.set("geo", magnetic_stress=99.0)

    assert store.read().geo.magnetic_stress == 32.0


def test_update_is_the_write_path_and_returns_mutator_result(store):
    def mutator(state):
        state.set("social", anxiety=0.5)
        return "done"

    assert store.update(mutator) == "done"
    assert store.read().social.anxiety == 0.5


def test_store_does_not_clamp(store):
    store.update(lambda s: s.set("social", anxiety=3.0))
    assert store.read().social.anxiety == 3.0


def test_read_returns_independent_snapshots(store):
    before = store.read()
    store.update(lambda s: s.set("cosmos", solar_flux=180.0))

    assert before.cosmos.solar_flux == 145.0
    assert store.read().cosmos.solar_flux == 180.0


def test_update_after_close_raises(store):
    store.close()

    assert store.closed
    with pytest.raises(StoreClosedError):
        store.update(lambda s: None)
    # readers still see the last state
    assert store.read().cosmos.solar_flux == 145.0


def test_readers_never_see_half_applied_update(store):
    """Writer sets two fields in one update; readers must see both or neither."""
    stop = threading.Event()
    torn = []

    def writer():
        value = 0.0
        while not stop.is_set():
            value += 1.0

            def mutate(s, v=value):
                s.set("geo", thermal_gradient=v)
                s.set("bio", respiration=v)

            store.update(mutate)

    def reader():
        for _ in range(2000):
            snap = store.read()
            if snap.geo.thermal_gradient != snap.bio.respiration and snap.geo.thermal_gradient != 1.2:
                torn.append(snap)

    w = threading.Thread(target=writer)
    w.start()
    try:
        reader()
    finally:
        stop.set()
        w.join()

    assert torn == []
