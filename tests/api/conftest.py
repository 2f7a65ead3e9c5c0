from __future__ import annotations

import pytest

from ibonarium.api.app import create_app
from ibonarium.core.random_source import ConstantRandom
from ibonarium.persistence.kv_store import InMemoryKeyValueStore
from ibonarium.workflows.lab import build_lab


@pytest.fixture
def kv():
    return InMemoryKeyValueStore()


@pytest.fixture
def lab(kv):
    """Offline lab (no providers, no scheduler)."""
    lab = build_lab(rng=ConstantRandom(0.0), kv_store=kv, offline=True)
    yield lab
    if not lab.store.closed:
        lab.stop()


@pytest.fixture
def client(lab):
    """
    Flask test client (no real server).
    """
    app = create_app(lab)
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client
