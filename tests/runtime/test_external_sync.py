#!filepath: tests/runtime/test_external_sync.py
import pytest

from ibonarium.core.random_source import ConstantRandom
from ibonarium.core.readings import SocialReading
from ibonarium.runtime.external_sync import ExternalSync
from ibonarium.utils.errors import TransientSyncFailure


def _sync(store, log, geo=None, social=None, align=False):
    return ExternalSync(
        store,
        log,
        ConstantRandom(0.5),
        geo_provider=geo,
        social_provider=social,
        align_cosmos=align,
    )


def test_success_merges_both_categories(store, event_log, geo_ok, social_ok):
    report = _sync(store, event_log, geo_ok, social_ok).sync_once()

    snap = store.read()
    assert report.ok
    assert report.results == {"geo": True, "social": True}
    assert snap.geo.thermal_gradient == 4.5
    assert snap.geo.turbulence == pytest.approx(0.4)
    assert snap.social.anxiety == pytest.approx(0.3)
    assert event_log.messages() == [
        "[API] Geo-data synced: Temp 4.5°C",
        "[API] Social-sync: Market volatility reflects anxiety at 30.0%",
    ]


def test_price_change_twenty_percent_gives_anxiety_one(store, event_log, make_static_provider):
    social = make_static_provider(SocialReading(price_change_percent=20))

    _sync(store, event_log, social=social).sync_once()

    assert store.read().social.anxiety == 1.0


def test_failure_never_mutates_state(store, event_log, make_failing_provider):
    before = store.read()

    report = _sync(store, event_log, geo=make_failing_provider("geo"), align=True).sync_once()

    assert store.read() == before
    assert report.results == {"geo": False}
    assert not report.ok
    assert event_log.messages() == ["[ERROR] Geo sync failed. Using local resonance buffer."]


def test_failure_in_one_category_does_not_block_the_other(
        store, event_log, make_failing_provider, social_ok
):
    report = _sync(store, event_log, geo=make_failing_provider("geo"), social=social_ok).sync_once()

    assert report.results == {"geo": False, "social": True}
    assert store.read().social.anxiety == pytest.approx(0.3)
    assert store.read().geo.thermal_gradient == 1.2
    assert len(event_log) == 2


def test_unexpected_provider_exception_is_contained(store, event_log, make_failing_provider):
    geo = make_failing_provider("geo", exc=ZeroDivisionError("bug in client"))

    report = _sync(store, event_log, geo=geo).sync_once()

    assert report.results == {"geo": False}
    assert len(event_log) == 1


def test_align_cosmos_only_after_full_success(store, event_log, geo_ok, social_ok):
    report = _sync(store, event_log, geo_ok, social_ok, align=True).sync_once()

    assert report.ok
    assert store.read().cosmos.solar_flux == pytest.approx(150.0)
    assert event_log.messages()[-1] == "[API] Cosmos-layer aligned with solar cycle 25."


def test_results_after_cancel_are_discarded(store, event_log):
    class CancelDuringFetch:
        def __init__(self):
            self.sync = None

        def fetch(self):
            self.sync.cancel()
            return SocialReading(price_change_percent=50)

    provider = CancelDuringFetch()
    sync = _sync(store, event_log, social=provider, align=True)
    provider.sync = sync
    before = store.read()

    report = sync.sync_once()

    assert report.discarded
    assert store.read() == before
    assert len(event_log) == 0


def test_cancelled_sync_skips_providers(store, event_log, geo_ok):
    sync = _sync(store, event_log, geo=geo_ok)
    sync.cancel()

    report = sync.sync_once()

    assert report.discarded
    assert geo_ok.calls == 0


def test_closed_store_drops_reading(store, event_log, geo_ok):
    sync = _sync(store, event_log, geo=geo_ok)
    store.close()

    report = sync.sync_once()

    assert report.discarded
    assert sync.cancelled
    assert len(event_log) == 0


def test_counts_outcomes_in_metrics(store, event_log, geo_ok, make_failing_provider):
    from ibonarium.observability.instrumentation import Instrumentation

    inst = Instrumentation(enabled=True)
    sync = ExternalSync(
        store, event_log, ConstantRandom(0.0),
        geo_provider=geo_ok,
        social_provider=make_failing_provider("social", TransientSyncFailure("social", "timeout")),
        inst=inst,
    )
    sync.sync_once()
    sync.sync_once()

    assert inst.metrics.metrics == {"sync_geo_ok": 2, "sync_social_failed": 2}
