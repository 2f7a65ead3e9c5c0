#!filepath: tests/engine/test_sync_merge_engine.py
import pytest

from ibonarium.core.random_source import ConstantRandom
from ibonarium.core.readings import GeoReading, SocialReading
from ibonarium.core.state import LayerState
from ibonarium.engines.sync_merge import SyncMergeEngine


@pytest.mark.parametrize(
    "change, expected",
    [
        (20.0, 1.0),
        (-20.0, 1.0),
        (5.0, 0.5),
        (-2.5, 0.25),
        (0.0, 0.0),
        (10.0, 1.0),
    ],
)
def test_volatility_to_anxiety(change, expected):
    assert SyncMergeEngine.volatility_to_anxiety(change) == pytest.approx(expected)


def test_twenty_percent_change_is_exactly_one():
    assert SyncMergeEngine.volatility_to_anxiety(20) == 1.0


def test_merge_geo_sets_thermal_gradient_and_turbulence():
    state = LayerState.default()

    msg = SyncMergeEngine.merge_geo(state, GeoReading(temperature=-3.5, wind_speed=25.0))

    assert state.geo.thermal_gradient == -3.5
    assert state.geo.turbulence == pytest.approx(0.5)
    # magneticStress is evolver-owned
    assert state.geo.magnetic_stress == 32.0
    assert msg == "[API] Geo-data synced: Temp -3.5°C"


def test_merge_social_sets_anxiety_and_connectivity():
    state = LayerState.default()

    msg = SyncMergeEngine.merge_social(state, SocialReading(price_change_percent=-4.0), ConstantRandom(0.5))

    assert state.social.anxiety == pytest.approx(0.4)
    assert state.social.connectivity == pytest.approx(0.9)
    assert state.social.migration == 0.1
    assert msg == "[API] Social-sync: Market volatility reflects anxiety at 40.0%"


def test_align_cosmos_range():
    state = LayerState.default()

    SyncMergeEngine.align_cosmos(state, ConstantRandom(0.0))
    assert state.cosmos.solar_flux == 140.0

    SyncMergeEngine.align_cosmos(state, ConstantRandom(0.999))
    assert 159.0 < state.cosmos.solar_flux < 160.0
