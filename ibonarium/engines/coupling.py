from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Tuple

from ibonarium.core.random_source import RandomSource
from ibonarium.core.state import (
    LayerState,
    MAGNETIC_STRESS_RANGE,
    SOLAR_FLUX_RANGE,
)
from ibonarium.utils.errors import InvariantViolation


@dataclass(frozen=True)
class CouplingParams:
    flux_jitter: float = 1.0
    stress_jitter: float = 0.5
    growth_jitter: float = 0.025
    flare_probability: float = 0.01
    anxiety_alert_probability: float = 0.02
    anxiety_alert_threshold: float = 0.6


DEFAULT_PARAMS = CouplingParams()


@dataclass(frozen=True)
class TickOutcome:
    """Intermediate couplings + the event messages a tick emitted."""

    flux_effect: float
    geo_stress: float
    events: Tuple[str, ...] = ()


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def evolve(
    state: LayerState,
    rng: RandomSource,
    params: CouplingParams = DEFAULT_PARAMS,
) -> TickOutcome:
    """
    Advance all layers by one tick, in place.

    Engine 层（纯逻辑）：不做 IO，不记日志，随机数只来自 rng。

    Fixed order, each stage reading the previous tick for fields it has
    not produced yet:

        cosmos jitter -> cosmos→geo -> geo→bio -> geo+bio→social
        -> social+meta→meta/time -> events

    growthRate and anxiety are deliberately left unclamped.
    Nothing is written unless every new value is finite.
    """
    prev = state.freeze()

    # 1. cosmos jitter (root perturbation)
    solar_flux = clamp(
        prev.cosmos.solar_flux + rng.uniform(-params.flux_jitter, params.flux_jitter),
        *SOLAR_FLUX_RANGE,
    )

    # 2. cosmos -> geo
    flux_effect = (solar_flux - 150.0) / 50.0
    magnetic_stress = clamp(
        prev.geo.magnetic_stress
        + flux_effect * 0.5
        + rng.uniform(-params.stress_jitter, params.stress_jitter),
        *MAGNETIC_STRESS_RANGE,
    )

    # 3. geo -> bio
    geo_stress = magnetic_stress / 50.0
    growth_rate = (
        1.5 - geo_stress * 0.5 + rng.uniform(-params.growth_jitter, params.growth_jitter)
    )

    # 4. geo + bio -> social
    anxiety = (geo_stress + (1.0 - growth_rate)) / 2.0

    # 5. social + meta -> meta / time
    harmony = 1.0 - (anxiety * 0.5 + (1.0 - prev.meta.stability_index) * 0.5)
    entropy = 0.04 + anxiety * 0.1

    candidate = prev.thaw()
    candidate.cosmos = replace(prev.cosmos, solar_flux=solar_flux)
    candidate.geo = replace(prev.geo, magnetic_stress=magnetic_stress)
    candidate.bio = replace(prev.bio, growth_rate=growth_rate)
    candidate.social = replace(prev.social, anxiety=anxiety)
    candidate.meta = replace(prev.meta, harmony=harmony)
    candidate.time = replace(prev.time, entropy=entropy)

    check_invariants(candidate)

    state.cosmos = candidate.cosmos
    state.geo = candidate.geo
    state.bio = candidate.bio
    state.social = candidate.social
    state.meta = candidate.meta
    state.time = candidate.time

    # 6. probabilistic alerts
    events = []
    if rng.random() < params.flare_probability:
        events.append(f"[COSMOS] Solar flare detected. Flux at {solar_flux:.1f} sfu")
    if anxiety > params.anxiety_alert_threshold:
        if rng.random() < params.anxiety_alert_probability:
            events.append(f"[WARN] Social anxiety rising: {anxiety:.2f}")

    return TickOutcome(flux_effect=flux_effect, geo_stress=geo_stress, events=tuple(events))


def check_invariants(state: LayerState) -> None:
    bad = state.non_finite_fields()

    low, high = SOLAR_FLUX_RANGE
    if not low <= state.cosmos.solar_flux <= high:
        bad.append("cosmos.solarFlux")
    low, high = MAGNETIC_STRESS_RANGE
    if not low <= state.geo.magnetic_stress <= high:
        bad.append("geo.magneticStress")

    if bad:
        raise InvariantViolation(sorted(set(bad)))
