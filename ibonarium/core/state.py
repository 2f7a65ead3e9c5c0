from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Iterator, Tuple
# ibonarium/core/state.py

LAYER_NAMES: Tuple[str, ...] = ("time", "cosmos", "geo", "bio", "social", "meta")

SOLAR_FLUX_RANGE = (100.0, 250.0)
MAGNETIC_STRESS_RANGE = (20.0, 100.0)


def to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


# -------------------------
# Layers (immutable records)
# -------------------------
@dataclass(frozen=True)
class TimeLayer:
    pulse: float = 7.83           # Hz, constant baseline
    entropy: float = 0.04
    acceleration: float = 1.0


@dataclass(frozen=True)
class CosmosLayer:
    solar_flux: float = 145.0     # [100, 250]
    gravity_noise: float = 0.12
    orbital_phase: float = 0.45


@dataclass(frozen=True)
class GeoLayer:
    magnetic_stress: float = 32.0  # [20, 100]
    thermal_gradient: float = 1.2
    turbulence: float = 0.15


@dataclass(frozen=True)
class BioLayer:
    growth_rate: float = 1.2
    decay_rate: float = 0.05
    respiration: float = 0.85


@dataclass(frozen=True)
class SocialLayer:
    anxiety: float = 0.2
    connectivity: float = 0.95
    migration: float = 0.1


@dataclass(frozen=True)
class MetaLayer:
    stability_index: float = 0.92
    harmony: float = 0.88
    collapse_risk: float = 0.02


LAYER_TYPES: Dict[str, type] = {
    "time": TimeLayer,
    "cosmos": CosmosLayer,
    "geo": GeoLayer,
    "bio": BioLayer,
    "social": SocialLayer,
    "meta": MetaLayer,
}


def _layer_from_dict(name: str, values: Dict[str, Any]) -> Any:
    layer_type = LAYER_TYPES[name]
    by_key = {}
    for f in fields(layer_type):
        by_key[f.name] = f.name
        by_key[to_camel(f.name)] = f.name

    kwargs = {}
    for key, value in values.items():
        if key not in by_key:
            raise ValueError(f"unknown field {name}.{key}")
        kwargs[by_key[key]] = float(value)
    return layer_type(**kwargs)


class _LayerRecord:
    """Read helpers shared by the live state and its snapshots."""

    def layer(self, name: str) -> Any:
        if name not in LAYER_TYPES:
            raise KeyError(name)
        return getattr(self, name)

    def iter_fields(self) -> Iterator[Tuple[str, str, float]]:
        """Yield (layer, camelCaseField, value) in declaration order."""
        for name in LAYER_NAMES:
            rec = getattr(self, name)
            for f in fields(rec):
                yield name, to_camel(f.name), getattr(rec, f.name)

    def get(self, path: str) -> float:
        """get("cosmos.solarFlux") / get("cosmos.solar_flux")"""
        layer_name, _, field_name = path.partition(".")
        for name, key, value in self.iter_fields():
            if name == layer_name and field_name in (key, _snake(key)):
                return value
        raise KeyError(path)

    def to_dict(self) -> Dict[str, Dict[str, float]]:
        out: Dict[str, Dict[str, float]] = {name: {} for name in LAYER_NAMES}
        for name, key, value in self.iter_fields():
            out[name][key] = value
        return out

    def non_finite_fields(self) -> list[str]:
        return [
            f"{name}.{key}"
            for name, key, value in self.iter_fields()
            if not math.isfinite(value)
        ]


def _snake(camel: str) -> str:
    return "".join("_" + c.lower() if c.isupper() else c for c in camel)


# -------------------------
# Live state
# -------------------------
@dataclass
class LayerState(_LayerRecord):
    """
    The six-layer record owned by StateStore.

    Layers themselves are frozen; the state is mutated in place by
    swapping whole layer records, so a snapshot can share them safely.
    No validation happens here: the coupling function and ExternalSync
    clamp what they write.
    """

    time: TimeLayer = field(default_factory=TimeLayer)
    cosmos: CosmosLayer = field(default_factory=CosmosLayer)
    geo: GeoLayer = field(default_factory=GeoLayer)
    bio: BioLayer = field(default_factory=BioLayer)
    social: SocialLayer = field(default_factory=SocialLayer)
    meta: MetaLayer = field(default_factory=MetaLayer)

    @classmethod
    def default(cls) -> "LayerState":
        return cls()

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, Any]]) -> "LayerState":
        unknown = set(data) - set(LAYER_NAMES)
        if unknown:
            raise ValueError(f"unknown layers: {sorted(unknown)}")
        return cls(**{name: _layer_from_dict(name, values) for name, values in data.items()})

    def set(self, layer_name: str, **changes: float) -> None:
        setattr(self, layer_name, replace(self.layer(layer_name), **changes))

    def copy(self) -> "LayerState":
        return LayerState(**{name: getattr(self, name) for name in LAYER_NAMES})

    def freeze(self) -> "LayerSnapshot":
        return LayerSnapshot(**{name: getattr(self, name) for name in LAYER_NAMES})


@dataclass(frozen=True)
class LayerSnapshot(_LayerRecord):
    """Immutable view handed to sinks; never observes a partial tick."""

    time: TimeLayer
    cosmos: CosmosLayer
    geo: GeoLayer
    bio: BioLayer
    social: SocialLayer
    meta: MetaLayer

    def thaw(self) -> LayerState:
        return LayerState(**{name: getattr(self, name) for name in LAYER_NAMES})
