from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from ibonarium.core.random_source import RandomSource, SeededRandom
from ibonarium.core.state import LAYER_NAMES, LayerSnapshot

BIO_STEMS = 40

BASE_OPACITY = 0.3
FOCUS_OPACITY = 0.8
DIMMED_OPACITY = 0.1


@dataclass(frozen=True)
class VisualFrame:
    """
    Visual parameters for one fast tick. A renderer only reads these.
    """

    elapsed: float
    time_scale: float
    cosmos_rotation_y: float
    geo_amplitude: float
    bio_heights: Tuple[float, ...]
    social_rotation: Tuple[float, float]
    social_scale: float
    meta_harmony: float
    camera_x: float
    opacity: Dict[str, float]

    def geo_height(self, x: float, y: float) -> float:
        """Wave displacement of the geo mesh at plane coordinates (x, y)."""
        t = self.elapsed
        return math.sin(x * 0.5 + t) * math.cos(y * 0.5 + t) * self.geo_amplitude

    def bio_stem_y(self, index: int) -> float:
        return -2.0 + self.bio_heights[index] / 2.0

    def meta_alpha(self, distance: float) -> float:
        pulse = math.sin(distance * 0.5 - self.elapsed * 2.0) * 0.5 + 0.5
        return (1.0 - self.meta_harmony) * 0.1 + pulse * 0.05


class VisualMapper:
    """
    Render sink: LayerSnapshot -> VisualFrame.

    Keeps the accumulated rotations between ticks (the scene spins
    faster with solar flux and anxiety) and the layer focus state.
    """

    def __init__(
            self,
            rng: RandomSource | None = None,
            clock: Callable[[], float] = time.monotonic,
            stems: int = BIO_STEMS,
    ):
        self.rng = rng if rng is not None else SeededRandom()
        self._clock = clock
        self._t0 = clock()
        self.stems = stems
        self._cosmos_rotation_y = 0.0
        self._social_rotation = (0.0, 0.0)
        self._opacity = {name: BASE_OPACITY for name in LAYER_NAMES}
        self._lock = threading.Lock()
        self.frame: VisualFrame | None = None
        self.frames = 0

    # --------------------------------------------------
    def update(self, snapshot: LayerSnapshot) -> None:
        t = self._clock() - self._t0
        anxiety = snapshot.social.anxiety

        with self._lock:
            self._cosmos_rotation_y += 0.001 * (snapshot.cosmos.solar_flux / 100.0)
            rx, ry = self._social_rotation
            self._social_rotation = (rx + 0.01 * anxiety, ry + 0.012 * anxiety)

            self.frame = VisualFrame(
                elapsed=t,
                time_scale=1.0 + math.sin(t * snapshot.time.pulse) * 0.1,
                cosmos_rotation_y=self._cosmos_rotation_y,
                geo_amplitude=snapshot.geo.magnetic_stress / 20.0,
                bio_heights=tuple(
                    snapshot.bio.growth_rate * (1.0 + math.sin(t + i))
                    for i in range(self.stems)
                ),
                social_rotation=self._social_rotation,
                social_scale=1.0 + self.rng.random() * 0.05 * anxiety,
                meta_harmony=snapshot.meta.harmony,
                camera_x=math.sin(t * 0.2) * 0.5,
                opacity=dict(self._opacity),
            )
            self.frames += 1

    # --------------------------------------------------
    def highlight(self, layer: str) -> None:
        if layer not in LAYER_NAMES:
            raise KeyError(layer)
        with self._lock:
            self._opacity = {
                name: FOCUS_OPACITY if name == layer else DIMMED_OPACITY
                for name in LAYER_NAMES
            }

    def reset_highlight(self) -> None:
        with self._lock:
            self._opacity = {name: BASE_OPACITY for name in LAYER_NAMES}

    def close(self) -> None:
        pass
