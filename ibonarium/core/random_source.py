from __future__ import annotations

import random
from typing import Iterable, List, Protocol


class RandomSource(Protocol):
    """
    Injectable source of draws for the coupling function.

    - random()            -> probability draw in [0, 1)
    - uniform(low, high)  -> jitter value in [low, high]
    """

    def random(self) -> float:
        ...

    def uniform(self, low: float, high: float) -> float:
        ...


class SeededRandom:
    """Production source; same seed => same sequence."""

    def __init__(self, seed: int | None = None):
        self.seed = seed
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()

    def uniform(self, low: float, high: float) -> float:
        return self._rng.uniform(low, high)


class ConstantRandom:
    """Every draw returns the same value (0.0 => no jitter, every check fires)."""

    def __init__(self, value: float = 0.0):
        self.value = value

    def random(self) -> float:
        return self.value

    def uniform(self, low: float, high: float) -> float:
        return self.value


class ReplayRandom:
    """
    Replays a fixed sequence of draws, whatever the call.

    Raises RuntimeError when the script runs out, so a test that consumes
    more draws than it scripted fails loudly instead of looping.
    """

    def __init__(self, draws: Iterable[float]):
        self._draws: List[float] = list(draws)
        self._pos = 0

    @property
    def consumed(self) -> int:
        return self._pos

    def _next(self) -> float:
        if self._pos >= len(self._draws):
            raise RuntimeError(f"replay exhausted after {self._pos} draws")
        value = self._draws[self._pos]
        self._pos += 1
        return value

    def random(self) -> float:
        return self._next()

    def uniform(self, low: float, high: float) -> float:
        return self._next()


class RecordingRandom:
    """Wraps another source and records every value it hands out."""

    def __init__(self, inner: RandomSource):
        self.inner = inner
        self.draws: List[float] = []

    def random(self) -> float:
        value = self.inner.random()
        self.draws.append(value)
        return value

    def uniform(self, low: float, high: float) -> float:
        value = self.inner.uniform(low, high)
        self.draws.append(value)
        return value

    def replay(self) -> ReplayRandom:
        return ReplayRandom(self.draws)
