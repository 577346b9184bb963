"""Injectable uniform random sources.

Every probabilistic decision in envlab (flag rollout, experiment admission,
variant choice, conversion draws, sample log selection) pulls from a
``RandomSource`` so callers can substitute a deterministic sequence.
"""

from __future__ import annotations

import random
from typing import Iterable, List, Optional, Protocol, runtime_checkable

from envlab.core.config import get_settings


@runtime_checkable
class RandomSource(Protocol):
    """Uniform sampler over [0, 1)."""

    def random(self) -> float: ...


def percent_draw(rng: RandomSource) -> float:
    """Draw a uniform sample in [0, 100)."""
    return rng.random() * 100


def index_draw(rng: RandomSource, size: int) -> int:
    """Draw a uniform index in [0, size)."""
    if size <= 0:
        raise ValueError("size must be positive")
    # Guard against sources that return exactly 1.0
    return min(int(rng.random() * size), size - 1)


class SystemRandomSource:
    """``random.Random`` backed source, optionally seeded."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._random = random.Random(seed)

    def random(self) -> float:
        return self._random.random()


class SequenceRandomSource:
    """Replays a fixed sequence of draws.

    Args:
        values: Draws in [0, 1) returned in order
        cycle: Restart from the beginning when exhausted instead of raising
    """

    def __init__(self, values: Iterable[float], cycle: bool = False):
        self._values: List[float] = list(values)
        for value in self._values:
            if not 0 <= value < 1:
                raise ValueError(f"Sequence values must lie in [0, 1), got {value}")
        self._cycle = cycle
        self._position = 0

    @property
    def consumed(self) -> int:
        return self._position

    def random(self) -> float:
        if self._position >= len(self._values):
            if not self._cycle or not self._values:
                raise IndexError("Random sequence exhausted")
            self._position = 0
        value = self._values[self._position]
        self._position += 1
        return value


def default_random_source() -> SystemRandomSource:
    """Build the process default source from settings."""
    return SystemRandomSource(seed=get_settings().RANDOM_SEED)
