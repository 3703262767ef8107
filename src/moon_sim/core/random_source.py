"""Injectable random sources so terrain generation can be reproduced."""
from __future__ import annotations

from typing import Optional, Protocol, Sequence

import numpy as np


class RandomSource(Protocol):
    """Anything that yields floats in ``[0, 1)`` one at a time."""

    def next(self) -> float:
        ...


class SeededRandom:
    """Random source backed by :func:`numpy.random.default_rng`.

    Two instances created with the same ``seed`` produce the same sequence.
    ``seed=None`` pulls fresh OS entropy.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def next(self) -> float:
        return float(self._rng.random())


class SequenceRandom:
    """Replays a fixed list of values, wrapping around at the end."""

    def __init__(self, values: Sequence[float]) -> None:
        if len(values) == 0:
            raise ValueError("SequenceRandom needs at least one value")
        for value in values:
            if not 0.0 <= value < 1.0:
                raise ValueError(f"Random value {value!r} outside [0, 1)")
        self._values = [float(v) for v in values]
        self._index = 0

    def next(self) -> float:
        value = self._values[self._index]
        self._index = (self._index + 1) % len(self._values)
        return value


__all__ = ["RandomSource", "SeededRandom", "SequenceRandom"]
