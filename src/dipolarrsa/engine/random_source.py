"""
Random Sources
==============
The engine only needs uniform draws in [0, 1). Anything with a ``random()``
method qualifies: ``numpy.random.Generator`` for production runs,
``random.Random`` if preferred, and ``ReplayRandomSource`` to replay a
recorded sequence of draws.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Optional, Protocol, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    import numpy.typing as npt


@runtime_checkable
class RandomSource(Protocol):
    def random(self) -> float:
        """Return one uniform draw in [0, 1)."""
        ...


class ReplayExhaustedError(IndexError):
    """Raised when a replay source is asked for more draws than it holds."""


class ReplayRandomSource:
    """
    Serve a fixed sequence of draws, in order.

    Useful to replay a run exactly and to count how many draws it consumed.
    """

    def __init__(self, draws: Iterable[float] | npt.NDArray[np.float64]) -> None:
        self._draws = [float(u) for u in draws]
        for u in self._draws:
            if not 0.0 <= u < 1.0:
                raise ValueError(f"Replay draw {u} is outside [0, 1).")
        self.consumed: int = 0

    def random(self) -> float:
        if self.consumed >= len(self._draws):
            raise ReplayExhaustedError(f"Replay source exhausted after {self.consumed} draws.")
        u = self._draws[self.consumed]
        self.consumed += 1
        return u

    @property
    def remaining(self) -> int:
        return len(self._draws) - self.consumed


def make_generator(seed: Optional[int | np.random.SeedSequence] = None) -> np.random.Generator:
    """Create an independent numpy generator (PCG64) from a seed or seed sequence."""
    return np.random.default_rng(seed)
