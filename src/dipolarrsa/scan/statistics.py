from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import TYPE_CHECKING, Any, Dict, Sequence

import numpy as np
import scipy as sp

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class ReplicaStatistics:
    """
    Aggregate of the deposition counts of all replicas at one domain length.

    ``variance`` and ``std_coverage`` are sample estimates (N - 1 in the
    denominator). ``std_coverage`` is the standard deviation of the coverage
    fraction ``count / length`` and is NaN for a zero-length domain.
    """
    length: float
    n_replicas: int
    mean: float
    variance: float
    std_coverage: float
    min_count: int
    max_count: int

    @property
    def mean_coverage(self) -> float:
        """Mean coverage fraction, NaN for a zero-length domain."""
        return self.mean / self.length if self.length > 0 else float("nan")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def failed(cls, length: float) -> ReplicaStatistics:
        """Placeholder row for a length whose replicas could not run."""
        nan = float("nan")
        return cls(length=length, n_replicas=0, mean=nan, variance=nan, std_coverage=nan, min_count=-1, max_count=-1)


def summarize(length: float, counts: Sequence[int] | npt.NDArray[np.int64]) -> ReplicaStatistics:
    """
    Compute the statistics of the deposition counts at one length.

    Args:
        length: Domain length the replicas were run with.
        counts: Deposition count of every replica.

    Raises:
        ValueError: If ``counts`` is empty.

    Returns:
        The aggregated statistics.
    """
    n = np.asarray(counts, dtype=np.float64)
    if n.size == 0:
        raise ValueError(f"No replica counts to summarize for length {length}.")

    min_count, max_count = int(n.min()), int(n.max())

    # A single or constant sample has no spread; describe() would warn on its higher moments
    if min_count == max_count:
        return ReplicaStatistics(
            length=float(length),
            n_replicas=int(n.size),
            mean=float(n[0]),
            variance=0.0,
            std_coverage=0.0 if length > 0 else float("nan"),
            min_count=min_count,
            max_count=max_count,
        )

    description = sp.stats.describe(n, ddof=1)
    if length > 0:
        std_coverage = float(np.std(n / length, ddof=1))
    else:
        std_coverage = float("nan")

    return ReplicaStatistics(
        length=float(length),
        n_replicas=int(description.nobs),
        mean=float(description.mean),
        variance=float(description.variance),
        std_coverage=std_coverage,
        min_count=min_count,
        max_count=max_count,
    )
