"""
Scan State (Data Model)
=======================
This module defines the data structures of a parameter scan.

Why is this file needed?
------------------------
1. Settings: It holds every parameter of a scan in one place, so the CLI,
   the driver and the persistence layer agree on them.
2. Persistence: ScanState is what gets serialized after every scanned length.
3. Decoupling: The driver writes to this object; IO and plotting read from it.

Classes:
    ScanSettings: Parameters of a scan.
    ScanState: Settings plus the statistics collected so far.
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Optional, TYPE_CHECKING

import numpy as np

from dipolarrsa import config
from dipolarrsa.scan.statistics import ReplicaStatistics

if TYPE_CHECKING:
    import numpy.typing as npt
    from matplotlib.figure import Figure

logger = logging.getLogger(__name__)


def length_grid(start: float, stop: float, step: float) -> list[float]:
    """
    Evenly spaced lengths from start to stop, both included.

    Args:
        start: First length.
        stop: Last length (included when it lies on the grid).
        step: Spacing, > 0.

    Raises:
        ValueError: If step is not positive or stop < start.
    """
    if step <= 0:
        raise ValueError(f"Length step must be positive, got {step}.")
    if stop < start:
        raise ValueError(f"Length range is empty: start {start} > stop {stop}.")

    n_steps = int(np.floor((stop - start) / step + 1e-9))
    grid = start + step * np.arange(n_steps + 1)
    # Round away the accumulated float error of the step multiples
    return [float(x) for x in np.round(grid, 12)]


def _default_lengths() -> list[float]:
    return length_grid(config.DEFAULT_LENGTH_START, config.DEFAULT_LENGTH_STOP, config.DEFAULT_LENGTH_STEP)


@dataclass
class ScanSettings:
    p_plus_minus: float = config.DEFAULT_P_PLUS_MINUS
    lengths: list[float] = field(default_factory=_default_lengths)
    n_replicas: int = config.DEFAULT_N_REPLICAS
    max_rounds: int = config.DEFAULT_MAX_ROUNDS
    seed: Optional[int] = None
    workers: int = 1
    output_path: Optional[str] = None

    @classmethod
    def from_range(cls, start: float, stop: float, step: float, **kwargs) -> ScanSettings:
        """Settings scanning the lengths start, start + step, ..., stop."""
        return cls(lengths=length_grid(start, stop, step), **kwargs)


@dataclass
class ScanState:
    """
    Container of a running or finished scan.
    Rows of ``results`` follow the order of ``settings.lengths``.
    """
    settings: ScanSettings = field(default_factory=ScanSettings)
    results: list[ReplicaStatistics] = field(default_factory=list)
    failed_lengths: list[float] = field(default_factory=list)

    def reset(self) -> None:
        """Clear collected results, keep the settings."""
        self.results = []
        self.failed_lengths = []
        logger.info("Scan state has been reset.")

    def record(self, stats: ReplicaStatistics) -> None:
        self.results.append(stats)

    def record_failure(self, length: float) -> None:
        self.failed_lengths.append(length)
        self.results.append(ReplicaStatistics.failed(length))

    @property
    def completed(self) -> int:
        return len(self.results)

    @property
    def progress(self) -> float:
        """Fraction of scanned lengths already processed."""
        total = len(self.settings.lengths)
        return self.completed / total if total else 1.0

    def _column(self, name: str) -> npt.NDArray[np.float64]:
        return np.array([getattr(row, name) for row in self.results], dtype=np.float64)

    @property
    def lengths(self) -> npt.NDArray[np.float64]:
        return self._column("length")

    @property
    def means(self) -> npt.NDArray[np.float64]:
        return self._column("mean")

    @property
    def variances(self) -> npt.NDArray[np.float64]:
        return self._column("variance")

    @property
    def std_coverages(self) -> npt.NDArray[np.float64]:
        return self._column("std_coverage")

    def plot(self, show: bool = True) -> Figure:
        """
        Plot the mean coverage and its dispersion against the domain length.

        Args:
            show: Call ``plt.show()`` after drawing.

        Returns:
            The matplotlib figure.
        """
        import matplotlib.pyplot as plt

        lengths = self.lengths
        with np.errstate(divide="ignore", invalid="ignore"):
            coverage = np.where(lengths > 0, self.means / lengths, np.nan)

        plt.rcParams["figure.constrained_layout.use"] = True
        fig, (ax_cov, ax_std) = plt.subplots(2, 1, sharex=True, figsize=(7, 7))

        ax_cov.plot(lengths, coverage, 'b', lw=1.5)
        ax_cov.set_ylabel("Mean coverage fraction")
        ax_cov.set_title(f"Dipolar RSA, p(+-) = {self.settings.p_plus_minus:g}")

        ax_std.plot(lengths, self.std_coverages, 'r', lw=1.5)
        ax_std.set_xlabel("Interval length")
        ax_std.set_ylabel("Std of coverage fraction")

        for ax in (ax_cov, ax_std):
            ax.grid(visible=True, which='major', axis='both', linestyle='-', color='gray', lw=0.5)
            ax.minorticks_on()
            ax.grid(visible=True, which='minor', axis='both', linestyle=':', color='gray', lw=0.5)

        if show:
            plt.show()
        return fig
