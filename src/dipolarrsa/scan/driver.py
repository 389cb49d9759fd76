from __future__ import annotations

import logging
import math
from concurrent.futures import Executor, ProcessPoolExecutor
from typing import TYPE_CHECKING, Callable, Optional

import numpy as np

from dipolarrsa.engine.engine import InvalidArgumentError, run, validate_arguments, validate_scan_arguments
from dipolarrsa.engine.random_source import make_generator
from dipolarrsa.model.io import IOManager
from dipolarrsa.model.state import ScanSettings, ScanState
from dipolarrsa.scan.statistics import ReplicaStatistics, summarize

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)

# Replicas sharing one random stream. Fixed so results do not depend on the worker count.
REPLICA_CHUNK: int = 10_000


def run_replica_chunk(
    length: float,
    p_plus_minus: float,
    max_rounds: int,
    n_replicas: int,
    seed_sequence: np.random.SeedSequence,
) -> npt.NDArray[np.int64]:
    """
    Run consecutive replicas on one random stream.

    Top-level so it can be shipped to worker processes.
    """
    rng = make_generator(seed_sequence)
    counts = np.empty(n_replicas, dtype=np.int64)
    for i in range(n_replicas):
        counts[i] = run(length, p_plus_minus, max_rounds, random_source=rng)
    return counts


class ParameterScan:
    """
    Driver scanning the domain length.

    For every length the engine is run ``n_replicas`` times, the counts are
    summarized and the state is written to disk. Replicas are split into
    chunks of ``REPLICA_CHUNK``; chunk ``c`` of length ``i`` draws from the seed
    sequence with the scan entropy and spawn key ``(i, c)``. A seeded scan is
    therefore reproducible, repeated runs of one scan give the same numbers,
    and the worker count does not matter.
    """

    def __init__(
        self,
        settings: ScanSettings,
        state: Optional[ScanState] = None,
        on_progress: Optional[Callable[[int, str], None]] = None,
    ) -> None:
        """
        Initialize the scan.

        Args:
            settings: Scan parameters.
            state: Container receiving the results. A fresh one is created when omitted.
            on_progress: Called as ``on_progress(percentage, message)`` after every length.

        Raises:
            InvalidArgumentError: If a parameter shared by all replicas is invalid.
        """
        validate_scan_arguments(p_plus_minus=settings.p_plus_minus, max_rounds=settings.max_rounds)
        if isinstance(settings.n_replicas, bool) or not isinstance(settings.n_replicas, int) or settings.n_replicas < 1:
            raise InvalidArgumentError(f"n_replicas must be an integer >= 1, got {settings.n_replicas!r}.")
        if not isinstance(settings.workers, int) or settings.workers < 1:
            raise InvalidArgumentError(f"workers must be an integer >= 1, got {settings.workers!r}.")
        if not settings.lengths:
            raise InvalidArgumentError("No lengths to scan.")

        self.settings = settings
        self.state = state if state is not None else ScanState(settings=settings)
        self.state.settings = settings
        self.on_progress = on_progress

        # Fixed once, so every run of this scan draws the same streams
        self._entropy = np.random.SeedSequence(settings.seed).entropy
        logger.debug(f"Scan seed entropy: {self._entropy}")

    def _chunks(self, index: int) -> list[tuple[int, np.random.SeedSequence]]:
        n_chunks = math.ceil(self.settings.n_replicas / REPLICA_CHUNK)
        seeds = [np.random.SeedSequence(self._entropy, spawn_key=(index, chunk)) for chunk in range(n_chunks)]
        sizes = [REPLICA_CHUNK] * (n_chunks - 1)
        sizes.append(self.settings.n_replicas - REPLICA_CHUNK * (n_chunks - 1))
        return list(zip(sizes, seeds))

    def run_length(self, index: int, executor: Optional[Executor] = None) -> ReplicaStatistics:
        """
        Run all replicas of one scanned length.

        Args:
            index: Position of the length in ``settings.lengths``.
            executor: Pool running the chunks. Chunks run in this process when omitted.

        Raises:
            InvalidArgumentError: If the length is invalid.

        Returns:
            Statistics of the replica counts.
        """
        s = self.settings
        length = s.lengths[index]
        validate_arguments(length, s.p_plus_minus, s.max_rounds)

        chunks = self._chunks(index)
        if executor is None:
            parts = [run_replica_chunk(length, s.p_plus_minus, s.max_rounds, n, seed) for n, seed in chunks]
        else:
            futures = [
                executor.submit(run_replica_chunk, length, s.p_plus_minus, s.max_rounds, n, seed)
                for n, seed in chunks
            ]
            parts = [future.result() for future in futures]

        return summarize(length, np.concatenate(parts))

    def _run_all(self, executor: Optional[Executor]) -> None:
        total = len(self.settings.lengths)
        for index, length in enumerate(self.settings.lengths):
            try:
                stats = self.run_length(index, executor=executor)
                self.state.record(stats)
                logger.debug(f"Length {length:g}: mean {stats.mean:.6g}, variance {stats.variance:.6g}")
            except InvalidArgumentError as e:
                logger.error(f"Skipping length {length!r}: {e}")
                self.state.record_failure(length)

            if self.settings.output_path:
                IOManager.save_scan(self.state, self.settings.output_path)

            percentage = int(100 * self.state.progress)
            msg = f"{percentage} % ... ({index + 1}/{total}, length {length:g})"
            logger.info(msg)
            if self.on_progress is not None:
                self.on_progress(percentage, msg)

    def run(self) -> ScanState:
        """
        Scan every length in order.

        A length that fails validation is logged, recorded as a failed row and
        skipped; the other lengths still run.

        Returns:
            The scan state holding one row per length.
        """
        s = self.settings
        logger.info(
            f"Starting scan: {len(s.lengths)} lengths, {s.n_replicas} replicas, "
            f"p(+-)={s.p_plus_minus:g}, max_rounds={s.max_rounds}, workers={s.workers}"
        )
        self.state.reset()

        if s.workers == 1:
            self._run_all(executor=None)
        else:
            with ProcessPoolExecutor(max_workers=s.workers) as executor:
                self._run_all(executor=executor)

        if self.state.failed_lengths:
            logger.warning(f"{len(self.state.failed_lengths)} lengths failed: {self.state.failed_lengths}")
        logger.info("Scan finished.")
        return self.state
