from __future__ import annotations

import logging
import math
from numbers import Integral, Real
from typing import Callable, Optional

from dipolarrsa.engine.random_source import RandomSource, make_generator
from dipolarrsa.model.gap import Gap, Orientation, Partition, deposited_count, initial_partition, total_free_length
from dipolarrsa.model.split_rules import split_gap

logger = logging.getLogger(__name__)


class InvalidArgumentError(ValueError):
    """Raised for simulation parameters outside their admissible range."""


def validate_arguments(initial_length: float, p_plus_minus: float, max_rounds: int) -> None:
    """
    Check the parameters of a single replica.

    Args:
        initial_length: Length of the domain, finite and >= 0.
        p_plus_minus: Probability of a '+-' dipole, in [0, 1].
        max_rounds: Round budget, integer >= 0.

    Raises:
        InvalidArgumentError: If any argument is out of range.
    """
    if not isinstance(initial_length, Real) or not math.isfinite(initial_length) or initial_length < 0:
        raise InvalidArgumentError(f"Initial length must be a finite number >= 0, got {initial_length!r}.")
    validate_scan_arguments(p_plus_minus=p_plus_minus, max_rounds=max_rounds)


def validate_scan_arguments(p_plus_minus: float, max_rounds: int) -> None:
    """Check the parameters shared by every replica of a scan."""
    if not isinstance(p_plus_minus, Real) or not 0.0 <= p_plus_minus <= 1.0:
        raise InvalidArgumentError(f"Probability p_plus_minus must lie in [0, 1], got {p_plus_minus!r}.")
    if isinstance(max_rounds, bool) or not isinstance(max_rounds, Integral) or max_rounds < 0:
        raise InvalidArgumentError(f"max_rounds must be an integer >= 0, got {max_rounds!r}.")


class PartitionEngine:
    """
    Single-replica engine for dipolar random sequential adsorption.

    Each round sweeps every gap of the current partition. A gap with at least
    unit free length receives one dipole and is replaced by two child gaps,
    any other gap is carried over unchanged. Rounds repeat until a round
    leaves the number of gaps unchanged (jamming) or the round budget runs out.
    """

    def __init__(
        self,
        initial_length: float,
        p_plus_minus: float,
        max_rounds: int,
        random_source: Optional[RandomSource] = None,
        callback: Optional[Callable[[int, Partition], None]] = None,
        record_history: bool = False,
    ) -> None:
        """
        Initialize the engine with a single-gap partition.

        Args:
            initial_length: Length of the domain.
            p_plus_minus: Probability of depositing a '+-' dipole.
            max_rounds: Maximum number of rounds.
            random_source: Source of uniform draws in [0, 1). A fresh numpy
                generator is used when omitted.
            callback: Called as ``callback(round_index, partition)`` after every round.
            record_history: Keep every intermediate partition in ``history``.

        Raises:
            InvalidArgumentError: If a parameter is out of range.
        """
        validate_arguments(initial_length, p_plus_minus, max_rounds)

        self.initial_length = float(initial_length)
        self.p_plus_minus = float(p_plus_minus)
        self.max_rounds = int(max_rounds)
        self.random_source: RandomSource = random_source if random_source is not None else make_generator()
        self.callback = callback

        self.partition: Partition = initial_partition(self.initial_length)
        self.round_index: int = 0
        self.jammed: bool = False

        self.record_history = record_history
        self.history: list[Partition] = [self.partition] if record_history else []

    @property
    def deposited(self) -> int:
        """Number of dipoles deposited so far."""
        return deposited_count(self.partition)

    @property
    def finished(self) -> bool:
        return self.jammed or self.round_index >= self.max_rounds

    def choose_orientation(self) -> Orientation:
        """Draw the orientation of the next dipole."""
        if self.random_source.random() < self.p_plus_minus:
            return Orientation.PLUS_MINUS
        return Orientation.MINUS_PLUS

    def _replace(self, gap: Gap) -> tuple[Gap, ...]:
        if not gap.can_deposit:
            return (gap,)
        return split_gap(gap, self.choose_orientation())

    def step(self) -> Partition:
        """
        Run one round on the current partition.

        Every gap is evaluated against the partition as it stood at the start
        of the round, then the whole partition is replaced.

        Returns:
            The new partition.
        """
        snapshot = self.partition
        new_partition: Partition = tuple(child for gap in snapshot for child in self._replace(gap))

        self.round_index += 1
        self.partition = new_partition
        if self.record_history:
            self.history.append(new_partition)

        if len(new_partition) == len(snapshot):
            self.jammed = True
            logger.debug(f"Jammed at round {self.round_index} with {self.deposited} dipoles.")
        elif logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Round {self.round_index}: {len(new_partition)} gaps, "
                f"free length {total_free_length(new_partition):.6g}"
            )

        if self.callback is not None:
            self.callback(self.round_index, new_partition)

        return new_partition

    def run(self) -> int:
        """
        Run rounds until jamming or until the round budget is exhausted.

        Returns:
            Number of deposited dipoles.
        """
        while not self.finished:
            self.step()

        if not self.jammed and self.max_rounds > 0:
            logger.debug(f"Round budget of {self.max_rounds} exhausted before jamming.")

        return self.deposited


def run(
    initial_length: float,
    p_plus_minus: float,
    max_rounds: int,
    random_source: Optional[RandomSource] = None,
) -> int:
    """
    Simulate one replica and return the number of deposited dipoles.

    Args:
        initial_length: Length of the domain, >= 0.
        p_plus_minus: Probability of depositing a '+-' dipole, in [0, 1].
        max_rounds: Maximum number of rounds, >= 0.
        random_source: Source of uniform draws in [0, 1). Defaults to a fresh numpy generator.

    Raises:
        InvalidArgumentError: If a parameter is out of range.

    Returns:
        Number of deposited dipoles.
    """
    engine = PartitionEngine(
        initial_length=initial_length,
        p_plus_minus=p_plus_minus,
        max_rounds=max_rounds,
        random_source=random_source,
    )
    return engine.run()
