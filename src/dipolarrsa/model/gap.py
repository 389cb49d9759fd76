"""
Gap & Partition (Data Model)
============================
This module defines the value types the adsorption engine works on.

Why is this file needed?
------------------------
1. Immutability: A Gap is a frozen value. Every round replaces the whole
   Partition, so nothing is ever mutated in place.
2. Vocabulary: Polarities and dipole orientations are closed enums, which
   keeps the deposition table exhaustive and easy to check.

Classes:
    Polarity: Boundary polarity of a gap ('+' or '-').
    Orientation: Orientation of a deposited dipole ('+-' or '-+').
    Gap: One free sub-interval with its two boundary polarities.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Tuple


class Polarity(StrEnum):
    PLUS = "+"
    MINUS = "-"


class Orientation(StrEnum):
    PLUS_MINUS = "+-"
    MINUS_PLUS = "-+"

    @property
    def left(self) -> Polarity:
        """Polarity of the dipole end facing the left child gap."""
        return Polarity.PLUS if self is Orientation.PLUS_MINUS else Polarity.MINUS

    @property
    def right(self) -> Polarity:
        """Polarity of the dipole end facing the right child gap."""
        return Polarity.MINUS if self is Orientation.PLUS_MINUS else Polarity.PLUS


# Length of a deposited dipole
DIPOLE_LENGTH: int = 1


@dataclass(frozen=True)
class Gap:
    """
    A maximal free sub-interval bounded by two polarities.

    The occupied unit segments between gaps are implicit: they are never
    stored, only counted through the number of gaps.
    """
    left: Polarity
    free_length: float
    right: Polarity

    @property
    def can_deposit(self) -> bool:
        """True if a unit dipole still fits into the gap."""
        return self.free_length >= DIPOLE_LENGTH

    def __str__(self) -> str:
        return f"{self.left}[{float(self.free_length):g}]{self.right}"


# Ordered left-to-right decomposition of the domain. Never empty.
Partition = Tuple[Gap, ...]


def initial_partition(length: float) -> Partition:
    """
    Create the starting partition of a domain.

    The whole domain is one gap with a '+' left boundary and a '-' right boundary.

    Args:
        length: Length of the domain.

    Returns:
        Single-gap partition.
    """
    return (Gap(Polarity.PLUS, float(length), Polarity.MINUS),)


def total_free_length(partition: Partition) -> float:
    """Sum of the free lengths of all gaps."""
    return sum(gap.free_length for gap in partition)


def deposited_count(partition: Partition) -> int:
    """Number of dipoles separating the gaps of a partition."""
    return len(partition) - 1
