"""
Deposition Table
================
Splitting rule applied when a dipole lands in a gap.

The outcome depends only on the orientation of the new dipole and on the
polarities at the two ends of the gap. The remaining free length ``g - 1``
is split in half when the gap boundaries have opposite signs, and pushed
entirely to one side when they have the same sign:

    orientation  (L, R)   left child free   right child free
    +-           (+, +)   g - 1             0
    +-           (-, -)   0                 g - 1
    -+           (+, +)   0                 g - 1
    -+           (-, -)   g - 1             0
    any          (+, -)   (g - 1) / 2       (g - 1) / 2
    any          (-, +)   (g - 1) / 2       (g - 1) / 2

The left child always keeps the parent's left boundary and the right child
the parent's right boundary; the inner boundaries are the dipole's own ends.
"""
from __future__ import annotations

from enum import StrEnum
from itertools import product
from typing import Callable, Dict, Tuple

from dipolarrsa.model.gap import DIPOLE_LENGTH, Gap, Orientation, Polarity


class Share(StrEnum):
    """How the remaining free length of a gap is shared between its children."""
    ALL_LEFT = "all_left"
    ALL_RIGHT = "all_right"
    HALVES = "halves"


_SHARES: Dict[Share, Callable[[float], Tuple[float, float]]] = {
    Share.ALL_LEFT: lambda rest: (rest, 0.0),
    Share.ALL_RIGHT: lambda rest: (0.0, rest),
    Share.HALVES: lambda rest: (rest / 2, rest / 2),
}

P, M = Polarity.PLUS, Polarity.MINUS

SPLIT_TABLE: Dict[Tuple[Orientation, Polarity, Polarity], Share] = {
    (Orientation.PLUS_MINUS, P, P): Share.ALL_LEFT,
    (Orientation.PLUS_MINUS, P, M): Share.HALVES,
    (Orientation.PLUS_MINUS, M, P): Share.HALVES,
    (Orientation.PLUS_MINUS, M, M): Share.ALL_RIGHT,
    (Orientation.MINUS_PLUS, P, P): Share.ALL_RIGHT,
    (Orientation.MINUS_PLUS, P, M): Share.HALVES,
    (Orientation.MINUS_PLUS, M, P): Share.HALVES,
    (Orientation.MINUS_PLUS, M, M): Share.ALL_LEFT,
}


def _check_table_complete() -> None:
    missing = [key for key in product(Orientation, Polarity, Polarity) if key not in SPLIT_TABLE]
    if missing:
        raise RuntimeError(f"Deposition table has no entry for {missing}.")


_check_table_complete()


def split_gap(gap: Gap, orientation: Orientation) -> Tuple[Gap, Gap]:
    """
    Deposit one dipole into a gap and return the two child gaps.

    Args:
        gap: Gap receiving the dipole. Must have free length >= 1.
        orientation: Orientation of the deposited dipole.

    Raises:
        ValueError: If the dipole does not fit into the gap.

    Returns:
        Tuple (left child, right child).
    """
    if not gap.can_deposit:
        raise ValueError(f"Gap {gap} is too short to hold a dipole.")

    share = SPLIT_TABLE[(orientation, gap.left, gap.right)]
    left_free, right_free = _SHARES[share](gap.free_length - DIPOLE_LENGTH)

    return (
        Gap(gap.left, left_free, orientation.left),
        Gap(orientation.right, right_free, gap.right),
    )
