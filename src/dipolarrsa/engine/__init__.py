"""
Adsorption Engine
=================
The single-replica simulation core.

Why is this package needed?
---------------------------
1. Physics: It applies the polarity-dependent deposition rule round by round.
2. Termination: It detects jamming and enforces the round budget.
3. Accounting: It returns the number of deposited dipoles of one replica.

Note: This package is pure Python and knows nothing about replicas, statistics or files.
"""
from dipolarrsa.engine.engine import InvalidArgumentError, PartitionEngine, run
from dipolarrsa.engine.random_source import RandomSource, ReplayExhaustedError, ReplayRandomSource, make_generator

__all__ = [
    "InvalidArgumentError",
    "PartitionEngine",
    "run",
    "RandomSource",
    "ReplayExhaustedError",
    "ReplayRandomSource",
    "make_generator",
]
