"""
Configuration & Path Management
===============================
This module serves as the central registry for default parameters and output paths.

Why is this file needed?
------------------------
1. Defaults: The parameters of the reference scan live in one place instead of
   being repeated in the CLI, the scan settings and the tests.
2. Output: It resolves where result files are written, honouring the
   DIPOLARRSA_OUTPUT_DIR environment variable on clusters and CI.

Exports:
    DEFAULT_P_PLUS_MINUS (float): Probability of a '+-' dipole.
    DEFAULT_LENGTH_START/STOP/STEP (float): Scanned interval lengths.
    DEFAULT_N_REPLICAS (int): Monte Carlo replicas per length.
    DEFAULT_MAX_ROUNDS (int): Round budget of one replica.
    DEFAULT_RESULTS_FILENAME (str): File name of the persisted scan.
"""
import os
from pathlib import Path


DEFAULT_P_PLUS_MINUS: float = 0.5

DEFAULT_LENGTH_START: float = 0.02
DEFAULT_LENGTH_STOP: float = 63.0
DEFAULT_LENGTH_STEP: float = 0.02

DEFAULT_N_REPLICAS: int = 2_000_000
DEFAULT_MAX_ROUNDS: int = 100_000

DEFAULT_RESULTS_FILENAME: str = "results.h5"

OUTPUT_DIR_ENV: str = "DIPOLARRSA_OUTPUT_DIR"


def get_output_path(filename: str = DEFAULT_RESULTS_FILENAME) -> str:
    """
    Get absolute path of an output file.

    The directory is taken from the DIPOLARRSA_OUTPUT_DIR environment variable,
    falling back to the current working directory.
    """
    base_path = Path(os.environ.get(OUTPUT_DIR_ENV, os.getcwd()))
    return str(base_path / filename)
