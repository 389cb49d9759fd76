"""
Application Entry Point
=======================
This module wires logging, the scan settings and the driver together.

Why is this file needed?
------------------------
It acts as the orchestration root. It:
1. Configures logging (console + optional file).
2. Builds the scan settings, filling in the default output path.
3. Runs the driver, which persists the state after every length.
"""
import logging
from typing import Optional

from dipolarrsa import config
from dipolarrsa.engine import make_generator, run
from dipolarrsa.logging_config import setup_logging
from dipolarrsa.model.state import ScanSettings, ScanState
from dipolarrsa.scan.driver import ParameterScan

logger = logging.getLogger(__name__)


def run_single(length: float, p_plus_minus: float, max_rounds: int, seed: Optional[int] = None) -> int:
    """Run one replica with a seeded generator and log its count."""
    count = run(length, p_plus_minus, max_rounds, random_source=make_generator(seed))
    logger.info(f"Length {length:g}: {count} dipoles deposited.")
    return count


def main(
    settings: Optional[ScanSettings] = None,
    log_level: int = logging.INFO,
    log_file: Optional[str] = None,
) -> ScanState:
    # 1. Setup Logging (Console + Optional File)
    setup_logging(level=log_level, log_file=log_file)

    # 2. Settings with default output file
    if settings is None:
        settings = ScanSettings()
    if settings.output_path is None:
        settings.output_path = config.get_output_path()
    logger.info(f"Results will be written to: {settings.output_path}")

    # 3. Run the scan
    scan = ParameterScan(settings)
    return scan.run()


if __name__ == "__main__":
    main()
