"""Command-line interface."""
import argparse
import logging
import sys
from typing import Optional, Sequence

from dipolarrsa import config
from dipolarrsa.main import main, run_single
from dipolarrsa.logging_config import setup_logging
from dipolarrsa.model.state import ScanSettings


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dipolarrsa",
        description="Random sequential adsorption of unit dipoles on a finite interval",
    )
    parser.add_argument("--log-level", type=str, default="INFO", help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument("--log-file", type=str, default=None, help="Optional log file")

    sub = parser.add_subparsers(dest="command", required=True)

    single = sub.add_parser("single", help="Run one replica and print the number of deposited dipoles")
    single.add_argument("--length", type=float, required=True, help="Interval length")
    single.add_argument("--p", type=float, default=config.DEFAULT_P_PLUS_MINUS, help="Probability of a '+-' dipole")
    single.add_argument("--max-rounds", type=int, default=config.DEFAULT_MAX_ROUNDS, help="Round budget")
    single.add_argument("--seed", type=int, default=None, help="Random seed")

    scan = sub.add_parser("scan", help="Scan interval lengths and aggregate replica statistics")
    scan.add_argument("--start", type=float, default=config.DEFAULT_LENGTH_START, help="First interval length")
    scan.add_argument("--stop", type=float, default=config.DEFAULT_LENGTH_STOP, help="Last interval length")
    scan.add_argument("--step", type=float, default=config.DEFAULT_LENGTH_STEP, help="Length step")
    scan.add_argument("--replicas", type=int, default=config.DEFAULT_N_REPLICAS, help="Replicas per length")
    scan.add_argument("--p", type=float, default=config.DEFAULT_P_PLUS_MINUS, help="Probability of a '+-' dipole")
    scan.add_argument("--max-rounds", type=int, default=config.DEFAULT_MAX_ROUNDS, help="Round budget per replica")
    scan.add_argument("--seed", type=int, default=None, help="Seed of the whole scan")
    scan.add_argument("--workers", type=int, default=1, help="Worker processes")
    scan.add_argument("--output", type=str, default=None, help="HDF5 result file")
    scan.add_argument("--plot", action="store_true", help="Plot coverage statistics when done")

    return parser


def cli(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = getattr(logging, args.log_level.upper(), logging.INFO)

    try:
        if args.command == "single":
            setup_logging(level=level, log_file=args.log_file, stream=sys.stderr)
            print(run_single(args.length, args.p, args.max_rounds, seed=args.seed))
            return 0

        settings = ScanSettings.from_range(
            args.start, args.stop, args.step,
            p_plus_minus=args.p,
            n_replicas=args.replicas,
            max_rounds=args.max_rounds,
            seed=args.seed,
            workers=args.workers,
            output_path=args.output,
        )
        state = main(settings, log_level=level, log_file=args.log_file)
        if args.plot:
            state.plot()
        return 0

    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(cli())
