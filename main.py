# main.py

"""Entry point for the lease_digest pipeline CLI."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("lease_digest.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(s["id"] for s in Settings.AVAILABLE_SOURCES)

    parser = argparse.ArgumentParser(
        prog="lease_digest",
        description="Long-term car lease offer digest.",
        epilog=f"Available sites: {valid_ids}",
    )
    parser.add_argument(
        "-s",
        "--sites",
        default=None,
        help="Comma-separated site names, abbreviations allowed (default: all).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="table",
        dest="output_format",
        help="Digest output format (default: table).",
    )
    parser.add_argument(
        "-d",
        "--data-dir",
        default=None,
        dest="data_dir",
        help="Custom data directory for snapshots (default: data/).",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        default=False,
        help="Show cumulative run statistics and exit.",
    )
    parser.add_argument(
        "--history",
        type=int,
        default=None,
        metavar="DAYS",
        help="Show the run log for the last DAYS days and exit.",
    )
    parser.add_argument(
        "--cleanup",
        action="store_true",
        default=False,
        help="Prune old history entries and log files and exit.",
    )
    parser.add_argument(
        "--list-sites",
        action="store_true",
        default=False,
        dest="list_sites",
        help="List registered sites and exit.",
    )
    return parser


def _run_pipeline(args: argparse.Namespace) -> None:
    """Run the pipeline once and exit."""
    from src.cli.runner import cli_run

    exit_code = asyncio.run(
        cli_run(
            source_csv=args.sites,
            output_format=args.output_format,
        )
    )
    sys.exit(exit_code)


def main() -> None:
    """Route to the requested command (default: one pipeline run)."""
    log_file = setup_logging()
    logger.info("lease_digest starting — log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    # Optional custom data directory
    if args.data_dir is not None:
        Settings.DATA_DIR = Path(args.data_dir)

    from src.cli import runner

    if args.list_sites:
        for src in Settings.AVAILABLE_SOURCES:
            print(f"{src['id']}\t{src['label']}\t{src['location']}")
        sys.exit(0)
    elif args.stats:
        sys.exit(runner.run_stats())
    elif args.history is not None:
        sys.exit(runner.run_history(args.history))
    elif args.cleanup:
        sys.exit(runner.run_cleanup())
    else:
        _run_pipeline(args)


if __name__ == "__main__":
    main()
