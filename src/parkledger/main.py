# File: src/parkledger/main.py
"""
Main application entry point for the Parking Ledger

Reads commands line by line from a file or standard input and prints
their output on standard output. Logs go to standard error and,
optionally, to a log file.
"""

from typing import List, Optional, TextIO
import argparse
import logging
import sys

from .application.commands import CommandProcessor
from .application.parking_service import ParkingService
from .config import AppConfig
from .presentation.console import ConsoleView


def setup_logging(config: AppConfig) -> logging.Logger:
    """Setup application logging configuration"""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))

    logging.basicConfig(
        level=config.log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )
    return logging.getLogger("parkledger")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parkledger",
        description="Multi-lot parking ledger: entries, exits, histories and billing"
    )
    parser.add_argument(
        "input", nargs="?", type=argparse.FileType("r"), default=None,
        help="command file to read (default: standard input)"
    )
    parser.add_argument("--max-lots", type=int, help="maximum number of lots")
    parser.add_argument("--initial-capacity", type=int, dest="initial_table_capacity",
                        help="initial bucket count of each lot's log table")
    parser.add_argument("--load-factor", type=float, dest="load_factor_threshold",
                        help="load factor above which log tables grow")
    parser.add_argument("--eager-resize", action="store_true", default=None,
                        dest="resize_on_every_insert",
                        help="check the load factor after every insert")
    parser.add_argument("--log-level", help="logging level (default: WARNING)")
    parser.add_argument("--log-file", help="also write logs to this file")
    return parser


def load_config(args: argparse.Namespace) -> AppConfig:
    """Environment first, then command-line flags"""
    return AppConfig.from_env().with_overrides(
        max_lots=args.max_lots,
        initial_table_capacity=args.initial_table_capacity,
        load_factor_threshold=args.load_factor_threshold,
        resize_on_every_insert=args.resize_on_every_insert,
        log_level=args.log_level,
        log_file=args.log_file
    )


def run(config: AppConfig, source: TextIO, sink: TextIO) -> int:
    """Process every command of source, writing output to sink"""
    processor = CommandProcessor(ParkingService(config), ConsoleView())
    for line in processor.run(source):
        sink.write(line + "\n")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
    except ValueError as e:
        parser.error(str(e))

    logger = setup_logging(config)
    logger.info(f"Starting parkledger with {config.to_dict()}")

    source = args.input or sys.stdin
    try:
        return run(config, source, sys.stdout)
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1
    finally:
        if args.input is not None:
            args.input.close()


if __name__ == "__main__":
    sys.exit(main())
