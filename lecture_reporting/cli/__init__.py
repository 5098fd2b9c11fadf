#!/usr/bin/env python3
"""
Lecture Reporting administration CLI

Usage:
    python -m lecture_reporting.cli <command> [options]

Commands:
    db          Database operations (init, seed, stats)

Environment:
    DATABASE_URL    SQLAlchemy async connection URL
    LOG_LEVEL       DEBUG|INFO|WARNING|ERROR
"""
import argparse
import logging
import sys
from typing import Optional

from lecture_reporting import __version__
from lecture_reporting.cli.db_commands import DbCommand


def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="lecture-reporting",
        description="Lecture Reporting administration CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s db init
  %(prog)s db seed --password secret
  %(prog)s db stats
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without executing"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Database commands
    db_parser = subparsers.add_parser("db", help="Database operations")
    db_subparsers = db_parser.add_subparsers(dest="db_action")

    db_subparsers.add_parser("init", help="Create missing tables")

    seed_parser = db_subparsers.add_parser("seed", help="Seed demo faculties, programs, users and modules")
    seed_parser.add_argument("--password", help="Password for the demo users (default: password)")

    db_subparsers.add_parser("stats", help="Row counts per table")

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 1

    setup_logging(parsed.log_level)

    command_map = {
        "db": DbCommand,
    }

    if parsed.command in command_map:
        handler = command_map[parsed.command](dry_run=parsed.dry_run)
        return handler.execute(parsed)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
