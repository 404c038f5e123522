"""Application entry point."""

from __future__ import annotations

import argparse
import logging
import sys

from mateframe.puzzle.loader import parse_query, query_from_argument


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mateframe",
        description="Interactive chess puzzles with branching solutions.",
    )
    parser.add_argument(
        "query",
        nargs="?",
        default="",
        help="page URL or query string, e.g. 'lang=en&fen=...&moves=...'",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="logging verbosity (default: WARNING)",
    )
    parser.add_argument(
        "--post-messages",
        action="store_true",
        help="write host messages to stdout as JSON lines",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Launch the puzzle window."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    from mateframe.ui.bootstrap import run_application
    from mateframe.ui.host import JsonLinesSink

    config = parse_query(query_from_argument(args.query))
    sink = JsonLinesSink(sys.stdout) if args.post_messages else None
    sys.exit(run_application(config, [sys.argv[0]], message_sink=sink))


if __name__ == "__main__":
    main()
