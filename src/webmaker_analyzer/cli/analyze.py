from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from ..analyzer import run_analysis
from ..config import load_settings
from .display import render_run, run_to_payload

_PACKAGE_LOGGER = "webmaker_analyzer"

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    package_logger = logging.getLogger(_PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    if not any(isinstance(handler, RichHandler) for handler in package_logger.handlers):
        package_logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webmaker-analyzer",
        description="Collect scripts, pages, thumbnails, rules and bindings from WebMaker exports.",
    )
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="Directories or .zip files to analyze.",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Result directory (cleared before the run).",
    )
    parser.add_argument(
        "--no-report",
        action="store_true",
        help="Skip the HTML report.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Console log level.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the run summary as JSON instead of a formatted table.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings = load_settings().with_overrides(
        result_dir=args.output,
        log_level=args.log_level,
        generate_report=False if args.no_report else None,
    )
    configure_logging(settings.log_level)

    try:
        run = run_analysis(args.paths, settings)
    except Exception as exc:
        logger.exception("Error during analysis")
        payload = {"error": type(exc).__name__, "message": str(exc)}
        print(json.dumps(payload), file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(run_to_payload(run), indent=2))
    else:
        render_run(run)
    return 0


if __name__ == "__main__":
    sys.exit(main())
