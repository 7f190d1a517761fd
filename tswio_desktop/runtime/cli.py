from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from tswio_desktop.runtime.gui import run_desktop_mode, run_web_mode
from tswio_desktop.runtime.logs import configure_logging
from tswio_desktop.runtime.paths import log_file_path

MODES = {"desktop", "web", "dev-backend"}


def _add_launch_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--port", type=int, help="Backend port (default 4000 or TSWIO_BACKEND_PORT)")
    parser.add_argument("--sidecar", type=Path, help="Path to the backend executable")


def _build_legacy_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="TSW IO desktop launcher")
    _add_launch_args(parser)
    parser.add_argument("--no-splash", action="store_true", help="Skip the loading window")
    return parser


def _build_subcommand_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="TSW IO desktop launcher")
    sub = parser.add_subparsers(dest="mode")

    desktop = sub.add_parser("desktop")
    _add_launch_args(desktop)
    desktop.add_argument("--no-splash", action="store_true", help="Skip the loading window")

    web = sub.add_parser("web")
    _add_launch_args(web)

    dev = sub.add_parser("dev-backend")
    dev.add_argument("--port", type=int)
    dev.add_argument("--warmup", type=float, default=3.0, help="Seconds /api/health answers 503")
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    if argv is None:
        argv = sys.argv[1:]
    if argv and len(argv) > 0 and argv[0] in MODES:
        return _build_subcommand_parser().parse_args(argv)

    # No subcommand: desktop mode.
    args = _build_legacy_parser().parse_args(argv)
    args.mode = "desktop"
    return args


def run_dev_backend_mode(args: argparse.Namespace) -> int:
    """Lazy-import the backend so launcher modes carry no FastAPI import cost."""
    from tswio_desktop.service.dev_backend import run_dev_backend

    return run_dev_backend(port=args.port, warmup_seconds=args.warmup)


def setup_logging() -> None:
    """Log to the data directory when it is writable, else to stdout only."""
    try:
        configure_logging(log_file_path())
    except OSError as e:
        configure_logging(None)
        logging.getLogger(__name__).warning("Startup log file unavailable: %s", e)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging()
    if args.mode == "dev-backend":
        return run_dev_backend_mode(args)
    if args.mode == "web":
        return run_web_mode(port=args.port, sidecar=args.sidecar)
    return run_desktop_mode(port=args.port, sidecar=args.sidecar, splash=not args.no_splash)
