"""Command line entry points."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from . import ApplicationContext, bootstrap
from .importer import import_legacy_results
from .measurements.errors import BrowserLaunchError

LOGGER = logging.getLogger(__name__)


def _parser(description: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    return parser


def _positive_int(raw: str) -> int:
    value = int(raw)
    if value < 1:
        raise argparse.ArgumentTypeError("count must be at least 1")
    return value


def _bootstrap(args: argparse.Namespace) -> Optional[ApplicationContext]:
    try:
        return bootstrap(args.config)
    except Exception as exc:  # pylint: disable=broad-except
        LOGGER.critical("Startup failed: %s", exc)
        return None


def measure_main(argv: Optional[List[str]] = None) -> int:
    parser = _parser("Run one or more speed tests and store the results")
    parser.add_argument("count", nargs="?", type=_positive_int, default=1, help="Number of tests to run")
    args = parser.parse_args(argv)

    context = _bootstrap(args)
    if context is None:
        return 1
    try:
        stored = context.measurements.run_batch(args.count)
    except BrowserLaunchError as exc:
        LOGGER.critical("Speedtest aborted: %s", exc)
        return 1
    LOGGER.info("%d of %d test(s) stored", len(stored), args.count)
    return 0


def report_main(argv: Optional[List[str]] = None) -> int:
    args = _parser("Generate the HTML dashboard from stored results").parse_args(argv)
    context = _bootstrap(args)
    if context is None:
        return 1
    target = context.reports.generate()
    if target is None:
        print("No measurements found. Run speedtracker-measure first.")
    else:
        print(f"Interactive dashboard generated: {target}")
    return 0


def run_main(argv: Optional[List[str]] = None) -> int:
    args = _parser("Measure and regenerate the dashboard on a fixed interval").parse_args(argv)
    context = _bootstrap(args)
    if context is None:
        return 1

    def _handle_signal(signum, _frame):
        LOGGER.info("Received signal %s, stopping after the current cycle", signum)
        context.scheduler.stop()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    try:
        context.scheduler.run_forever()
    except BrowserLaunchError as exc:
        LOGGER.critical("Critical app failure: %s", exc)
        return 1
    return 0


def import_main(argv: Optional[List[str]] = None) -> int:
    parser = _parser("Import a legacy results.json history into the database")
    parser.add_argument("--source", default="results.json", help="JSON file to import")
    args = parser.parse_args(argv)

    context = _bootstrap(args)
    if context is None:
        return 1
    try:
        written = import_legacy_results(Path(args.source), context.store)
    except ValueError as exc:
        LOGGER.error("Error reading/parsing %s: %s", args.source, exc)
        return 1
    print(f"Imported {written} record(s).")
    return 0


def export_main(argv: Optional[List[str]] = None) -> int:
    parser = _parser("Export stored results as CSV")
    parser.add_argument("--output", default=None, help="Destination file (defaults to the data dir)")
    args = parser.parse_args(argv)

    context = _bootstrap(args)
    if context is None:
        return 1
    target = context.exporter.write_snapshot(Path(args.output) if args.output else None)
    print(f"CSV written to {target}")
    return 0


def serve_main(argv: Optional[List[str]] = None) -> int:
    parser = _parser("Serve the dashboard and JSON API locally")
    parser.add_argument("--host", default=None, help="Override web server host")
    parser.add_argument("--port", type=int, default=None, help="Override web server port")
    parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode")
    args = parser.parse_args(argv)

    context = _bootstrap(args)
    if context is None:
        return 1
    host = args.host or context.config.web.host
    port = args.port or context.config.web.port
    context.create_web_app().run(host=host, port=port, debug=args.debug)
    return 0


def _entry(func) -> None:
    sys.exit(func())


def measure() -> None:
    _entry(measure_main)


def report() -> None:
    _entry(report_main)


def run() -> None:
    _entry(run_main)


def import_results() -> None:
    _entry(import_main)


def export() -> None:
    _entry(export_main)


def serve() -> None:
    _entry(serve_main)
