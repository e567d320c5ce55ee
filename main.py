"""Entry point for running the continuous speed tracker."""

from __future__ import annotations

import sys

from speedtracker.cli import run_main


if __name__ == "__main__":
    sys.exit(run_main())
