"""Fixed-interval measurement loop."""

from __future__ import annotations

import logging
import threading
from typing import Optional

from .config import AppConfig
from .exporter import CSVExporter
from .measurements.errors import BrowserLaunchError
from .measurements.manager import MeasurementManager
from .report import ReportGenerator

LOGGER = logging.getLogger(__name__)


class SchedulerService:
    def __init__(
        self,
        config: AppConfig,
        measurement_manager: MeasurementManager,
        reports: ReportGenerator,
        exporter: CSVExporter,
    ) -> None:
        self.config = config
        self.measurements = measurement_manager
        self.reports = reports
        self.exporter = exporter
        self._stop = threading.Event()
        self.cycles = 0

    @property
    def interval_seconds(self) -> float:
        return self.config.scheduler.interval_minutes * 60

    def run_cycle(self) -> None:
        """Measure, regenerate the report and optionally refresh the CSV snapshot."""

        self.measurements.run_batch(self.config.scheduler.batch_size)
        self.reports.generate()
        if self.config.export.write_snapshot:
            target = self.exporter.write_snapshot()
            LOGGER.info("CSV snapshot written to %s", target)

    def run_forever(self, max_cycles: Optional[int] = None) -> None:
        """Loop until :meth:`stop` is called or ``max_cycles`` cycles have run.

        A browser launch failure on the first cycle is treated as a startup failure
        and re-raised. Anything else is logged and the loop carries on.
        """

        LOGGER.info(
            "Speedtest tracker started. Running every %s minutes...",
            self.config.scheduler.interval_minutes,
        )
        while not self._stop.is_set():
            LOGGER.info("--- Periodic speedtest (cycle %d) ---", self.cycles + 1)
            try:
                self.run_cycle()
            except BrowserLaunchError:
                if self.cycles == 0:
                    raise
                LOGGER.exception("Browser could not be launched, retrying next cycle")
            except Exception as exc:  # pylint: disable=broad-except
                LOGGER.exception("Error in measurement cycle: %s", exc)
            self.cycles += 1

            if max_cycles is not None and self.cycles >= max_cycles:
                break
            LOGGER.info("Next test in %s minutes...", self.config.scheduler.interval_minutes)
            self._stop.wait(self.interval_seconds)

        LOGGER.info("Scheduler stopped after %d cycle(s)", self.cycles)

    def stop(self) -> None:
        self._stop.set()
