"""Measurement orchestration and persistence layer."""

from __future__ import annotations

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from ..store import ResultStore
from .driver import MeasurementDriver
from .models import MeasurementResult

LOGGER = logging.getLogger(__name__)


class MeasurementManager:
    def __init__(self, driver: MeasurementDriver, store: ResultStore):
        self.driver = driver
        self.store = store

    def run_batch(self, count: int = 1) -> List[MeasurementResult]:
        """Measure ``count`` times and store the successful results.

        Returns the rows that were persisted. A storage failure is logged and the
        batch is dropped; :class:`BrowserLaunchError` propagates.
        """

        results = self.driver.run_measurements(count)
        if not results:
            LOGGER.warning("No successful measurements in this batch of %d", count)
            return []
        try:
            self.store.append(results)
        except SQLAlchemyError as exc:
            LOGGER.exception("Error saving %d measurement(s) to the database: %s", len(results), exc)
            return []
        return results
