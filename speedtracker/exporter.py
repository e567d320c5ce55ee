"""CSV export helpers for measurement data."""

from __future__ import annotations

import csv
import io
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional

from .config import AppConfig
from .measurements.models import MeasurementResult
from .store import ResultStore

HEADER = ["timestamp", "download_mbps", "upload_mbps", "ping_ms", "jitter_ms", "sinr4g_db", "sinr5g_db"]


class CSVExporter:
    def __init__(self, config: AppConfig, store: ResultStore):
        self.config = config
        self.store = store

    def build_csv(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> io.StringIO:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(HEADER)

        for row in self._iter_rows(start, end):
            writer.writerow(row)

        buffer.seek(0)
        return buffer

    def _iter_rows(self, start: Optional[datetime], end: Optional[datetime]) -> Iterator[list]:
        for measurement in self.store.read_range(start, end):
            yield self._row_for_measurement(measurement)

    @staticmethod
    def _row_for_measurement(measurement: MeasurementResult) -> List:
        cells = [
            measurement.download,
            measurement.upload,
            measurement.ping,
            measurement.jitter,
            measurement.sinr4g,
            measurement.sinr5g,
        ]
        return [measurement.timestamp, *(CSVExporter._blank_if_none(value) for value in cells)]

    @staticmethod
    def _blank_if_none(value):
        return "" if value is None else value

    def write_snapshot(self, target: Optional[Path] = None) -> Path:
        buffer = self.build_csv()
        target = target or self.config.csv_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(buffer.getvalue(), encoding="utf-8")
        return target
