"""Append-only persistence for measurement results."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from .db import Measurement, get_session
from .measurements.models import MeasurementResult, to_utc_naive

LOGGER = logging.getLogger(__name__)


class ResultStore:
    """Write-once, read-many view over the ``results`` table.

    Rows are never updated or deleted once written.
    """

    def __init__(self, session_factory: sessionmaker):
        self.Session = session_factory

    def append(self, rows: Sequence[MeasurementResult]) -> int:
        """Persist ``rows`` in one transaction and return how many were written."""

        if not rows:
            return 0
        invalid = [row for row in rows if not row.is_valid]
        if invalid:
            raise ValueError(
                f"refusing to store {len(invalid)} measurement(s) "
                "without a valid timestamp, download or upload"
            )

        with get_session(self.Session) as session:
            session.add_all([_to_record(row) for row in rows])
        LOGGER.info("Database updated. Added %d records.", len(rows))
        return len(rows)

    def read_all(self) -> List[MeasurementResult]:
        return self.read_range()

    def read_range(
        self, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> List[MeasurementResult]:
        """Rows measured between ``start`` and ``end`` inclusive, oldest first.

        Naive bounds are taken as UTC.
        """

        query = select(Measurement).order_by(Measurement.recorded_at, Measurement.id)
        if start:
            query = query.where(Measurement.recorded_at >= _utc_naive(start))
        if end:
            query = query.where(Measurement.recorded_at <= _utc_naive(end))
        with get_session(self.Session) as session:
            return [_from_record(record) for record in session.scalars(query)]

    def latest(self, limit: int = 1) -> List[MeasurementResult]:
        """Most recent rows, newest first."""

        query = (
            select(Measurement)
            .order_by(Measurement.recorded_at.desc(), Measurement.id.desc())
            .limit(limit)
        )
        with get_session(self.Session) as session:
            return [_from_record(record) for record in session.scalars(query)]

    def count(self) -> int:
        with get_session(self.Session) as session:
            return session.scalar(select(func.count()).select_from(Measurement)) or 0


def _utc_naive(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def _to_record(row: MeasurementResult) -> Measurement:
    return Measurement(
        timestamp=row.timestamp,
        recorded_at=to_utc_naive(row.timestamp),
        download=row.download,
        upload=row.upload,
        ping=row.ping,
        jitter=row.jitter,
        sinr4g=row.sinr4g,
        sinr5g=row.sinr5g,
    )


def _from_record(record: Measurement) -> MeasurementResult:
    return MeasurementResult(
        timestamp=record.timestamp,
        download=record.download,
        upload=record.upload,
        ping=record.ping,
        jitter=record.jitter,
        sinr4g=record.sinr4g,
        sinr5g=record.sinr5g,
    )
