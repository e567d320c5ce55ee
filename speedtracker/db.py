"""Database utilities and ORM models."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Optional

from sqlalchemy import (
    DateTime,
    Engine,
    Float,
    Integer,
    String,
    create_engine,
    event,
    inspect,
    select,
    text,
    update,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, sessionmaker

from .measurements.models import to_utc_naive

LOGGER = logging.getLogger(__name__)

# Columns added after the first releases; older tables lack them.
NULLABLE_UPGRADE_COLUMNS = {"sinr4g": "REAL", "sinr5g": "REAL", "recorded_at": "DATETIME"}


class Base(DeclarativeBase):
    pass


class Measurement(Base):
    __tablename__ = "results"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[str] = mapped_column(String(32))
    # UTC instant of ``timestamp``; all ordering and range filters use it
    recorded_at: Mapped[Optional[datetime]] = mapped_column(DateTime, index=True, nullable=True)
    download: Mapped[float] = mapped_column(Float)
    upload: Mapped[float] = mapped_column(Float)
    ping: Mapped[Optional[float]] = mapped_column(Float)
    jitter: Mapped[Optional[float]] = mapped_column(Float)
    sinr4g: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    sinr5g: Mapped[Optional[float]] = mapped_column(Float, nullable=True)


def _enable_wal(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA journal_mode=WAL")
    finally:
        cursor.close()


def _upgrade_schema(engine: Engine) -> None:
    table = Measurement.__table__
    existing = {column["name"] for column in inspect(engine).get_columns(table.name)}
    missing = [name for name in NULLABLE_UPGRADE_COLUMNS if name not in existing]
    with engine.begin() as connection:
        for name in missing:
            LOGGER.info("Adding missing column %s to %s", name, table.name)
            connection.execute(
                text(f"ALTER TABLE {table.name} ADD COLUMN {name} {NULLABLE_UPGRADE_COLUMNS[name]}")
            )
        if "recorded_at" in missing:
            connection.execute(
                text(f"CREATE INDEX IF NOT EXISTS ix_{table.name}_recorded_at ON {table.name} (recorded_at)")
            )

        pending = connection.execute(
            select(table.c.id, table.c.timestamp).where(table.c.recorded_at.is_(None))
        ).all()
        for row_id, raw in pending:
            try:
                recorded_at = to_utc_naive(raw)
            except (TypeError, ValueError):
                LOGGER.warning("Row %s has an unparseable timestamp %r", row_id, raw)
                continue
            connection.execute(update(table).where(table.c.id == row_id).values(recorded_at=recorded_at))
        if pending:
            LOGGER.info("Backfilled recorded_at for %d row(s)", len(pending))


def create_db_engine(db_path: Path) -> Engine:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}", future=True)
    event.listen(engine, "connect", _enable_wal)
    return engine


def init_db(db_path: Path) -> sessionmaker:
    """Create the results table if needed and return a session factory."""

    engine = create_db_engine(db_path)
    Base.metadata.create_all(engine)
    _upgrade_schema(engine)
    return sessionmaker(bind=engine, future=True, expire_on_commit=False)


@contextmanager
def get_session(Session: sessionmaker) -> Iterator:
    session = Session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
