"""One-shot import of the legacy ``results.json`` history."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from .measurements.models import MeasurementResult
from .store import ResultStore

LOGGER = logging.getLogger(__name__)


def load_legacy_results(source: Path) -> List[MeasurementResult]:
    """Read a JSON array of measurement objects, skipping unusable entries."""

    with source.open("r", encoding="utf-8") as handle:
        data = json.load(handle)

    if not isinstance(data, list):
        raise ValueError(f"{source} does not contain a JSON array")

    rows: List[MeasurementResult] = []
    for position, entry in enumerate(data):
        if not isinstance(entry, dict):
            LOGGER.warning("Skipping entry %d: not an object", position)
            continue
        try:
            rows.append(MeasurementResult.from_dict(entry))
        except ValueError as exc:
            LOGGER.warning("Skipping entry %d: %s", position, exc)
    return rows


def import_legacy_results(source: Path, store: ResultStore) -> int:
    if not source.exists():
        LOGGER.info("No %s found to migrate.", source)
        return 0

    rows = load_legacy_results(source)
    if not rows:
        LOGGER.info("%s is empty or has no valid measurements.", source)
        return 0

    written = store.append(rows)
    LOGGER.info("Migrated %d records from %s.", written, source)
    return written
