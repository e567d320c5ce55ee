"""Static HTML dashboard generation."""

from __future__ import annotations

import logging
from datetime import timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from jinja2 import Environment, PackageLoader, select_autoescape

from .config import AppConfig
from .measurements.models import MeasurementResult, parse_timestamp
from .store import ResultStore

LOGGER = logging.getLogger(__name__)

TEMPLATE_NAME = "report.html"


def _build_environment() -> Environment:
    return Environment(
        loader=PackageLoader("speedtracker", "templates"),
        autoescape=select_autoescape(["html"]),
        keep_trailing_newline=True,
    )


def human_timestamp(raw: str) -> str:
    try:
        return parse_timestamp(raw).astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    except ValueError:
        return raw


class ReportGenerator:
    def __init__(self, config: AppConfig, store: ResultStore):
        self.config = config
        self.store = store
        self.env = _build_environment()

    def render(self, rows: Sequence[MeasurementResult]) -> str:
        data: List[Dict[str, Any]] = [row.to_dict() for row in rows]
        latest = data[-1] if data else None
        template = self.env.get_template(TEMPLATE_NAME)
        return template.render(
            title=self.config.report.title,
            chart_js_url=self.config.report.chart_js_url,
            measurements=data,
            latest=latest,
            last_updated=human_timestamp(latest["timestamp"]) if latest else None,
        )

    def generate(self) -> Optional[Path]:
        """Write the dashboard for the full history; ``None`` when nothing is stored."""

        rows = self.store.read_all()
        if not rows:
            LOGGER.info("No measurements stored yet, report not generated")
            return None

        target = self.config.report_path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.render(rows), encoding="utf-8")
        LOGGER.info("Interactive dashboard generated: %s (%d measurements)", target, len(rows))
        return target
