"""Flask application factory for browsing results locally."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from flask import Flask, Response, jsonify, request
from werkzeug.middleware.proxy_fix import ProxyFix

from ..config import AppConfig
from ..exporter import CSVExporter
from ..measurements.models import parse_timestamp
from ..report import ReportGenerator
from ..store import ResultStore

LOGGER = logging.getLogger(__name__)


def create_web_app(
    config: AppConfig,
    store: ResultStore,
    reports: ReportGenerator,
    exporter: CSVExporter,
) -> Flask:
    app = Flask(__name__)

    if config.web.reverse_proxy_headers:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)  # type: ignore

    @app.route("/")
    def index():
        return Response(reports.render(store.read_all()), mimetype="text/html")

    @app.get("/api/measurements")
    def api_measurements():
        start = _parse_filter(request.args.get("start"))
        end = _parse_filter(request.args.get("end"))
        rows = store.read_range(start=start, end=end)
        return jsonify([row.to_dict() for row in rows])

    @app.get("/api/summary/latest")
    def api_latest_summary():
        rows = store.latest(2)
        if not rows:
            return jsonify({"latest": None, "previous": None, "delta": None})
        latest = rows[0].to_dict()
        previous = rows[1].to_dict() if len(rows) > 1 else None
        delta = _calculate_delta(latest, previous) if previous else None
        return jsonify({"latest": latest, "previous": previous, "delta": delta})

    @app.get("/api/export/csv")
    def api_export_csv():
        start = _parse_filter(request.args.get("start"))
        end = _parse_filter(request.args.get("end"))
        buffer = exporter.build_csv(start=start, end=end)
        filename = f"results-{datetime.now(timezone.utc).strftime('%Y%m%dT%H%M%S')}.csv"
        return Response(
            buffer.getvalue(),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )

    return app


def _parse_filter(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    try:
        return parse_timestamp(raw)
    except ValueError:
        LOGGER.warning("Invalid datetime filter: %s", raw)
        return None


def _calculate_delta(latest: dict, previous: dict) -> dict:
    def diff(key):
        if latest.get(key) is None or previous.get(key) is None:
            return None
        return round(latest[key] - previous[key], 2)

    return {key: diff(key) for key in ("download", "upload", "ping", "jitter", "sinr4g", "sinr5g")}
