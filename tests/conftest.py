"""Shared fixtures and browser doubles for speedtracker tests."""

from datetime import datetime, timedelta, timezone

import pytest
import yaml

from speedtracker.config import load_config
from speedtracker.db import init_db
from speedtracker.measurements.browser import BrowserSession, SpeedtestPage
from speedtracker.measurements.models import MeasurementResult, PageReading
from speedtracker.store import ResultStore


class FakePage(SpeedtestPage):
    """Page double; ``outcome`` is a PageReading or an exception raised at ``fail_at``."""

    def __init__(self, outcome, fail_at="poll"):
        self.outcome = outcome
        self.fail_at = fail_at
        self.steps = []
        self.closed = False

    def _step(self, name):
        self.steps.append(name)
        if isinstance(self.outcome, Exception) and self.fail_at == name:
            raise self.outcome

    def open(self):
        self._step("open")

    def start_test(self):
        self._step("start")

    def poll_for_result(self, timeout):
        self._step("poll")
        self.poll_timeout = timeout
        return self.outcome

    def close(self):
        self.closed = True


class FakeBrowser(BrowserSession):
    def __init__(self, pages):
        self.pending = list(pages)
        self.pages = []
        self.closed = False

    def new_page(self):
        page = self.pending.pop(0)
        self.pages.append(page)
        return page

    def close(self):
        self.closed = True


class StepClock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self, start=datetime(2024, 1, 1, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self):
        moment = self.current
        self.current += timedelta(minutes=1)
        return moment


def reading(download=150.2, upload=12.4, ping=18.0, jitter=2.1):
    return PageReading(download=download, upload=upload, ping=ping, jitter=jitter)


def make_result(timestamp="2024-01-01T00:00:00Z", **overrides):
    values = {"download": 150.2, "upload": 12.4, "ping": 18.0, "jitter": 2.1}
    values.update(overrides)
    return MeasurementResult(timestamp=timestamp, **values)


@pytest.fixture
def config(tmp_path):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(
        yaml.safe_dump(
            {
                "speedtest": {"cooldown": 5, "result_timeout": 120},
                "signal": {"enabled": False, "timeout": 1},
                "scheduler": {"interval_minutes": 0},
                "report": {"chart_js_url": "chart.js"},
            }
        ),
        encoding="utf-8",
    )
    return load_config(str(config_file))


@pytest.fixture
def session_factory(config):
    return init_db(config.paths.database)


@pytest.fixture
def store(session_factory):
    return ResultStore(session_factory)
