"""Application bootstrap helpers."""

from __future__ import annotations

from typing import Optional

from .config import AppConfig, load_config
from .db import init_db
from .exporter import CSVExporter
from .logging_setup import configure_logging
from .measurements.driver import BrowserFactory, MeasurementDriver
from .measurements.manager import MeasurementManager
from .measurements.signal_reader import SignalReader
from .report import ReportGenerator
from .scheduler import SchedulerService
from .store import ResultStore

__version__ = "1.0.0"


class ApplicationContext:
    """Holds shared singletons for the service."""

    def __init__(
        self,
        config: AppConfig,
        browser_factory: Optional[BrowserFactory] = None,
        setup_logging: bool = True,
    ):
        self.config = config
        if setup_logging:
            configure_logging(config)
        self.Session = init_db(config.paths.database)
        self.store = ResultStore(self.Session)
        self.signal_reader = SignalReader(config.signal) if config.signal.enabled else None
        self.driver = MeasurementDriver(config, self.signal_reader, browser_factory=browser_factory)
        self.measurements = MeasurementManager(self.driver, self.store)
        self.reports = ReportGenerator(config, self.store)
        self.exporter = CSVExporter(config, self.store)
        self.scheduler = SchedulerService(config, self.measurements, self.reports, self.exporter)

    def create_web_app(self):
        from .web.app import create_web_app

        return create_web_app(
            config=self.config,
            store=self.store,
            reports=self.reports,
            exporter=self.exporter,
        )


def bootstrap(config_path: Optional[str] = None, **kwargs) -> ApplicationContext:
    """Load configuration and wire dependencies."""

    return ApplicationContext(load_config(config_path), **kwargs)
