"""Configuration loading helpers for the speed tracker."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

DEFAULT_CONFIG_NAME = "config.yaml"


@dataclass
class PathsConfig:
    data_dir: Path
    logs_dir: Path
    output_dir: Path

    @property
    def database(self) -> Path:
        return self.data_dir / "speedtest.db"


@dataclass
class SpeedtestConfig:
    url: str = "https://openspeedtest.com/"
    headless: bool = True
    window_size: str = "1920,1080"
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    navigation_timeout: float = 60
    start_timeout: float = 30
    result_timeout: float = 120
    poll_interval: float = 1
    cooldown: float = 5
    start_button_id: str = "startButtonDesk"
    download_id: str = "downResult"
    upload_id: str = "upResultC2"
    ping_id: str = "pingResult"
    jitter_id: str = "jitterResultC3"


@dataclass
class SignalConfig:
    enabled: bool = True
    url: str = "http://192.168.12.1/TMI/v1/gateway?get=all"
    timeout: float = 5


@dataclass
class SchedulerConfig:
    interval_minutes: float = 5
    batch_size: int = 1


@dataclass
class ReportConfig:
    filename: str = "index.html"
    title: str = "Internet Speed Test"
    chart_js_url: str = "https://cdn.jsdelivr.net/npm/chart.js"


@dataclass
class ExportConfig:
    csv_name: str = "results.csv"
    write_snapshot: bool = False


@dataclass
class WebConfig:
    host: str = "127.0.0.1"
    port: int = 8000
    reverse_proxy_headers: bool = False


@dataclass
class LoggingConfig:
    level: str = "INFO"
    filename: str = "speedtracker.log"
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 5
    console: bool = True
    # third-party loggers held at INFO or above
    quiet: List[str] = field(default_factory=lambda: ["selenium", "urllib3"])


@dataclass
class AppConfig:
    root_dir: Path
    paths: PathsConfig
    speedtest: SpeedtestConfig = field(default_factory=SpeedtestConfig)
    signal: SignalConfig = field(default_factory=SignalConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    web: WebConfig = field(default_factory=WebConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @property
    def report_path(self) -> Path:
        return self.paths.output_dir / self.report.filename

    @property
    def csv_path(self) -> Path:
        return self.paths.data_dir / self.export.csv_name


def _as_path(base: Path, maybe_path: Optional[str]) -> Path:
    if not maybe_path:
        raise ValueError("Path configuration entries cannot be empty")
    path = (base / maybe_path).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load application configuration from a YAML file.

    An explicitly requested file must exist. Without a path, ``config.yaml`` in the
    working directory is used when present and built-in defaults otherwise.
    """

    if path:
        source_path = Path(path).resolve()
        if not source_path.exists():
            raise FileNotFoundError(f"Missing configuration file at {source_path}")
    else:
        source_path = Path.cwd() / DEFAULT_CONFIG_NAME

    root_dir = source_path.parent
    data = {}
    if source_path.exists():
        with source_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}

    paths_data = data.get("paths") or {}
    paths = PathsConfig(
        data_dir=_as_path(root_dir, paths_data.get("data_dir", "data")),
        logs_dir=_as_path(root_dir, paths_data.get("logs_dir", "logs")),
        output_dir=_as_path(root_dir, paths_data.get("output_dir", "public")),
    )

    return AppConfig(
        root_dir=root_dir,
        paths=paths,
        speedtest=SpeedtestConfig(**(data.get("speedtest") or {})),
        signal=SignalConfig(**(data.get("signal") or {})),
        scheduler=SchedulerConfig(**(data.get("scheduler") or {})),
        report=ReportConfig(**(data.get("report") or {})),
        export=ExportConfig(**(data.get("export") or {})),
        web=WebConfig(**(data.get("web") or {})),
        logging=LoggingConfig(**(data.get("logging") or {})),
    )
