"""Shared dataclasses for measurements."""

from __future__ import annotations

import math
import re
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

_NUMBER_PREFIX = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def parse_reading(raw: Any) -> Optional[float]:
    """Parse the leading number of a page or JSON value.

    Placeholders such as ``"---"``, empty text and non-finite values become ``None``.
    """

    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        match = _NUMBER_PREFIX.match(str(raw))
        if not match:
            return None
        value = float(match.group(1))
    return value if math.isfinite(value) else None


def format_timestamp(moment: datetime) -> str:
    """Render ``moment`` as a UTC ISO-8601 string with millisecond precision."""

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(raw: str) -> datetime:
    clean = raw.replace("Z", "+00:00") if raw.endswith("Z") else raw
    parsed = datetime.fromisoformat(clean)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def to_utc_naive(raw: str) -> datetime:
    """UTC instant of an ISO-8601 string, without tzinfo, for storage and ordering."""

    if not isinstance(raw, str):
        raise TypeError(f"timestamp must be a string, got {type(raw).__name__}")
    return parse_timestamp(raw).astimezone(timezone.utc).replace(tzinfo=None)


@dataclass(frozen=True)
class PageReading:
    """Values scraped from the speed-test page once a run completes."""

    download: float
    upload: float
    ping: Optional[float]
    jitter: Optional[float]


@dataclass(frozen=True)
class SignalReading:
    sinr4g: Optional[float]
    sinr5g: Optional[float]


@dataclass(frozen=True)
class MeasurementResult:
    timestamp: str
    download: float
    upload: float
    ping: Optional[float]
    jitter: Optional[float]
    sinr4g: Optional[float] = None
    sinr5g: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        if parse_reading(self.download) is None or parse_reading(self.upload) is None:
            return False
        try:
            to_utc_naive(self.timestamp)
        except (TypeError, ValueError):
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MeasurementResult":
        timestamp = data.get("timestamp")
        if not timestamp:
            raise ValueError("measurement is missing a timestamp")
        try:
            to_utc_naive(str(timestamp))
        except ValueError as exc:
            raise ValueError(f"measurement timestamp {timestamp!r} is not ISO-8601") from exc
        download = parse_reading(data.get("download"))
        upload = parse_reading(data.get("upload"))
        if download is None or upload is None:
            raise ValueError(f"measurement at {timestamp} has no valid download/upload values")
        return cls(
            timestamp=str(timestamp),
            download=download,
            upload=upload,
            ping=parse_reading(data.get("ping")),
            jitter=parse_reading(data.get("jitter")),
            sinr4g=parse_reading(data.get("sinr4g")),
            sinr5g=parse_reading(data.get("sinr5g")),
        )
