"""Best-effort cellular signal readout from the local gateway."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from ..config import SignalConfig
from .models import SignalReading, parse_reading

LOGGER = logging.getLogger(__name__)


class SignalReader:
    """Reads 4G/5G SINR from the gateway status API.

    ``read`` never raises: any network, HTTP or payload problem results in ``None``.
    """

    def __init__(self, config: SignalConfig, session: Optional[requests.Session] = None):
        self.config = config
        self.session = session or requests.Session()

    def read(self) -> Optional[SignalReading]:
        try:
            response = self.session.get(self.config.url, timeout=self.config.timeout)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            LOGGER.warning("Signal data unavailable from %s: %s", self.config.url, exc)
            return None

        reading = _convert_gateway_payload(payload)
        if reading is None:
            LOGGER.warning("Gateway response did not contain signal data")
        else:
            LOGGER.debug("Signal reading: 4G %s dB / 5G %s dB", reading.sinr4g, reading.sinr5g)
        return reading


def _convert_gateway_payload(payload: Any) -> Optional[SignalReading]:
    if not isinstance(payload, dict):
        return None
    signal = payload.get("signal")
    if not isinstance(signal, dict):
        return None
    reading = SignalReading(
        sinr4g=_sinr(signal.get("4g")),
        sinr5g=_sinr(signal.get("5g")),
    )
    if reading.sinr4g is None and reading.sinr5g is None:
        return None
    return reading


def _sinr(section: Optional[Dict[str, Any]]) -> Optional[float]:
    if not isinstance(section, dict):
        return None
    return parse_reading(section.get("sinr"))
