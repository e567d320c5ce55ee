"""Tests for the gateway signal reader."""

from unittest.mock import MagicMock

import requests

from speedtracker.config import SignalConfig
from speedtracker.measurements.signal_reader import SignalReader

GATEWAY_PAYLOAD = {
    "signal": {
        "4g": {"sinr": 6, "rsrp": -98, "bands": ["b66"]},
        "5g": {"sinr": 14.5, "rsrp": -85, "bands": ["n41"]},
        "generic": {"registration": "registered"},
    }
}


def _reader(response=None, error=None):
    session = MagicMock()
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = response
    return SignalReader(SignalConfig(url="http://gateway.local/status", timeout=5), session=session), session


def _response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status = MagicMock()
    return response


class TestSignalReader:
    def test_reads_both_generations(self):
        reader, session = _reader(_response(GATEWAY_PAYLOAD))

        result = reader.read()

        assert result.sinr4g == 6.0
        assert result.sinr5g == 14.5
        session.get.assert_called_once_with("http://gateway.local/status", timeout=5)

    def test_missing_5g(self):
        payload = {"signal": {"4g": {"sinr": -2}}}
        reader, _ = _reader(_response(payload))
        result = reader.read()
        assert result.sinr4g == -2.0
        assert result.sinr5g is None

    def test_no_signal_section(self):
        reader, _ = _reader(_response({"device": {}}))
        assert reader.read() is None

    def test_connection_error(self):
        reader, _ = _reader(error=requests.ConnectionError("unreachable"))
        assert reader.read() is None

    def test_timeout(self):
        reader, _ = _reader(error=requests.Timeout("slow"))
        assert reader.read() is None

    def test_http_error(self):
        response = _response(GATEWAY_PAYLOAD)
        response.raise_for_status.side_effect = requests.HTTPError("503")
        reader, _ = _reader(response)
        assert reader.read() is None

    def test_invalid_json(self):
        response = MagicMock()
        response.json.side_effect = ValueError("not json")
        reader, _ = _reader(response)
        assert reader.read() is None

    def test_non_dict_payload(self):
        reader, _ = _reader(_response(["unexpected"]))
        assert reader.read() is None
