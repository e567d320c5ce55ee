"""Tests for the static dashboard generator."""

import json
import re

from speedtracker.report import ReportGenerator, human_timestamp

from conftest import make_result


def _embedded_data(html):
    match = re.search(r"const speedData = (.*?);\n", html)
    assert match, "dataset not embedded"
    return match.group(1)


class TestGenerate:
    def test_empty_store_is_noop(self, config, store):
        generator = ReportGenerator(config, store)
        assert generator.generate() is None
        assert not config.report_path.exists()

    def test_empty_store_keeps_previous_artifact(self, config, store):
        config.report_path.write_text("previous", encoding="utf-8")
        ReportGenerator(config, store).generate()
        assert config.report_path.read_text(encoding="utf-8") == "previous"

    def test_writes_artifact_with_dataset(self, config, store):
        store.append([make_result("2024-01-01T00:00:00Z"), make_result("2024-01-01T00:05:00Z", sinr5g=9.5)])

        target = ReportGenerator(config, store).generate()

        assert target == config.report_path
        html = target.read_text(encoding="utf-8")
        data = json.loads(_embedded_data(html))
        assert [row["timestamp"] for row in data] == ["2024-01-01T00:00:00Z", "2024-01-01T00:05:00Z"]
        assert data[1]["sinr5g"] == 9.5
        assert data[0]["sinr4g"] is None

    def test_regeneration_is_identical(self, config, store):
        store.append([make_result(), make_result("2024-01-02T00:00:00Z", download=75.5)])
        generator = ReportGenerator(config, store)

        first = generator.generate().read_bytes()
        second = generator.generate().read_bytes()

        assert first == second

    def test_summary_uses_latest_row(self, config, store):
        store.append([make_result("2024-01-02T10:30:00Z", download=321.0, sinr5g=None)])
        store.append([make_result("2024-01-01T00:00:00Z", download=1.0)])

        html = ReportGenerator(config, store).generate().read_text(encoding="utf-8")

        assert "321.00 Mbps" in html
        assert "Last updated: 2024-01-02 10:30 UTC" in html
        assert "N/A dB" in html

    def test_summary_latest_by_instant_across_offsets(self, config, store):
        store.append([make_result("2024-01-01T06:00:00Z", download=222.0)])
        store.append([make_result("2024-01-01T10:00:00+05:00", download=111.0)])

        html = ReportGenerator(config, store).generate().read_text(encoding="utf-8")

        assert "222.00 Mbps" in html
        assert "Last updated: 2024-01-01 06:00 UTC" in html


class TestRender:
    def test_empty_render_has_no_chart(self, config, store):
        html = ReportGenerator(config, store).render([])
        assert "No measurements yet." in html
        assert 'id="speedChart"' not in html
        assert _embedded_data(html) == "[]"

    def test_dataset_is_script_safe(self, config, store):
        row = make_result("</script><script>alert(1)</script>")
        html = ReportGenerator(config, store).render([row])
        assert "</script><script>alert(1)" not in html

    def test_chart_library_reference(self, config, store):
        html = ReportGenerator(config, store).render([make_result()])
        assert '<script src="chart.js"></script>' in html


def test_human_timestamp_falls_back_to_raw():
    assert human_timestamp("yesterday") == "yesterday"


def test_human_timestamp_converts_to_utc():
    assert human_timestamp("2024-01-01T10:00:00+05:00") == "2024-01-01 05:00 UTC"
