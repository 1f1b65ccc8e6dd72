"""Tests for the exporter's self-instrumentation."""

import pytest
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

from mirthexporter.telemetry import TelemetryManager


@pytest.fixture
def reader():
    return InMemoryMetricReader()


@pytest.fixture
def telemetry(reader):
    manager = TelemetryManager()
    manager.initialize(metric_readers=[reader])
    yield manager
    manager.shutdown()


def _points(reader, name):
    data = reader.get_metrics_data()
    points = []
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                if metric.name == name:
                    points.extend(metric.data.data_points)
    return points


def test_record_scrape(telemetry, reader):
    telemetry.record_scrape("success", 0.25)
    telemetry.record_scrape("success", 0.5)
    telemetry.record_scrape("failure", 10.0)

    counts = {
        p.attributes["outcome"]: p.value
        for p in _points(reader, "mirth_exporter.scrapes")
    }
    assert counts == {"success": 2, "failure": 1}

    durations = {
        p.attributes["outcome"]: p.count
        for p in _points(reader, "mirth_exporter.scrape.duration")
    }
    assert durations == {"success": 2, "failure": 1}


def test_record_degraded_skips_zero(telemetry, reader):
    telemetry.record_degraded(0, "Lab Results")
    telemetry.record_degraded(2, "ADT Inbound")

    points = _points(reader, "mirth_exporter.degraded_fields")
    assert [(p.attributes["channel"], p.value) for p in points] == [("ADT Inbound", 2)]


def test_uninitialized_manager_is_inert():
    manager = TelemetryManager()

    manager.record_scrape("success", 1.0)
    manager.record_degraded(1, "A")
    manager.shutdown()

    assert manager.meter is None
