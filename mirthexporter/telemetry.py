import logging
from typing import Optional, Sequence

from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, Resource

log = logging.getLogger(__name__)

class TelemetryManager:
    """Manages OpenTelemetry setup and the exporter's own instruments."""

    def __init__(self, service_name: str = "mirth_exporter"):
        self.service_name = service_name
        self.provider = None
        self.meter = None

        # Metrics
        self.scrape_counter = None
        self.scrape_duration = None
        self.degraded_counter = None

    def initialize(self, metric_readers: Optional[Sequence[MetricReader]] = None) -> None:
        """
        Create the MeterProvider and instruments.

        Without explicit readers a PrometheusMetricReader is used, which
        publishes into the default prometheus_client registry served on the
        metrics endpoint.
        """
        try:
            resource = Resource(attributes={SERVICE_NAME: self.service_name})
            if metric_readers is None:
                metric_readers = [PrometheusMetricReader()]

            # Kept local rather than installed as the global provider.
            self.provider = MeterProvider(resource=resource, metric_readers=list(metric_readers))
            self.meter = self.provider.get_meter(self.service_name)
            self._create_instruments()

            log.info("Telemetry initialized.")
        except Exception as e:
            log.error("Failed to initialize telemetry: %s", e)

    def _create_instruments(self) -> None:
        if not self.meter:
            return

        self.scrape_counter = self.meter.create_counter(
            "mirth_exporter.scrapes",
            description="Number of scrapes of the Mirth Connect CLI",
        )
        self.scrape_duration = self.meter.create_histogram(
            "mirth_exporter.scrape.duration",
            unit="s",
            description="Time spent fetching and parsing the CLI report",
        )
        self.degraded_counter = self.meter.create_counter(
            "mirth_exporter.degraded_fields",
            description="Channel statistic fields that could not be parsed and were reported as 0",
        )

    def record_scrape(self, outcome: str, duration: float) -> None:
        if self.scrape_counter:
            self.scrape_counter.add(1, {"outcome": outcome})
        if self.scrape_duration:
            self.scrape_duration.record(duration, {"outcome": outcome})

    def record_degraded(self, count: int, channel: str) -> None:
        if self.degraded_counter and count:
            self.degraded_counter.add(count, {"channel": channel})

    def shutdown(self) -> None:
        if self.provider:
            self.provider.shutdown()
