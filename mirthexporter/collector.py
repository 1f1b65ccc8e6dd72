"""Prometheus collector exposing Mirth Connect channel metrics."""

from __future__ import annotations

import logging
import time
from typing import Iterator, List, Optional

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric
from prometheus_client.registry import Collector, CollectorRegistry

from .fetcher import FetchError, MirthCommandFetcher
from .parser import ChannelStat, ChannelStatus, parse_channel_stats, parse_status
from .telemetry import TelemetryManager

NAMESPACE = "mirth"


def _up(value: Optional[float] = None) -> GaugeMetricFamily:
    return GaugeMetricFamily(
        f"{NAMESPACE}_up",
        "Was the last Mirth query successful.",
        value=value,
    )


def _status_families(status: Optional[ChannelStatus] = None) -> List[Metric]:
    deployed = GaugeMetricFamily(
        f"{NAMESPACE}_channels_deployed",
        "How many channels are deployed.",
        value=status.deployed if status else None,
    )
    started = GaugeMetricFamily(
        f"{NAMESPACE}_channels_started",
        "How many of the deployed channels are started.",
        value=status.started if status else None,
    )
    return [deployed, started]


def _channel_families(stats: Optional[List[ChannelStat]] = None) -> List[Metric]:
    received = CounterMetricFamily(
        f"{NAMESPACE}_messages_received_total",
        "How many messages have been received (per channel).",
        labels=["channel"],
    )
    filtered = CounterMetricFamily(
        f"{NAMESPACE}_messages_filtered_total",
        "How many messages have been filtered (per channel).",
        labels=["channel"],
    )
    queued = GaugeMetricFamily(
        f"{NAMESPACE}_messages_queued",
        "How many messages are currently queued (per channel).",
        labels=["channel"],
    )
    sent = CounterMetricFamily(
        f"{NAMESPACE}_messages_sent_total",
        "How many messages have been sent (per channel).",
        labels=["channel"],
    )
    errored = CounterMetricFamily(
        f"{NAMESPACE}_messages_errored_total",
        "How many messages have errored (per channel).",
        labels=["channel"],
    )
    for stat in stats or []:
        labels = [stat.channel]
        received.add_metric(labels, stat.received)
        filtered.add_metric(labels, stat.filtered)
        queued.add_metric(labels, stat.queued)
        sent.add_metric(labels, stat.sent)
        errored.add_metric(labels, stat.errored)
    return [received, filtered, queued, sent, errored]


class MirthCollector(Collector):
    """Fetches and parses one CLI report per scrape."""

    def __init__(
        self,
        fetcher: MirthCommandFetcher,
        logger: Optional[logging.Logger] = None,
        telemetry: Optional[TelemetryManager] = None,
    ) -> None:
        self.fetcher = fetcher
        self.log = logger or logging.getLogger(__name__)
        self.telemetry = telemetry

    def describe(self) -> Iterator[Metric]:
        """Declare the metric schema without touching the CLI."""
        yield _up()
        yield from _status_families()
        yield from _channel_families()

    def collect(self) -> Iterator[Metric]:
        started_at = time.monotonic()
        try:
            lines = self.fetcher.fetch()
        except FetchError as e:
            self.log.error("Mirth query failed: %s", e)
            self._record_scrape("failure", started_at)
            yield _up(0)
            return

        status = parse_status(lines)
        stats = parse_channel_stats(lines)
        if self.telemetry:
            for stat in stats:
                self.telemetry.record_degraded(stat.degraded_fields, stat.channel)
        self.log.debug(
            "Parsed %d deployed, %d started, %d channel stat rows",
            status.deployed,
            status.started,
            len(stats),
        )
        self._record_scrape("success", started_at)

        yield _up(1)
        yield from _status_families(status)
        yield from _channel_families(stats)

    def _record_scrape(self, outcome: str, started_at: float) -> None:
        if self.telemetry:
            self.telemetry.record_scrape(outcome, time.monotonic() - started_at)


def register_collector(
    registry: CollectorRegistry,
    fetcher: MirthCommandFetcher,
    logger: Optional[logging.Logger] = None,
    telemetry: Optional[TelemetryManager] = None,
) -> MirthCollector:
    collector = MirthCollector(fetcher, logger=logger, telemetry=telemetry)
    registry.register(collector)
    return collector
