"""Parsing of the plain-text report printed by the Mirth Connect CLI."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

# A deployed channel row starts with the channel id (UUID shaped) followed by
# its state, e.g. "3a9f1c00-1111-2222-3333-444455556666  Running  Started  ADT".
DEPLOYED_RE = re.compile(r"^[0-9a-f-]{36}\s+[a-zA-Z]+\s+", re.ASCII)
STARTED_RE = re.compile(r"\s+Started\s+", re.ASCII)

# received filtered queued sent errored name
CHANNEL_STAT_RE = re.compile(
    r"^(\d+)\s+(\d+)\s+(\d+)\s+(\d+)\s+(\d+)\s+(.+)$", re.ASCII
)


@dataclass(slots=True)
class ChannelStatus:
    """Deployed/started channel counts for one report."""

    deployed: int = 0
    started: int = 0


@dataclass(slots=True)
class ChannelStat:
    """Message statistics of a single channel."""

    channel: str
    received: float = 0.0
    filtered: float = 0.0
    queued: float = 0.0
    sent: float = 0.0
    errored: float = 0.0
    degraded_fields: int = 0


def _to_float(raw: str) -> Tuple[float, bool]:
    try:
        return float(raw), True
    except ValueError:
        return 0.0, False


def parse_status_line(line: str) -> Optional[bool]:
    """
    Classify a single report line.

    Returns None if the line is not a deployed channel row, otherwise whether
    the channel is started.
    """
    if not DEPLOYED_RE.match(line):
        return None
    return STARTED_RE.search(line) is not None


def parse_channel_stat_line(line: str) -> Optional[ChannelStat]:
    """Extract a ChannelStat from a statistics row, or None if it isn't one."""
    match = CHANNEL_STAT_RE.match(line)
    if not match:
        return None

    values = []
    degraded = 0
    for raw in match.group(1, 2, 3, 4, 5):
        value, ok = _to_float(raw)
        if not ok:
            degraded += 1
        values.append(value)

    received, filtered, queued, sent, errored = values
    return ChannelStat(
        channel=match.group(6),
        received=received,
        filtered=filtered,
        queued=queued,
        sent=sent,
        errored=errored,
        degraded_fields=degraded,
    )


def parse_status(lines: Iterable[str]) -> ChannelStatus:
    status = ChannelStatus()
    for line in lines:
        started = parse_status_line(line)
        if started is None:
            continue
        status.deployed += 1
        if started:
            status.started += 1
    return status


def parse_channel_stats(lines: Iterable[str]) -> List[ChannelStat]:
    """Return the statistics rows of the report in the order they appear."""
    stats = []
    for line in lines:
        stat = parse_channel_stat_line(line)
        if stat is not None:
            stats.append(stat)
    return stats
