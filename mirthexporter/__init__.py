"""
Mirth Exporter package.

This package polls the Mirth Connect command line interface (``mccommand``)
on every Prometheus scrape and republishes channel status and message
statistics as metrics. It is used by the ``mirth_main.py`` entrypoint script
but the parser and collector can also be imported on their own.
"""

__all__ = [
    "config",
    "collector",
    "fetcher",
    "parser",
    "telemetry",
    "web",
    "version",
]

version = "0.1.0"
