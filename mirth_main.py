#!/usr/bin/env python3
"""Mirth exporter entrypoint script."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from typing import Any, Dict

from prometheus_client import REGISTRY

from mirthexporter.collector import register_collector
from mirthexporter.config import LOG_LEVELS, load_config, parse_listen_address
from mirthexporter.fetcher import MirthCommandFetcher
from mirthexporter.telemetry import TelemetryManager
from mirthexporter.web import create_app


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Export Mirth Connect channel statistics as Prometheus metrics."
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file.",
    )
    parser.add_argument(
        "--web.listen-address",
        dest="listen_address",
        type=str,
        help="Address to listen on for telemetry (default :9140).",
    )
    parser.add_argument(
        "--web.telemetry-path",
        dest="telemetry_path",
        type=str,
        help="Path under which to expose metrics (default /metrics).",
    )
    parser.add_argument(
        "--mccli.path",
        dest="mccli_path",
        type=str,
        help="Path to mccommand for Mirth Connect CLI (default ./mccommand).",
    )
    parser.add_argument(
        "--loglevel",
        type=str,
        help="Loglevel: DEBUG, INFO, ERROR, WARN (default INFO).",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Load configuration and exit without starting the server.",
    )
    return parser.parse_args(argv)


def cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.listen_address is not None:
        overrides.setdefault("web", {})["listen_address"] = args.listen_address
    if args.telemetry_path is not None:
        overrides.setdefault("web", {})["telemetry_path"] = args.telemetry_path
    if args.mccli_path is not None:
        overrides.setdefault("mccli", {})["path"] = args.mccli_path
    if args.loglevel is not None:
        overrides["log_level"] = args.loglevel
    return overrides


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=LOG_LEVELS.get(level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        config = load_config(args.config, overrides=cli_overrides(args))
    except ValueError as e:
        configure_logging("INFO")
        logging.getLogger("mirth_exporter").error("Invalid configuration: %s", e)
        return 1

    configure_logging(config.log_level)
    log = logging.getLogger("mirth_exporter")

    if args.dry_run:
        log.info("Dry run complete. Configuration loaded successfully.")
        return 0

    telemetry = TelemetryManager()
    telemetry.initialize()

    fetcher = MirthCommandFetcher(config.mccli.path, timeout=config.mccli.timeout_seconds)
    register_collector(
        REGISTRY,
        fetcher,
        logger=logging.getLogger("mirthexporter.collector"),
        telemetry=telemetry,
    )

    def _graceful_shutdown(signum, frame):  # type: ignore[unused-argument]
        log.info("Received signal %s; exiting.", signum)
        telemetry.shutdown()
        sys.exit(0)

    signal.signal(signal.SIGINT, _graceful_shutdown)
    signal.signal(signal.SIGTERM, _graceful_shutdown)

    host, port = parse_listen_address(config.web.listen_address)
    log.info("Starting server: %s", config.web.listen_address)
    app = create_app(config.web.telemetry_path, registry=REGISTRY)
    app.run(host=host, port=port, threaded=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
