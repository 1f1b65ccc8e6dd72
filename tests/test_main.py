"""Tests for the entrypoint script."""

from unittest.mock import Mock, patch

import pytest
from prometheus_client import CollectorRegistry

import mirth_main


def test_cli_overrides():
    args = mirth_main.parse_args([
        "--web.listen-address", "127.0.0.1:9000",
        "--mccli.path", "/opt/mirth/mccommand",
        "--loglevel", "WARN",
    ])

    assert mirth_main.cli_overrides(args) == {
        "web": {"listen_address": "127.0.0.1:9000"},
        "mccli": {"path": "/opt/mirth/mccommand"},
        "log_level": "WARN",
    }


def test_no_flags_no_overrides():
    assert mirth_main.cli_overrides(mirth_main.parse_args([])) == {}


def test_dry_run(clean_env):
    assert mirth_main.main(["--dry-run", "--loglevel", "DEBUG"]) == 0


def test_invalid_configuration(clean_env):
    assert mirth_main.main(["--loglevel", "TRACE"]) == 1


def test_main_starts_server(clean_env):
    registry = CollectorRegistry()
    app = Mock()

    with patch.object(mirth_main, "REGISTRY", registry), \
            patch.object(mirth_main, "TelemetryManager") as telemetry_cls, \
            patch.object(mirth_main, "create_app", return_value=app) as create_app, \
            patch.object(mirth_main.signal, "signal"):
        result = mirth_main.main(["--web.telemetry-path", "/probe"])

    assert result == 0
    telemetry_cls.return_value.initialize.assert_called_once_with()
    create_app.assert_called_once_with("/probe", registry=registry)
    app.run.assert_called_once_with(host="0.0.0.0", port=9140, threaded=True)
    assert "mirth_up" in [family.name for family in registry.collect()]
