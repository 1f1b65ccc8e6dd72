"""Configuration loading for the Mirth exporter."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml


DEFAULT_CONFIG_PATHS = (
    Path("/etc/mirth_exporter/config.yaml"),
    Path.home() / ".config" / "mirth_exporter" / "config.yaml",
    Path("config.yaml"),
)

ENV_PREFIX = "MIRTH_EXPORTER_"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


@dataclass
class WebConfig:
    listen_address: str = ":9140"
    telemetry_path: str = "/metrics"


@dataclass
class MirthCliConfig:
    path: str = "./mccommand"
    timeout_seconds: float = 10.0


@dataclass
class AppConfig:
    web: WebConfig = field(default_factory=WebConfig)
    mccli: MirthCliConfig = field(default_factory=MirthCliConfig)
    log_level: str = "INFO"


def _merge_dict(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge override into base dict."""
    for key, value in override.items():
        if (
            key in base
            and isinstance(base[key], dict)
            and isinstance(value, dict)
        ):
            base[key] = _merge_dict(base[key], value)
        else:
            base[key] = value
    return base


def _dataclass_from_dict(datacls, data: Dict[str, Any]):
    field_names = {f.name for f in datacls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
    kwargs = {}
    for key, value in data.items():
        if key in field_names:
            kwargs[key] = value
    return datacls(**kwargs)


def load_config(
    path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> AppConfig:
    """
    Load configuration from YAML, environment and command line overrides.

    Later sources win: YAML files in DEFAULT_CONFIG_PATHS order (or the single
    explicit path), then MIRTH_EXPORTER_* variables, then ``overrides``.
    """
    config_dict: Dict[str, Any] = {}

    paths_to_try = [Path(path)] if path else list(DEFAULT_CONFIG_PATHS)
    if path and not paths_to_try[0].is_file():
        raise ValueError(f"Config file {path} does not exist.")
    for candidate in paths_to_try:
        if candidate.is_file():
            with candidate.open("r", encoding="utf-8") as fh:
                loaded = yaml.safe_load(fh) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"Config file {candidate} must contain a mapping.")
            config_dict = _merge_dict(config_dict, loaded)

    env_override = _load_env_override()
    if env_override:
        config_dict = _merge_dict(config_dict, env_override)

    if overrides:
        config_dict = _merge_dict(config_dict, overrides)

    return build_config(config_dict)


def build_config(data: Dict[str, Any]) -> AppConfig:
    """Build and validate AppConfig from a raw dict."""
    web = _dataclass_from_dict(WebConfig, data.get("web") or {})
    mccli = _dataclass_from_dict(MirthCliConfig, data.get("mccli") or {})
    log_level = str(data.get("log_level", "INFO")).upper()

    if log_level not in LOG_LEVELS:
        raise ValueError(
            f"Invalid log level {log_level!r}; expected one of DEBUG, INFO, WARN, ERROR."
        )
    parse_listen_address(web.listen_address)
    if not str(web.telemetry_path).startswith("/"):
        raise ValueError(f"Metrics path {web.telemetry_path!r} must start with '/'.")
    mccli.timeout_seconds = float(mccli.timeout_seconds)
    if mccli.timeout_seconds <= 0:
        raise ValueError("mccli.timeout_seconds must be positive.")

    return AppConfig(web=web, mccli=mccli, log_level=log_level)


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split "host:port" into its parts; an empty host means all interfaces."""
    host, sep, port = str(address).rpartition(":")
    if not sep or not port.isdigit():
        raise ValueError(f"Invalid listen address {address!r}; expected host:port.")
    port_number = int(port)
    if not 0 < port_number < 65536:
        raise ValueError(f"Invalid port in listen address {address!r}.")
    host = host.strip("[]") or "0.0.0.0"
    return host, port_number


def _load_env_override() -> Dict[str, Any]:
    """Read overrides from environment variables prefixed with MIRTH_EXPORTER_."""
    overrides: Dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        path = key[len(ENV_PREFIX):].lower().split("__")
        _assign_override(overrides, path, value)
    return overrides


def _assign_override(target: Dict[str, Any], path: List[str], value: str) -> None:
    cursor = target
    for segment in path[:-1]:
        cursor = cursor.setdefault(segment, {})
    leaf = path[-1]
    cursor[leaf] = value
