"""Shared pytest configuration and fixtures."""

import logging
import os
import stat
import sys
from pathlib import Path

import pytest


SAMPLE_REPORT = """Connected to Mirth Connect server @ https://localhost:8443 (3.12.0)
Id                                    Status      Name
3a9f1c00-1111-2222-3333-444455556666  Started     ADT Inbound
8c2d4e11-aaaa-bbbb-cccc-ddddeeeeffff  Started     Lab Results
b7e0f922-0000-4444-8888-cccccccccccc  Stopped     Billing Export
Received	Filtered	Queued		Sent		Errored		Name
120	4	0	116	0	ADT Inbound
10	2	0	8	0	Lab Results
0	0	3	0	1	Billing Export
"""


@pytest.fixture
def logger():
    """Create logger for tests."""
    return logging.getLogger("test.mirthexporter")


@pytest.fixture
def sample_report():
    return SAMPLE_REPORT


@pytest.fixture
def sample_lines():
    return SAMPLE_REPORT.split("\n")


@pytest.fixture
def fake_mccommand(tmp_path):
    """
    Build a fake mccommand executable.

    The script records its arguments and a copy of the query file in
    ``tmp_path`` before running ``body``.
    """
    if sys.platform == "win32":
        pytest.skip("fake mccommand needs a POSIX shell")

    def _make(body: str) -> Path:
        script = tmp_path / "mccommand"
        script.write_text(
            "#!/bin/sh\n"
            f'echo "$@" > "{tmp_path}/args.txt"\n'
            f'cp "$2" "{tmp_path}/query.txt"\n'
            f"{body}\n",
            encoding="utf-8",
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


@pytest.fixture
def report_command(fake_mccommand, tmp_path, sample_report):
    """Fake mccommand printing the sample report."""
    report = tmp_path / "report.txt"
    report.write_text(sample_report, encoding="utf-8")
    return fake_mccommand(f'cat "{report}"')


@pytest.fixture
def clean_env(monkeypatch):
    """Drop MIRTH_EXPORTER_* variables and default config files."""
    from mirthexporter import config

    for key in list(os.environ):
        if key.startswith(config.ENV_PREFIX):
            monkeypatch.delenv(key)
    monkeypatch.setattr(config, "DEFAULT_CONFIG_PATHS", ())
    return monkeypatch
