"""Pytest configuration and fixtures."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

import pytest

from railreport.config import get_settings
from railreport.logging import configure_logging, run_id_ctx

if TYPE_CHECKING:
    from collections.abc import Generator

_CREDENTIAL_VARS = (
    "TESTRAIL_URL",
    "TESTRAIL_UN",
    "TESTRAIL_PW",
    "RAILREPORT_URL",
    "RAILREPORT_USERNAME",
    "RAILREPORT_PASSWORD",
    "RAILREPORT_DEBUG",
    "RAILREPORT_MAX_ATTEMPTS",
)


@pytest.fixture(autouse=True)
def log_stream() -> Generator[io.StringIO, None, None]:
    """Send logs to an in-memory stream at DEBUG so every log call runs."""
    stream = io.StringIO()
    configure_logging(log_level="DEBUG", json_format=True, stream=stream)
    token = run_id_ctx.set("")
    yield stream
    run_id_ctx.reset(token)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Generator[None, None, None]:
    """Isolate tests from credentials and config files of the host."""
    for var in _CREDENTIAL_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
