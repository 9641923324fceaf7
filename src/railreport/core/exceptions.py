"""Shared exceptions for the railreport package."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class RailReportError(Exception):
    """Base class for fatal railreport errors."""


class InvalidReportStructure(RailReportError):
    """Exception raised when a report is not a JUnit testsuite(s) document."""

    def __init__(self, detail: str, source: str | None = None) -> None:
        self.detail = detail
        self.source = source
        if source:
            super().__init__(f"Invalid report {source}: {detail}")
        else:
            super().__init__(f"Invalid report: {detail}")


class ReportSourceNotFound(RailReportError):
    """Exception raised when the report path is neither a file nor a directory."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        super().__init__(f"Report source not found: {self.path}")


class ExhaustedRetries(RailReportError):
    """Exception raised when every attempt of a TestRail call was rejected.

    Carries the last response so callers can show the remote error.
    """

    def __init__(self, operation: str, attempts: int, last_response: Any) -> None:
        self.operation = operation
        self.attempts = attempts
        self.last_response = last_response
        super().__init__(
            f"{operation} failed after {attempts} attempt(s): {self.error_detail}"
        )

    @property
    def error_detail(self) -> str:
        if isinstance(self.last_response, dict) and self.last_response.get("error"):
            return str(self.last_response["error"])
        return repr(self.last_response)


class ConfigError(RailReportError):
    """Exception raised when the case mapping configuration cannot be loaded."""
