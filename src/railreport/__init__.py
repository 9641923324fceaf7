"""railreport - upload JUnit XML test results to TestRail."""

__version__ = "0.1.0"

from railreport.core.models import CaseResult, CoverageState, RawTestCase, RunResult, Status

__all__ = [
    "CaseResult",
    "CoverageState",
    "RawTestCase",
    "RunResult",
    "Status",
]
