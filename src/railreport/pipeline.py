"""Report pipeline: JUnit files in, TestRail case results out.

    path -> raw test cases -> run results (case ids resolved)
         -> case results (aggregated) -> TestRail (with bounded retry)

Run creation and closing go through the same retry policy.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from railreport.aggregation import aggregate
from railreport.core.models import CoverageState
from railreport.logging import get_logger
from railreport.parsers.sources import DEFAULT_MAX_WORKERS, iter_raw_cases
from railreport.resolution.coverage import UnusedMapping, log_unused_mappings
from railreport.resolution.resolver import CaseResolver, to_run_result
from railreport.retry import DEFAULT_MAX_ATTEMPTS, retry_until

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from railreport.core.models import CaseResult
    from railreport.resolution.mapping import CaseMapping
    from railreport.testrail.client import TestRailClient

logger = get_logger(__name__)


class UploadStatus(Enum):
    """How an upload ended when it did not raise."""

    UPLOADED = "uploaded"
    NOTHING_TO_REPORT = "nothing_to_report"


@dataclass(frozen=True)
class UploadOutcome:
    """Result of a successful upload, or of having nothing to upload."""

    status: UploadStatus
    count: int = 0
    response: Any = None

    @classmethod
    def uploaded(cls, count: int, response: Any = None) -> UploadOutcome:
        return cls(status=UploadStatus.UPLOADED, count=count, response=response)

    @classmethod
    def nothing_to_report(cls) -> UploadOutcome:
        return cls(status=UploadStatus.NOTHING_TO_REPORT)


@dataclass(frozen=True)
class ReportOutcome:
    """Everything a ``report`` invocation produced."""

    upload: UploadOutcome
    case_results: dict[str, CaseResult] = field(default_factory=dict)
    unused_mappings: list[UnusedMapping] = field(default_factory=list)


def is_results_accepted(response: Any) -> bool:
    """TestRail acknowledges a batch with a non-empty list of results."""
    return isinstance(response, list) and len(response) > 0


def upload(
    client: TestRailClient,
    run_id: int | str,
    case_results: Mapping[str, CaseResult],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    delay: float = 0.0,
) -> UploadOutcome:
    """Submit all case results to a run as a single batch.

    Raises:
        ExhaustedRetries: If TestRail rejected every attempt.
    """
    if not case_results:
        logger.info("nothing_to_report", run_id=str(run_id))
        return UploadOutcome.nothing_to_report()

    payload = [result.to_payload() for result in case_results.values()]
    logger.debug("upload_started", run_id=str(run_id), results=payload)

    response = retry_until(
        lambda: client.add_results_for_cases(run_id, payload),
        is_results_accepted,
        max_attempts=max_attempts,
        delay=delay,
        operation="add_results_for_cases",
    )
    logger.info("results_uploaded", run_id=str(run_id), count=len(response))
    return UploadOutcome.uploaded(len(response), response)


def report(
    client: TestRailClient,
    run_id: int | str,
    path: Path | str,
    mapping: CaseMapping,
    *,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    delay: float = 0.0,
    log_coverage: bool = False,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> ReportOutcome:
    """Load JUnit reports under ``path`` and upload their results to a run.

    Raises:
        ReportSourceNotFound: If ``path`` does not exist.
        InvalidReportStructure: If any report is not a JUnit document. Nothing
            is uploaded in that case.
        ExhaustedRetries: If the upload was rejected on every attempt.
    """
    coverage = CoverageState()
    resolver = CaseResolver(mapping, coverage)

    run_results = (
        to_run_result(raw, resolver) for raw in iter_raw_cases(path, max_workers=max_workers)
    )
    case_results = aggregate(run_results)
    logger.debug("case_results_aggregated", cases=len(case_results))

    # Every test case is resolved by now, so coverage is final before uploading
    unused = log_unused_mappings(coverage, mapping) if log_coverage else []

    outcome = upload(client, run_id, case_results, max_attempts=max_attempts, delay=delay)
    return ReportOutcome(upload=outcome, case_results=case_results, unused_mappings=unused)


def open_run(
    client: TestRailClient,
    project_id: int | str,
    name: str,
    suite_id: int | str | None = None,
    description: str | None = None,
    milestone_id: int | str | None = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    delay: float = 0.0,
) -> dict[str, Any]:
    """Create a run and return the TestRail run object."""
    return retry_until(
        lambda: client.add_run(project_id, name, suite_id, description, milestone_id),
        lambda response: isinstance(response, dict) and bool(response.get("id")),
        max_attempts=max_attempts,
        delay=delay,
        operation="add_run",
    )


def close_run(
    client: TestRailClient,
    run_id: int | str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    delay: float = 0.0,
) -> dict[str, Any]:
    """Close a run and return the TestRail run object."""
    return retry_until(
        lambda: client.close_run(run_id),
        lambda response: isinstance(response, dict) and bool(response.get("completed_on")),
        max_attempts=max_attempts,
        delay=delay,
        operation="close_run",
    )
