"""Aggregation of run results into one result per TestRail case.

A run result with several case ids contributes to each of them (fan-out) and
a case may be fed by several run results (fan-in), e.g. parameterized tests
or re-runs mapped to the same case. The fold is order-independent: elapsed
times are summed, the worst status wins and comment lines are sorted before
they are joined.
"""

from __future__ import annotations

from collections import defaultdict
from typing import TYPE_CHECKING

from railreport.core.models import CaseResult
from railreport.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable

    from railreport.core.models import RunResult

logger = get_logger(__name__)


def aggregate(run_results: Iterable[RunResult]) -> dict[str, CaseResult]:
    """Fold run results into a mapping of case id to ``CaseResult``.

    Results without a status (skipped) or without case ids (unmapped) are
    ignored.
    """
    results: dict[str, CaseResult] = {}
    comment_lines: dict[str, list[str]] = defaultdict(list)

    for run in run_results:
        if not run.reportable:
            logger.debug(
                "run_result_dropped",
                test_name=run.test_name,
                status=run.status,
                mapped=bool(run.case_ids),
            )
            continue

        for case_id in run.case_ids:
            result = results.setdefault(case_id, CaseResult(case_id=case_id))
            result.elapsed_seconds += run.elapsed
            result.status = max(result.status, run.status)
            if run.comment:
                comment_lines[case_id].append(f"{run.test_name}: {run.comment}\n")

    for case_id, lines in comment_lines.items():
        results[case_id].comment = "".join(sorted(lines))

    return results
