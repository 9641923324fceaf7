"""Data model shared by the report pipeline.

Raw test cases come out of the JUnit loader, run results are raw cases with
their resolved TestRail case ids and a status, and case results are what gets
uploaded: one per case id, folded from every run result that maps to it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class Status(IntEnum):
    """TestRail result status ids.

    The numeric order matters: aggregation keeps the maximum, so a single
    failure marks the whole case as failed.
    """

    PASSED = 1
    FAILED = 5


@dataclass(frozen=True)
class RawTestCase:
    """One ``testcase`` element of a JUnit report, normalized."""

    test_class: str
    test_name: str
    elapsed_seconds: int | None = None
    failure_messages: tuple[str, ...] = ()
    skipped: bool = False

    @property
    def failed(self) -> bool:
        return bool(self.failure_messages)


@dataclass(frozen=True)
class RunResult:
    """Outcome of a single test execution mapped to TestRail case ids."""

    test_name: str
    case_ids: frozenset[str]
    elapsed: int
    status: Status | None
    comment: str = ""

    @property
    def reportable(self) -> bool:
        """Whether this result takes part in aggregation."""
        return self.status is not None and bool(self.case_ids)


@dataclass
class CaseResult:
    """Combined result for one TestRail case."""

    case_id: str
    status: Status = Status.PASSED
    elapsed_seconds: int = 0
    comment: str = ""

    def to_payload(self) -> dict[str, Any]:
        """Serialize to an entry of the ``add_results_for_cases`` body."""
        payload: dict[str, Any] = {
            "case_id": self.case_id,
            "status_id": int(self.status),
            "comment": self.comment,
        }
        # TestRail rejects a zero timespan
        if self.elapsed_seconds > 0:
            payload["elapsed"] = f"{self.elapsed_seconds}s"
        return payload


@dataclass
class CoverageState:
    """Mapping entries hit while resolving case ids during one report."""

    case_name_used: set[str] = field(default_factory=set)
    case_class_and_name_used: dict[str, set[str]] = field(default_factory=dict)

    def mark_name(self, test_name: str) -> None:
        self.case_name_used.add(test_name)

    def mark_class_and_name(self, test_class: str, test_name: str) -> None:
        self.case_class_and_name_used.setdefault(test_class, set()).add(test_name)

    def class_and_name_used(self, test_class: str, test_name: str) -> bool:
        return test_name in self.case_class_and_name_used.get(test_class, set())
