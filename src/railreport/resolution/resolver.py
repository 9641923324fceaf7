"""Resolution of JUnit test cases to TestRail case ids."""

from __future__ import annotations

import re

from railreport.core.models import CoverageState, RawTestCase, RunResult, Status
from railreport.logging import get_logger
from railreport.resolution.mapping import CaseIds, CaseMapping

logger = get_logger(__name__)

_DIGITS = re.compile(r"\d+")
_NO_IDS: CaseIds = frozenset()


class CaseResolver:
    """Maps ``(class, name)`` pairs to TestRail case ids.

    Lookup order, first hit wins:

    1. an inline marker in the test name (``#[123]`` by default), so a test
       can declare its own case regardless of the mapping tables;
    2. ``caseClassAndNameToIdMap[class][name]``;
    3. ``caseNameToIdMap[name]``.

    Table hits are recorded in ``coverage``; inline markers are not.
    """

    def __init__(self, mapping: CaseMapping, coverage: CoverageState | None = None):
        self.mapping = mapping
        self.coverage = coverage if coverage is not None else CoverageState()

    def _inline_case_id(self, test_name: str) -> str | None:
        match = self.mapping.case_id_regexp.search(test_name)
        if match is None:
            return None
        if match.re.groups:
            return match.group(1)
        digits = _DIGITS.search(match.group(0))
        return digits.group(0) if digits else None

    def resolve(self, test_class: str, test_name: str) -> CaseIds:
        """Return the case ids for a test, or an empty set if it is unmapped."""
        inline_id = self._inline_case_id(test_name)
        if inline_id is not None:
            return frozenset({inline_id})

        class_map = self.mapping.case_class_and_name_to_id_map.get(test_class)
        if class_map is not None and test_name in class_map:
            self.coverage.mark_class_and_name(test_class, test_name)
            return class_map[test_name]

        if test_name in self.mapping.case_name_to_id_map:
            self.coverage.mark_name(test_name)
            return self.mapping.case_name_to_id_map[test_name]

        logger.debug("testcase_unmapped", test_class=test_class, test_name=test_name)
        return _NO_IDS


def to_run_result(raw: RawTestCase, resolver: CaseResolver) -> RunResult:
    """Resolve a raw test case and classify its outcome.

    Skipped cases get no status and are left out of the upload.
    """
    if raw.failed:
        status: Status | None = Status.FAILED
    elif raw.skipped:
        status = None
    else:
        status = Status.PASSED

    return RunResult(
        test_name=raw.test_name,
        case_ids=resolver.resolve(raw.test_class, raw.test_name),
        elapsed=raw.elapsed_seconds or 0,
        status=status,
        comment="\n".join(m for m in raw.failure_messages if m),
    )
