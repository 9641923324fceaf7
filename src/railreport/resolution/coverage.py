"""Reporting of mapping entries that no test case used."""

from __future__ import annotations

from dataclasses import dataclass

from railreport.core.models import CoverageState
from railreport.logging import get_logger
from railreport.resolution.mapping import CaseIds, CaseMapping

logger = get_logger(__name__)


@dataclass(frozen=True)
class UnusedMapping:
    """A configured mapping entry that the report never exercised."""

    test_name: str
    case_ids: CaseIds
    test_class: str | None = None

    def describe(self) -> str:
        ids = ", ".join(sorted(self.case_ids))
        if self.test_class is None:
            return f'Case "{self.test_name}" mapping to {ids} has not been used'
        return (
            f'Class "{self.test_class}" and case "{self.test_name}" '
            f"mapping to {ids} has not been used"
        )


def find_unused_mappings(coverage: CoverageState, mapping: CaseMapping) -> list[UnusedMapping]:
    """Return configured entries that ``coverage`` never recorded, in config order."""
    unused = [
        UnusedMapping(test_name=name, case_ids=ids)
        for name, ids in mapping.case_name_to_id_map.items()
        if name not in coverage.case_name_used
    ]
    for test_class, names in mapping.case_class_and_name_to_id_map.items():
        unused.extend(
            UnusedMapping(test_name=name, case_ids=ids, test_class=test_class)
            for name, ids in names.items()
            if not coverage.class_and_name_used(test_class, name)
        )
    return unused


def log_unused_mappings(coverage: CoverageState, mapping: CaseMapping) -> list[UnusedMapping]:
    """Log one info line per unused mapping entry and return the entries."""
    unused = find_unused_mappings(coverage, mapping)
    for entry in unused:
        logger.info(
            "mapping_unused",
            detail=entry.describe(),
            test_class=entry.test_class,
            test_name=entry.test_name,
            case_ids=sorted(entry.case_ids),
        )
    return unused
