"""Case id resolution and mapping coverage."""

from railreport.resolution.coverage import UnusedMapping, find_unused_mappings, log_unused_mappings
from railreport.resolution.mapping import CaseMapping, normalize_case_ids
from railreport.resolution.resolver import CaseResolver, to_run_result

__all__ = [
    "CaseMapping",
    "CaseResolver",
    "UnusedMapping",
    "find_unused_mappings",
    "log_unused_mappings",
    "normalize_case_ids",
    "to_run_result",
]
