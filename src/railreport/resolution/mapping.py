"""Case mapping tables: test names and classes to TestRail case ids."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from railreport.logging import get_logger

logger = get_logger(__name__)

# "#[1234]" anywhere in a test name
DEFAULT_CASE_ID_PATTERN = r"#\[(\d{1,6})\]"

CaseIds = frozenset[str]


def normalize_case_ids(value: Any) -> CaseIds:
    """Normalize a configured id, or list of ids, to a set of string ids.

    Raises:
        ValueError: If the value holds no id at all.
    """
    if isinstance(value, (str, int)) and not isinstance(value, bool):
        ids = frozenset({str(value).strip()})
    elif isinstance(value, Iterable):
        ids = frozenset(str(item).strip() for item in value)
    else:
        raise ValueError(f"Unsupported case id value: {value!r}")

    ids = frozenset(i for i in ids if i)
    if not ids:
        raise ValueError(f"Empty case id value: {value!r}")
    return ids


@dataclass(frozen=True)
class CaseMapping:
    """Read-only mapping tables used to resolve case ids."""

    case_name_to_id_map: Mapping[str, CaseIds] = field(
        default_factory=lambda: MappingProxyType({})
    )
    case_class_and_name_to_id_map: Mapping[str, Mapping[str, CaseIds]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    case_id_regexp: re.Pattern[str] = field(
        default_factory=lambda: re.compile(DEFAULT_CASE_ID_PATTERN)
    )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> CaseMapping:
        """Build a mapping from the camelCase keys of the config file."""
        data = data or {}

        by_name = _build_table(data.get("caseNameToIdMap"))
        by_class = {
            str(test_class): MappingProxyType(_build_table(names, test_class=str(test_class)))
            for test_class, names in (data.get("caseClassAndNameToIdMap") or {}).items()
        }
        pattern = data.get("caseIdRegExp") or DEFAULT_CASE_ID_PATTERN

        return cls(
            case_name_to_id_map=MappingProxyType(by_name),
            case_class_and_name_to_id_map=MappingProxyType(by_class),
            case_id_regexp=re.compile(pattern),
        )


def _build_table(entries: Mapping[str, Any] | None, test_class: str | None = None) -> dict:
    """Normalize one name table; entries without a value are left unmapped."""
    table = {}
    for name, ids in (entries or {}).items():
        if not ids:
            logger.debug("mapping_entry_skipped", test_class=test_class, test_name=str(name))
            continue
        table[str(name)] = normalize_case_ids(ids)
    return table
