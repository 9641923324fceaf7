"""Selection and loading of the JUnit files behind a report path."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

from railreport.core.exceptions import ReportSourceNotFound
from railreport.logging import get_logger
from railreport.parsers.junit import JUnitParser

if TYPE_CHECKING:
    from collections.abc import Iterator

    from railreport.core.models import RawTestCase

logger = get_logger(__name__)

REPORT_SUFFIX = ".xml"
DEFAULT_MAX_WORKERS = 4


def _is_report_name(path: Path) -> bool:
    return path.name.endswith(REPORT_SUFFIX)


def resolve_report_files(path: Path | str) -> list[Path]:
    """List the XML reports a path refers to.

    A file is taken only if its name ends in ``.xml``. A directory contributes
    its direct ``.xml`` files (no recursion) in name order.

    Raises:
        ReportSourceNotFound: If the path is neither a regular file nor a
            directory.
    """
    path = Path(path)

    if path.is_file():
        return [path] if _is_report_name(path) else []

    if path.is_dir():
        return sorted(
            (entry for entry in path.iterdir() if entry.is_file() and _is_report_name(entry)),
            key=lambda entry: entry.name,
        )

    raise ReportSourceNotFound(path)


def _load_file(path: Path) -> list[RawTestCase]:
    """Read and fully parse one report."""
    cases = list(JUnitParser.walk(JUnitParser.parse_file(path)))
    logger.debug("report_loaded", file=str(path), test_cases=len(cases))
    return cases


def iter_raw_cases(
    path: Path | str, max_workers: int = DEFAULT_MAX_WORKERS
) -> Iterator[RawTestCase]:
    """Yield the test cases of every report under ``path``.

    Files are parsed concurrently but yielded in file order, then document
    order, whatever order the workers finish in.
    """
    files = resolve_report_files(path)
    logger.debug("report_files_selected", path=str(path), files=[str(f) for f in files])
    if not files:
        return

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(files)))) as executor:
        for cases in executor.map(_load_file, files):
            yield from cases
