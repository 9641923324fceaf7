"""JUnit XML loader for test reports.

This module turns JUnit XML, as written by:
- JUnit / Surefire (Java)
- pytest (``--junitxml``)
- Jest (with jest-junit reporter)
- Many other test frameworks

into a flat stream of ``RawTestCase`` records. The document root must be a
``testsuite`` or a ``testsuites`` element; ``testsuites`` may nest further
``testsuites`` to any depth.
"""

from __future__ import annotations

import html
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Union

from railreport.core.exceptions import InvalidReportStructure
from railreport.core.models import RawTestCase
from railreport.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = get_logger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# Children that mark a test case as not passed
_FAILURE_TAGS = ("failure", "error")


@dataclass(frozen=True)
class Suite:
    """A ``testsuite`` element."""

    name: str
    element: ET.Element


@dataclass(frozen=True)
class SuiteCollection:
    """A ``testsuites`` element and its nested suites."""

    name: str
    children: tuple[SuiteNode, ...]


SuiteNode = Union[Suite, SuiteCollection]


class JUnitParser:
    """Parser for JUnit XML reports."""

    @staticmethod
    def parse_string(xml_content: str, source: str | None = None) -> SuiteNode:
        """Parse JUnit XML from string.

        Args:
            xml_content: JUnit XML as string.
            source: Optional file name used in error messages.

        Returns:
            Root suite node of the report.

        Raises:
            InvalidReportStructure: If the text is not XML or the root element
                is neither ``testsuite`` nor ``testsuites``.
        """
        try:
            root = ET.fromstring(xml_content)  # noqa: S314 - trusted test report data
        except ET.ParseError as e:
            raise InvalidReportStructure(f"malformed XML ({e})", source=source) from e
        return JUnitParser._to_node(root, source)

    @staticmethod
    def parse_file(file_path: Path | str) -> SuiteNode:
        """Parse JUnit XML from file, honouring its declared encoding.

        Args:
            file_path: Path to JUnit XML file.

        Returns:
            Root suite node of the report.

        Raises:
            InvalidReportStructure: If the file cannot be read or decoded, or
                is not a JUnit document.
        """
        path = Path(file_path)
        source = str(path)
        try:
            root = ET.parse(path).getroot()  # noqa: S314 - trusted test report data
        except ET.ParseError as e:
            raise InvalidReportStructure(f"malformed XML ({e})", source=source) from e
        except (OSError, UnicodeError, LookupError) as e:
            raise InvalidReportStructure(f"could not read file ({e})", source=source) from e
        return JUnitParser._to_node(root, source)

    @staticmethod
    def _to_node(element: ET.Element, source: str | None) -> SuiteNode:
        """Convert an element into a suite node, recursing into collections."""
        if element.tag == "testsuite":
            return Suite(name=element.get("name", ""), element=element)

        if element.tag == "testsuites":
            children = tuple(
                JUnitParser._to_node(child, source)
                for child in element
                if child.tag in ("testsuite", "testsuites")
            )
            return SuiteCollection(name=element.get("name", ""), children=children)

        raise InvalidReportStructure(
            f'expected element name "testsuite" or "testsuites", got "{element.tag}"',
            source=source,
        )

    @staticmethod
    def walk(node: SuiteNode) -> Iterator[RawTestCase]:
        """Yield every test case below ``node`` in document order."""
        if isinstance(node, SuiteCollection):
            for child in node.children:
                yield from JUnitParser.walk(child)
            return

        for testcase in node.element.findall("testcase"):
            yield JUnitParser._parse_testcase(testcase)

    @staticmethod
    def _parse_testcase(testcase: ET.Element) -> RawTestCase:
        """Parse a testcase element."""
        failures = [
            _failure_text(child) for child in testcase if child.tag in _FAILURE_TAGS
        ]
        skipped = not failures and testcase.find("skipped") is not None

        time = testcase.get("time")
        tc = RawTestCase(
            test_class=html.unescape(testcase.get("classname", "")),
            test_name=html.unescape(testcase.get("name", "")),
            elapsed_seconds=parse_elapsed(time) if time is not None else None,
            failure_messages=tuple(failures),
            skipped=skipped,
        )
        logger.debug(
            "testcase_parsed",
            test_class=tc.test_class,
            test_name=tc.test_name,
            time=time,
            elapsed=tc.elapsed_seconds,
        )
        return tc


def parse_elapsed(value: str) -> int:
    """Convert a JUnit ``time`` attribute to whole seconds.

    Fractions are truncated and anything unparseable counts as zero. A case
    that ran never reports zero seconds, so zero is rounded up to one.
    """
    match = _LEADING_INT.match(value)
    elapsed = max(int(match.group(1)), 0) if match else 0
    return elapsed or 1


def _failure_text(element: ET.Element) -> str:
    """Join a failure's message attribute and its character data."""
    parts = []

    message = element.get("message")
    if message:
        parts.append(html.unescape(message))

    content = (element.text or "").strip()
    if content:
        parts.append(html.unescape(content).replace("\n", "\n  "))

    return "\n".join(parts)


def iter_test_cases(xml_content: str, source: str | None = None) -> Iterator[RawTestCase]:
    """Lazily yield the test cases of one JUnit XML document.

    The document is parsed when iteration starts, so structure errors are
    raised from the first ``next()`` call.
    """
    yield from JUnitParser.walk(JUnitParser.parse_string(xml_content, source=source))
