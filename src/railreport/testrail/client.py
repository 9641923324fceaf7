"""TestRail API v2 client.

This module provides the three calls railreport needs:
- add_results_for_cases: submit a batch of case results to a run
- add_run: create a run in a project
- close_run: close a run

Each call returns the decoded JSON body. Failures come back as values
(TestRail's ``{"error": ...}`` object, or one built from the HTTP or transport
failure) so callers can decide whether to retry by looking at the response.
"""

from __future__ import annotations

from typing import Any

import httpx

from railreport.logging import get_logger

logger = get_logger(__name__)

API_PATH = "index.php?/api/v2/"
DEFAULT_TIMEOUT = 30.0


class TestRailClient:
    """Client for the TestRail API.

    Usage:
        with TestRailClient("https://example.testrail.io", "user", "key") as client:
            run = client.add_run(project_id=1, name="Nightly")
            client.add_results_for_cases(run["id"], [{"case_id": "1", "status_id": 1}])
            client.close_run(run["id"])
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: TestRail instance URL, e.g. https://example.testrail.io
            username: TestRail user (email).
            password: Password or API key.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, mainly for tests.
        """
        if not base_url:
            raise ValueError("TestRail URL is required")
        self.base_url = base_url.rstrip("/") + "/"
        self._client = httpx.Client(
            auth=(username, password),
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def __enter__(self) -> TestRailClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _url(self, method: str) -> str:
        return f"{self.base_url}{API_PATH}{method}"

    def _post(self, method: str, body: dict[str, Any] | None = None) -> Any:
        """POST to an API method and decode the response.

        Args:
            method: API method with its path arguments, e.g. close_run/12
            body: JSON body.

        Returns:
            Decoded JSON, or ``{"error": ...}`` when the call failed without a
            JSON error body.
        """
        url = self._url(method)
        try:
            response = self._client.post(url, json=body or {})
        except httpx.HTTPError as e:
            logger.debug("testrail_transport_error", method=method, error=str(e))
            return {"error": f"Request failed: {e}"}

        logger.debug("testrail_response", method=method, status_code=response.status_code)
        try:
            return response.json()
        except ValueError:
            return {"error": f"HTTP {response.status_code}: {response.text[:200]}"}

    def add_results_for_cases(self, run_id: int | str, results: list[dict[str, Any]]) -> Any:
        """Submit results for several cases of a run in one request."""
        return self._post(f"add_results_for_cases/{run_id}", {"results": results})

    def add_run(
        self,
        project_id: int | str,
        name: str,
        suite_id: int | str | None = None,
        description: str | None = None,
        milestone_id: int | str | None = None,
    ) -> Any:
        """Create a test run in a project."""
        body: dict[str, Any] = {"name": name}
        if suite_id is not None:
            body["suite_id"] = suite_id
        if description is not None:
            body["description"] = description
        if milestone_id is not None:
            body["milestone_id"] = milestone_id
        return self._post(f"add_run/{project_id}", body)

    def close_run(self, run_id: int | str) -> Any:
        """Close a test run; closed runs cannot be edited."""
        return self._post(f"close_run/{run_id}")
