"""Tests for the bounded retry combinator."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from railreport.core.exceptions import ExhaustedRetries
from railreport.retry import DEFAULT_MAX_ATTEMPTS, retry_until


def _accepted(response) -> bool:
    return response == "ok"


class TestRetryUntil:
    """Test suite for retry_until."""

    def test_succeeds_on_first_attempt(self):
        """Returns immediately on an accepted response."""
        # Given
        call = MagicMock(return_value="ok")

        # When
        result = retry_until(call, _accepted, max_attempts=3)

        # Then
        assert result == "ok"
        assert call.call_count == 1

    def test_retries_until_accepted(self):
        """Stops at the first accepted response."""
        # Given
        call = MagicMock(side_effect=[{"error": "busy"}, {"error": "busy"}, "ok", "unused"])

        # When
        result = retry_until(call, _accepted, max_attempts=5)

        # Then
        assert result == "ok"
        assert call.call_count == 3

    def test_exhausts_after_max_attempts(self):
        """Makes exactly max_attempts calls, then raises with the last response."""
        # Given
        call = MagicMock(side_effect=[{"error": f"fail {i}"} for i in range(1, 4)])

        # When
        with pytest.raises(ExhaustedRetries) as exc_info:
            retry_until(call, _accepted, max_attempts=3, operation="upload")

        # Then
        assert call.call_count == 3
        assert exc_info.value.attempts == 3
        assert exc_info.value.last_response == {"error": "fail 3"}
        assert exc_info.value.error_detail == "fail 3"
        assert "upload failed after 3 attempt(s): fail 3" in str(exc_info.value)

    def test_default_attempts(self):
        call = MagicMock(return_value=[])

        with pytest.raises(ExhaustedRetries):
            retry_until(call, bool)

        assert call.call_count == DEFAULT_MAX_ATTEMPTS

    def test_single_attempt(self):
        call = MagicMock(return_value=None)

        with pytest.raises(ExhaustedRetries):
            retry_until(call, bool, max_attempts=1)

        assert call.call_count == 1

    def test_rejects_non_positive_attempts(self):
        with pytest.raises(ValueError, match="at least 1"):
            retry_until(MagicMock(), bool, max_attempts=0)

    def test_no_sleep_by_default(self):
        """Attempts follow each other without delay unless one is configured."""
        call = MagicMock(side_effect=[None, "ok"])

        with patch("railreport.retry.time.sleep") as sleep:
            retry_until(call, _accepted)

        sleep.assert_not_called()

    def test_fixed_delay_between_attempts(self):
        """A configured delay is used between attempts, not after the last."""
        call = MagicMock(return_value=None)

        with patch("railreport.retry.time.sleep") as sleep, pytest.raises(ExhaustedRetries):
            retry_until(call, bool, max_attempts=3, delay=0.5)

        assert [c.args for c in sleep.call_args_list] == [(0.5,), (0.5,)]

    def test_exception_from_call_propagates(self):
        """Unexpected errors are not retried."""
        call = MagicMock(side_effect=RuntimeError("bug"))

        with pytest.raises(RuntimeError, match="bug"):
            retry_until(call, bool, max_attempts=3)

        assert call.call_count == 1

    def test_error_detail_without_error_field(self):
        """Non-dict responses are shown with repr."""
        call = MagicMock(return_value=[])

        with pytest.raises(ExhaustedRetries) as exc_info:
            retry_until(call, bool, max_attempts=1)

        assert exc_info.value.error_detail == "[]"
