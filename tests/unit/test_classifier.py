"""Unit tests for HTTP status classification."""

import pytest

from oway_sdk.core.classifier import (
    is_client_error_status,
    is_retryable_status,
    is_server_error_status,
)


class TestIsRetryableStatus:
    """Tests for is_retryable_status."""

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_listed_statuses_are_retryable(self, status: int) -> None:
        assert is_retryable_status(status) is True

    def test_not_implemented_is_permanent(self) -> None:
        """501 is a 5xx but retrying cannot help."""
        assert is_retryable_status(501) is False

    @pytest.mark.parametrize("status", [505, 507, 520, 599])
    def test_other_server_errors_are_retryable(self, status: int) -> None:
        assert is_retryable_status(status) is True

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 409, 422])
    def test_client_errors_are_not_retryable(self, status: int) -> None:
        assert is_retryable_status(status) is False


class TestStatusFamilies:
    """Tests for 4xx/5xx helpers."""

    def test_client_error_status(self) -> None:
        assert is_client_error_status(404) is True
        assert is_client_error_status(500) is False
        assert is_client_error_status(None) is False

    def test_server_error_status(self) -> None:
        assert is_server_error_status(503) is True
        assert is_server_error_status(429) is False
        assert is_server_error_status(None) is False
