"""Tests for error classification."""

import pytest

from loopbench.clients import (
    AvailabilityError,
    BenchmarkCancelledError,
    BenchmarkError,
    NoModelsAvailableError,
    TransportError,
    is_retryable_error,
)


class TestIsRetryableError:
    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504])
    def test_gateway_statuses_are_retryable(self, status: int) -> None:
        assert is_retryable_error("HTTP error", status=status) is True

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 422])
    def test_client_errors_are_not_retryable(self, status: int) -> None:
        assert is_retryable_error("HTTP error", status=status) is False

    @pytest.mark.parametrize("code", ["ECONNRESET", "ETIMEDOUT"])
    def test_network_codes_are_retryable(self, code: str) -> None:
        assert is_retryable_error("socket", code=code) is True

    def test_rate_limit_mention_is_retryable_case_insensitive(self) -> None:
        assert is_retryable_error("You hit the Rate Limit") is True

    def test_unknown_message_is_not_retryable(self) -> None:
        assert is_retryable_error("model not found") is False


class TestErrorHierarchy:
    def test_transport_error_computes_retryable(self) -> None:
        error = TransportError("HTTP 502", status=502)

        assert isinstance(error, BenchmarkError)
        assert error.retryable is True
        assert error.status == 502

    def test_availability_error_keeps_reason(self) -> None:
        error = AvailabilityError("gpt-4o", "HTTP 404: model not found")

        assert error.reason == "HTTP 404: model not found"
        assert "gpt-4o" in str(error)

    def test_no_models_available_message(self) -> None:
        assert str(NoModelsAvailableError()) == "No models available"

    def test_cancelled_error_carries_run(self) -> None:
        marker = object()
        assert BenchmarkCancelledError(marker).run is marker
