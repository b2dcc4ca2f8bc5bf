"""Tests for the fiplan exception hierarchy."""

import pytest

from fiplan_core.exceptions import (
    ChannelError,
    ChannelUnavailableError,
    ComputationTimeoutError,
    ConfigurationError,
    ExecutionContextCrashedError,
    FIPlanError,
    InvalidProfileError,
    MalformedMessageError,
    OptimizationFailedError,
)


class TestFIPlanError:
    """Test suite for the base error."""

    def test_message_and_defaults(self):
        error = FIPlanError("Something went wrong")

        assert str(error) == "Something went wrong"
        assert error.details == {}
        assert error.recoverable is False

    def test_repr(self):
        error = FIPlanError("boom", details={"code": 1}, recoverable=True)
        assert repr(error) == "FIPlanError(message='boom', details={'code': 1}, recoverable=True)"


class TestProfileAndConfigErrors:
    """Test suite for input-side errors."""

    def test_invalid_profile_error_details(self):
        error = InvalidProfileError(
            "Monthly expense cannot be negative",
            field="monthly_expense",
            value=-100,
            constraint="greater_than_equal",
        )

        assert error.recoverable is True
        assert error.details == {
            "field": "monthly_expense",
            "value": -100,
            "constraint": "greater_than_equal",
        }

    def test_configuration_error_not_recoverable(self):
        error = ConfigurationError(
            "Bad rate", config_key="capital_gains_tax_rate", expected="< 100", actual=100
        )

        assert error.recoverable is False
        assert error.details["config_key"] == "capital_gains_tax_rate"
        assert error.details["actual"] == 100


class TestChannelErrors:
    """Test suite for channel failure types."""

    @pytest.mark.parametrize(
        "error_cls",
        [
            ComputationTimeoutError,
            ExecutionContextCrashedError,
            MalformedMessageError,
        ],
    )
    def test_recoverable_with_default_message(self, error_cls):
        error = error_cls(correlation_id=3)

        assert isinstance(error, ChannelError)
        assert isinstance(error, FIPlanError)
        assert error.recoverable is True
        assert error.correlation_id == 3
        assert error.details["correlation_id"] == 3
        assert str(error)

    def test_timeout_carries_duration(self):
        error = ComputationTimeoutError(correlation_id=1, timeout_ms=30000)

        assert error.timeout_ms == 30000
        assert error.details["timeout_ms"] == 30000
        assert "timed out" in str(error)

    def test_optimization_failed_message(self):
        error = OptimizationFailedError("grid exploded", correlation_id=7)

        assert str(error) == "grid exploded"
        assert error.recoverable is True

    def test_channel_unavailable_is_terminal(self):
        error = ChannelUnavailableError()

        assert str(error) == "Channel unavailable"
        assert error.recoverable is False
        assert error.correlation_id is None
        assert "correlation_id" not in error.details
