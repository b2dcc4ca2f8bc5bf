"""Custom exceptions for the fiplan engine.

This module provides a hierarchy of exception classes for consistent error
handling across projection, optimization and the background channel. All
exceptions inherit from FIPlanError, making it easy to catch all
application-specific errors.

The projector and the optimizer never raise for valid numeric input: "no
answer" cases are encoded in their results (``earliest_fi_age=None``, empty
solution lists). Only profile parsing and the background channel raise.

Example:
    try:
        result = await channel.submit(profile, baseline_fi_age=58)
    except ComputationTimeoutError:
        result = await channel.submit(profile, baseline_fi_age=58)
    except ChannelUnavailableError:
        channel = BackgroundComputeChannel()
    except FIPlanError as e:
        logger.error("optimization_failed", error=str(e))
"""

from typing import Any, Optional


class FIPlanError(Exception):
    """Base exception for all fiplan errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.

    Example:
        >>> raise FIPlanError("Something went wrong", details={"code": 500})
        FIPlanError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize FIPlanError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the error is potentially recoverable through
                retry or corrected input. Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class InvalidProfileError(FIPlanError):
    """Error raised when a financial profile fails validation.

    Negative ages or amounts are invalid input. A current age at or beyond
    the life-expectancy bound is NOT an error; the projector answers it with
    an empty result.

    Attributes:
        field: The field that failed validation.
        value: The invalid value.
        constraint: The validation constraint that was violated.

    Example:
        >>> raise InvalidProfileError(
        ...     "Monthly expense cannot be negative",
        ...     field="monthly_expense",
        ...     value=-100,
        ...     constraint="greater_than_equal 0",
        ... )
        InvalidProfileError: Monthly expense cannot be negative
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize InvalidProfileError.

        Args:
            message: Human-readable error description.
            field: The name of the field that failed validation.
            value: The invalid value.
            constraint: Description of the validation rule violated.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed by user correction.
                Defaults to True.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class ConfigurationError(FIPlanError):
    """Error raised when configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).

    Example:
        >>> raise ConfigurationError(
        ...     "Capital gains tax rate must be below 100%",
        ...     config_key="capital_gains_tax_rate",
        ...     expected="0 <= rate < 100",
        ...     actual=100,
        ... )
        ConfigurationError: Capital gains tax rate must be below 100%
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error description.
            config_key: The name of the configuration key that is problematic.
            expected: Description of what value was expected.
            actual: The actual value found.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed at runtime.
                Defaults to False.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


class ChannelError(FIPlanError):
    """Base class for failures reported by the background compute channel.

    Every channel failure is tied to at most one correlation id and fails
    independently of other in-flight requests.

    Attributes:
        correlation_id: The request the failure belongs to (if any).
    """

    def __init__(
        self,
        message: str,
        *,
        correlation_id: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.correlation_id = correlation_id

        if correlation_id is not None:
            self.details["correlation_id"] = correlation_id


class ComputationTimeoutError(ChannelError):
    """No result arrived before the request timeout fired.

    The background computation may still be running; its eventual result is
    discarded. Re-submitting is safe.
    """

    def __init__(
        self,
        message: str = "Computation timed out - calculation took too long",
        *,
        correlation_id: Optional[int] = None,
        timeout_ms: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message, correlation_id=correlation_id, details=details, recoverable=True
        )
        self.timeout_ms = timeout_ms

        if timeout_ms is not None:
            self.details["timeout_ms"] = timeout_ms


class ExecutionContextCrashedError(ChannelError):
    """The background execution context died while the request was pending."""

    def __init__(
        self,
        message: str = "Execution context crashed unexpectedly",
        *,
        correlation_id: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message, correlation_id=correlation_id, details=details, recoverable=True
        )


class MalformedMessageError(ChannelError):
    """A message crossing the channel boundary could not be decoded."""

    def __init__(
        self,
        message: str = "Malformed message received from execution context",
        *,
        correlation_id: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message, correlation_id=correlation_id, details=details, recoverable=True
        )


class OptimizationFailedError(ChannelError):
    """The worker answered a request with an OPTIMIZATION_ERROR message."""

    def __init__(
        self,
        message: str,
        *,
        correlation_id: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message, correlation_id=correlation_id, details=details, recoverable=True
        )


class ChannelUnavailableError(ChannelError):
    """The channel cannot accept requests.

    Raised after a failed recreation of the execution context, after the
    channel has been closed, or before it was started. Terminal for the
    channel instance: create a new channel to continue.
    """

    def __init__(
        self,
        message: str = "Channel unavailable",
        *,
        correlation_id: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            message, correlation_id=correlation_id, details=details, recoverable=False
        )


__all__ = [
    "FIPlanError",
    "InvalidProfileError",
    "ConfigurationError",
    "ChannelError",
    "ComputationTimeoutError",
    "ExecutionContextCrashedError",
    "MalformedMessageError",
    "OptimizationFailedError",
    "ChannelUnavailableError",
]
