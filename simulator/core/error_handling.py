"""
Centralized error handling for the simulator.

Configuration problems are reported through the error handler and raised as
``ConfigurationError`` before any simulation starts. Valid-but-empty game
states (e.g. an ability that needs an empty weapon slot) are never errors.
"""

import traceback
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from typing_extensions import TypeVar

from .logging import get_logger

T = TypeVar("T")


class ErrorSeverity(Enum):
    """Enumeration of error severity levels for the simulator's error handling."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SimulationError(Exception):
    """Base class for all errors raised by the simulator."""


class ConfigurationError(SimulationError, ValueError):
    """Raised when a configuration, talent override or rotation is invalid."""


@dataclass
class ErrorRecord:
    """Represents a reported error with severity, context, and optional exception information."""

    message: str
    severity: ErrorSeverity
    context: dict[str, Any]
    exception: Optional[Exception] = None


class ErrorHandler:
    """Centralized error reporting for the simulator."""

    def __init__(self) -> None:
        """Initialize the ErrorHandler with a logger and empty error history."""
        self.logger = get_logger("simulator.errors")
        self.error_history: list[ErrorRecord] = []

    def handle(
        self,
        message: str,
        severity: ErrorSeverity,
        context: Optional[dict[str, Any]] = None,
        exception: Optional[Exception] = None,
    ) -> ErrorRecord:
        """Record an error and log it according to its severity."""
        error = ErrorRecord(
            message=message,
            severity=severity,
            context=context or {},
            exception=exception,
        )
        self.error_history.append(error)

        # Prefix context keys to avoid conflicts with logging system reserved keys
        safe_context = {f"ctx_{key}": value for key, value in error.context.items()}

        if error.severity == ErrorSeverity.CRITICAL:
            self.logger.critical(f"CRITICAL: {error.message}", extra=safe_context)
            if error.exception:
                self.logger.critical(traceback.format_exc())
        elif error.severity == ErrorSeverity.HIGH:
            self.logger.error(f"ERROR: {error.message}", extra=safe_context)
        elif error.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(f"WARNING: {error.message}", extra=safe_context)
        else:
            self.logger.info(f"INFO: {error.message}", extra=safe_context)
        return error

    def configuration_error(
        self, message: str, context: Optional[dict[str, Any]] = None
    ) -> ConfigurationError:
        """
        Report a configuration error and build the exception to raise.

        Args:
            message (str): Description of the problem.
            context (Optional[dict[str, Any]]): Additional context for logging.

        Returns:
            ConfigurationError: The exception, ready to be raised by the caller.

        """
        self.handle(message, ErrorSeverity.HIGH, context)
        return ConfigurationError(message)

    def clear(self) -> None:
        """Forget all recorded errors."""
        self.error_history.clear()


# Global error handler instance
ERROR_HANDLER = ErrorHandler()


def safe_operation(
    default_value: Any = None,
    error_message: str = "Operation failed",
    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
) -> Callable:
    """
    Decorator for presentation-layer operations that must not abort a run.

    Args:
        default_value (Any): Default value to return on error.
        error_message (str): Error message prefix for logging.
        severity (ErrorSeverity): Severity level for errors.

    Returns:
        Callable: The decorator function.

    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                ERROR_HANDLER.handle(
                    f"{error_message}: {e}",
                    severity,
                    {"function": func.__name__},
                    e,
                )
                return default_value

        return wrapper

    return decorator


# ==============================================================================
# VALIDATION HELPERS
# ==============================================================================
# These helpers validate configuration values before a simulation starts. They
# never run inside the simulation loop.


def require_non_empty_string(
    value: Any, param_name: str, context: Optional[dict[str, Any]] = None
) -> str:
    """
    Validates that a value is a non-empty string.

    Args:
        value: The value to validate
        param_name: Human-readable parameter name for error messages
        context: Additional context for logging

    Returns:
        str: The validated string value

    Raises:
        ConfigurationError: If validation fails
    """
    if not value or not isinstance(value, str) or not value.strip():
        raise ERROR_HANDLER.configuration_error(
            f"{param_name} must be a non-empty string, got: {value!r}",
            {**(context or {}), "param_name": param_name},
        )
    return value.strip()


def require_positive(
    value: Any, param_name: str, context: Optional[dict[str, Any]] = None
) -> float:
    """
    Validates that a value is a number strictly greater than zero.

    Raises:
        ConfigurationError: If validation fails
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ERROR_HANDLER.configuration_error(
            f"{param_name} must be a positive number, got: {value!r}",
            {**(context or {}), "param_name": param_name},
        )
    return value


def require_non_negative(
    value: Any, param_name: str, context: Optional[dict[str, Any]] = None
) -> float:
    """
    Validates that a value is a number greater than or equal to zero.

    Raises:
        ConfigurationError: If validation fails
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
        raise ERROR_HANDLER.configuration_error(
            f"{param_name} must be a non-negative number, got: {value!r}",
            {**(context or {}), "param_name": param_name},
        )
    return value


def require_probability(
    value: Any, param_name: str, context: Optional[dict[str, Any]] = None
) -> float:
    """
    Validates that a value is a probability, i.e. a number within [0, 1].

    Raises:
        ConfigurationError: If validation fails
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 <= value <= 1:
        raise ERROR_HANDLER.configuration_error(
            f"{param_name} must be a probability between 0 and 1, got: {value!r}",
            {**(context or {}), "param_name": param_name},
        )
    return float(value)
