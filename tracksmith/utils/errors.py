"""Standardized errors for TrackSmith.

Every error carries an optional suggestion so messages tell the user how to
recover, not only what went wrong.
"""

from typing import Any, Optional


class TrackSmithError(Exception):
    """Base exception for TrackSmith errors."""

    def __init__(
        self,
        message: str,
        suggestion: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        """Initialize TrackSmith error.

        Args:
            message: Primary error message.
            suggestion: Optional suggestion for fixing the error.
            details: Optional dictionary with additional error details.
        """
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}\n\nSuggestion: {self.suggestion}"
        return self.message


class DataValidationError(TrackSmithError):
    """Error raised when input data fails validation."""


class ParameterError(TrackSmithError):
    """Error raised when parameters are invalid."""


class DependencyError(TrackSmithError):
    """Error raised when an optional dependency is missing."""


class CRSError(TrackSmithError):
    """Error raised when a coordinate reference system cannot be used."""


class NetworkError(TrackSmithError):
    """Error raised for invalid network queries."""


class NoPathError(NetworkError):
    """Error raised when no path connects two nodes."""


def format_validation_error(
    message: str,
    expected: Optional[str] = None,
    received: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> str:
    """Format a validation error message.

    Args:
        message: Primary error message.
        expected: What was expected (optional).
        received: What was received (optional).
        suggestion: How to fix the error (optional).

    Returns:
        Formatted error message string.
    """
    parts = [message]
    if expected and received:
        parts.append(f"Expected: {expected}, Received: {received}")
    elif expected:
        parts.append(f"Expected: {expected}")
    elif received:
        parts.append(f"Received: {received}")
    if suggestion:
        parts.append(f"Suggestion: {suggestion}")
    return "\n".join(parts)


def format_parameter_error(
    parameter_name: str,
    value: Any,
    valid_values: Optional[list[str]] = None,
    constraint: Optional[str] = None,
) -> str:
    """Format a parameter error message."""
    parts = [f"Invalid value for parameter '{parameter_name}': {value!r}"]
    if valid_values:
        parts.append(f"Valid values: {', '.join(map(str, valid_values))}")
    if constraint:
        parts.append(f"Constraint: {constraint}")
    return "\n".join(parts)


def format_dependency_error(
    dependency_name: str, optional_group: Optional[str] = None
) -> str:
    """Format a missing-dependency message with install instructions."""
    if optional_group:
        return (
            f"Missing required dependency: {dependency_name}\n"
            f"Install with: pip install tracksmith[{optional_group}]"
        )
    return (
        f"Missing required dependency: {dependency_name}\n"
        f"Install with: pip install {dependency_name}"
    )


def raise_validation_error(
    message: str,
    expected: Optional[str] = None,
    received: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> None:
    """Raise a DataValidationError with a formatted message.

    Raises:
        DataValidationError: Always.
    """
    error_msg = format_validation_error(message, expected, received)
    raise DataValidationError(error_msg, suggestion=suggestion)


def raise_parameter_error(
    parameter_name: str,
    value: Any,
    valid_values: Optional[list[str]] = None,
    constraint: Optional[str] = None,
    suggestion: Optional[str] = None,
) -> None:
    """Raise a ParameterError with a formatted message.

    Raises:
        ParameterError: Always.
    """
    error_msg = format_parameter_error(parameter_name, value, valid_values, constraint)
    raise ParameterError(error_msg, suggestion=suggestion)


def raise_dependency_error(
    dependency_name: str, optional_group: Optional[str] = None
) -> None:
    """Raise a DependencyError for a missing optional package.

    Raises:
        DependencyError: Always.
    """
    raise DependencyError(format_dependency_error(dependency_name, optional_group))
