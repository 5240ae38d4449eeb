"""Utility modules for TrackSmith."""

from tracksmith.utils.errors import (
    CRSError,
    DataValidationError,
    DependencyError,
    NetworkError,
    NoPathError,
    ParameterError,
    TrackSmithError,
    format_dependency_error,
    format_parameter_error,
    format_validation_error,
    raise_dependency_error,
    raise_parameter_error,
    raise_validation_error,
)

__all__ = [
    "TrackSmithError",
    "CRSError",
    "DataValidationError",
    "DependencyError",
    "NetworkError",
    "NoPathError",
    "ParameterError",
    "format_validation_error",
    "format_parameter_error",
    "format_dependency_error",
    "raise_validation_error",
    "raise_parameter_error",
    "raise_dependency_error",
]
