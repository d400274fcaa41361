"""
Error Handling Module

Provides the exception hierarchy for the clustering engine:
- Base error carrying an error code and structured details
- Parameter, dataset and shape validation errors
- Configuration errors
"""

import time
from typing import Any, Optional


# =============================================================================
# Custom Exception Hierarchy
# =============================================================================


class ClusteringServiceError(Exception):
    """Base exception for all projection clustering errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.timestamp = time.time()

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/CLI output."""
        return {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp,
        }


# Configuration Errors
class ConfigurationError(ClusteringServiceError):
    """Error in settings file or environment."""
    pass


# Clustering Errors
class ClusteringError(ClusteringServiceError):
    """Base class for clustering errors."""
    pass


class InvalidParameterError(ClusteringError, ValueError):
    """Missing, non-positive or out-of-range algorithm parameter."""
    pass


class EmptyDatasetError(ClusteringError):
    """Algorithm cannot proceed on zero points."""
    pass


class ShapeMismatchError(ClusteringError):
    """Labeling length does not match the dataset it is paired with."""
    pass


class InvalidDatasetError(ClusteringError, ValueError):
    """Record coordinates are missing, non-numeric or non-finite."""
    pass
