#!/usr/bin/env python3
"""
Standardized exception hierarchy for the Veeam metrics collector.

Every failure the collector can report maps to one of these types. The
message of each exception is the human-readable text that ends up in the
error document, so it is kept free of Python-specific formatting.
"""

from typing import Optional, Dict, Any


class VeeamMetricsError(Exception):
    """Base exception for all collector errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


class ConfigError(VeeamMetricsError):
    """Input parameters are missing or invalid."""

    @classmethod
    def missing(cls, field: str) -> 'ConfigError':
        return cls(f"Required param is not set: {field}.", context={'field': field})

    @classmethod
    def invalid(cls, field: str, message: str) -> 'ConfigError':
        return cls(message, context={'field': field})


class AuthError(VeeamMetricsError):
    """Exchanging credentials for a bearer token failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, original_error: Optional[Exception] = None):
        context = {'status_code': status_code}
        if original_error is not None:
            context['original_error'] = str(original_error)
        super().__init__(message, context=context)
        self.status_code = status_code


class RequestError(VeeamMetricsError):
    """An authenticated API request failed or returned unusable data."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None,
                 original_error: Optional[Exception] = None):
        context = {'url': url, 'status_code': status_code}
        if original_error is not None:
            context['original_error'] = str(original_error)
        super().__init__(message, context=context)
        self.url = url
        self.status_code = status_code


class EnrichmentError(VeeamMetricsError):
    """Fetching or reducing a single job's session history failed.

    Always recovered at the job boundary; never reaches the caller.
    """

    def __init__(self, job_id: Any, reason: str, original_error: Optional[Exception] = None):
        message = f"Failed to enrich job {job_id}: {reason}"
        context = {
            'job_id': job_id,
            'reason': reason,
        }
        if original_error is not None:
            context['original_error'] = str(original_error)
        super().__init__(message, context=context)
        self.job_id = job_id
        self.original_error = original_error
