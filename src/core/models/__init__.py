#!/usr/bin/env python3
"""
Core data models for the Veeam metrics collector.

Contains all data structures used throughout the application.
"""

from .session import SessionSummary
from .job import Job, SESSION_ERROR_MARKER, SESSION_ERROR_MESSAGE
from .document import MetricsDocument, ErrorDocument

__all__ = [
    'SessionSummary', 'Job', 'MetricsDocument', 'ErrorDocument',
    'SESSION_ERROR_MARKER', 'SESSION_ERROR_MESSAGE',
]
