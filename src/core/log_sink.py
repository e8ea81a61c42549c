#!/usr/bin/env python3
"""
Monitoring log sink.

Monitoring agents log with numeric severities rather than ``logging`` level
names. ``LogSink`` accepts ``(severity, message)`` pairs and forwards them to
the standard logging tree, keeping the most recent entries for inspection.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque

SEVERITY_CRITICAL = 1
SEVERITY_ERROR = 2
SEVERITY_WARNING = 3
SEVERITY_DEBUG = 4
SEVERITY_TRACE = 5

MAX_ENTRIES = 100

SEVERITY_LEVELS = {
    SEVERITY_CRITICAL: logging.CRITICAL,
    SEVERITY_ERROR: logging.ERROR,
    SEVERITY_WARNING: logging.WARNING,
    SEVERITY_DEBUG: logging.DEBUG,
    SEVERITY_TRACE: logging.DEBUG,
}


@dataclass
class LogEntry:
    severity: int
    message: str


class LogSink:
    """Severity-numbered log sink backed by ``logging``."""

    def __init__(self, logger_name: str = "veeam.monitoring", max_entries: int = MAX_ENTRIES):
        self._logger = logging.getLogger(logger_name)
        # Most recent entries only
        self.entries: Deque[LogEntry] = deque(maxlen=max_entries)

    def log(self, severity: int, message: str) -> None:
        """
        Record a message.

        Args:
            severity: Monitoring severity, 1 (critical) to 5 (trace)
            message: Text to record
        """
        level = SEVERITY_LEVELS.get(severity, logging.INFO)
        self.entries.append(LogEntry(severity=severity, message=message))
        self._logger.log(level, message)
