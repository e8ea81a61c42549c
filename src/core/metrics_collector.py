#!/usr/bin/env python3
"""
Run timing collection.

Tracks how long each phase of a collection run takes (login, job listing,
session enrichment, repository fetch) and logs a summary when the run ends.
Nothing is persisted; each run starts from a clean collector.
"""

import time
import uuid
from datetime import datetime
from typing import Dict, List, Any, Optional
from contextlib import contextmanager
from dataclasses import dataclass, field
import logging

logger = logging.getLogger(__name__)


@dataclass
class TimingMetrics:
    """Performance timing metrics for a single operation."""
    operation: str
    start_time: float
    end_time: float
    duration: float
    success: bool
    error_message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "operation": self.operation,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
            "success": self.success,
            "error_message": self.error_message
        }


@dataclass
class RunMetrics:
    """Complete metrics for a single run."""
    run_id: str
    timestamp: datetime
    total_duration: float
    operations: List[TimingMetrics]
    stats: Dict[str, Any] = field(default_factory=dict)
    success: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "run_id": self.run_id,
            "timestamp": self.timestamp.isoformat(),
            "total_duration": self.total_duration,
            "operations": [op.to_dict() for op in self.operations],
            "stats": dict(self.stats),
            "success": self.success
        }


class MetricsCollector:
    """
    Collects timings and counters for one collection run.

    Use ``start_run``/``end_run`` around the run and ``time_operation`` around
    each phase.
    """

    def __init__(self):
        self._current_run_id: Optional[str] = None
        self._run_start_time: Optional[float] = None
        self._current_operations: List[TimingMetrics] = []
        self._run_stats: Dict[str, Any] = {}

    def start_run(self, run_id: Optional[str] = None) -> str:
        """Start tracking a new run."""
        self._current_run_id = run_id or uuid.uuid4().hex[:12]
        self._run_start_time = time.time()
        self._current_operations = []
        self._run_stats = {
            "jobs_total": 0,
            "jobs_failed": 0,
        }
        logger.debug(f"Started tracking run {self._current_run_id}")
        return self._current_run_id

    def end_run(self, success: bool = True) -> Optional[RunMetrics]:
        """End tracking the current run and return metrics."""
        if not self._current_run_id or self._run_start_time is None:
            logger.warning("No active run to end")
            return None

        total_duration = time.time() - self._run_start_time
        run_metrics = RunMetrics(
            run_id=self._current_run_id,
            timestamp=datetime.now(),
            total_duration=total_duration,
            operations=self._current_operations.copy(),
            stats=dict(self._run_stats),
            success=success
        )

        self._current_run_id = None
        self._run_start_time = None
        self._current_operations = []
        self._run_stats = {}

        logger.info(
            f"Completed run {run_metrics.run_id} in {total_duration:.2f}s "
            f"(jobs: {run_metrics.stats.get('jobs_total', 0)}, "
            f"failed enrichments: {run_metrics.stats.get('jobs_failed', 0)}, success: {success})"
        )
        return run_metrics

    @contextmanager
    def time_operation(self, operation_name: str):
        """Context manager for timing operations."""
        start_time = time.time()
        success = True
        error_message = None

        try:
            yield
        except Exception as e:
            success = False
            error_message = str(e)
            raise
        finally:
            end_time = time.time()
            duration = end_time - start_time

            self._current_operations.append(TimingMetrics(
                operation=operation_name,
                start_time=start_time,
                end_time=end_time,
                duration=duration,
                success=success,
                error_message=error_message
            ))
            logger.debug(f"Operation '{operation_name}' took {duration:.2f}s (success: {success})")

    def record_stat(self, key: str, value: Any) -> None:
        """Record a statistic for the current run."""
        self._run_stats[key] = value

    def increment_stat(self, key: str, amount: int = 1) -> None:
        """Increment a counter statistic."""
        self._run_stats[key] = self._run_stats.get(key, 0) + amount

    @property
    def operations(self) -> List[TimingMetrics]:
        return list(self._current_operations)
