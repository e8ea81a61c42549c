#!/usr/bin/env python3
"""
Session summary data model.

A compact view of one job execution as returned by the sessions endpoint.
"""

from datetime import datetime
from typing import Dict, Any, Optional, Union
from dataclasses import dataclass

from dateutil import parser as date_parser

Number = Union[int, float]


def _parse_datetime_safe(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if not value or not isinstance(value, str):
        return None
    try:
        return date_parser.isoparse(value)
    except (ValueError, OverflowError):
        return None


def compute_duration(creation_time: Any, end_time: Any) -> Optional[Number]:
    """
    Difference ``end_time - creation_time``.

    Numeric timestamps are subtracted as-is. ISO-8601 strings are parsed and the
    difference is returned in seconds. Anything missing or unparseable gives
    ``None``. Negative results are returned unchanged.
    """
    if creation_time is None or end_time is None:
        return None

    if _is_number(creation_time) and _is_number(end_time):
        return end_time - creation_time

    start = _parse_datetime_safe(creation_time)
    end = _parse_datetime_safe(end_time)
    if start is None or end is None:
        return None

    # Mixed naive/aware values cannot be compared
    if (start.tzinfo is None) != (end.tzinfo is None):
        return None
    return (end - start).total_seconds()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass
class SessionSummary:
    """One execution of a job, reduced to the fields the monitoring side uses."""
    state: Any = None
    name: Any = None
    creation_time: Any = None
    end_time: Any = None
    duration: Optional[Number] = None
    progress_percent: Any = None
    result: Any = None

    @classmethod
    def from_api(cls, session: Dict[str, Any]) -> 'SessionSummary':
        """Build a summary from a raw session object."""
        creation_time = session.get('creationTime')
        end_time = session.get('endTime')
        return cls(
            state=session.get('state'),
            name=session.get('name'),
            creation_time=creation_time,
            end_time=end_time,
            duration=compute_duration(creation_time, end_time),
            progress_percent=session.get('progressPercent'),
            result=session.get('result'),
        )

    @property
    def message(self) -> Optional[str]:
        """Result message, if the session carries a non-empty one."""
        if isinstance(self.result, dict) and self.result.get('message'):
            return self.result['message']
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation."""
        return {
            'state': self.state,
            'name': self.name,
            'creationTime': self.creation_time,
            'endTime': self.end_time,
            'duration': self.duration,
            'progressPercent': self.progress_percent,
            'result': self.result,
        }
