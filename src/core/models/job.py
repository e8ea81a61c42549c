#!/usr/bin/env python3
"""
Job state data model.

A job keeps every field the jobs/states endpoint returned and gains two
collector fields: ``sessions`` and ``lastMessage``.
"""

from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field

from .session import SessionSummary

SESSION_ERROR_MARKER = {'error': 'Failed to fetch session history'}
SESSION_ERROR_MESSAGE = 'Session fetch error'


@dataclass
class Job:
    """
    Backup job state enriched with its recent session history.

    ``fields`` holds the upstream job object untouched. ``sessions`` is keyed
    by session id in API order; ``session_error`` marks a job whose history
    could not be fetched.
    """
    fields: Dict[str, Any]
    sessions: Dict[str, SessionSummary] = field(default_factory=dict)
    last_message: Optional[str] = None
    session_error: bool = False

    @property
    def id(self) -> Any:
        return self.fields.get('id')

    @classmethod
    def from_sessions(cls, raw_job: Dict[str, Any], raw_sessions: List[Dict[str, Any]]) -> 'Job':
        """
        Reduce a descending-recency session list into an enriched job.

        Raises:
            TypeError: If a session entry is not an object
        """
        sessions: Dict[str, SessionSummary] = {}
        last_message = None

        for index, raw_session in enumerate(raw_sessions):
            if not isinstance(raw_session, dict):
                raise TypeError(f"Session entry {index} is {type(raw_session).__name__}, expected object")

            summary = SessionSummary.from_api(raw_session)
            sessions[_session_key(raw_session.get('id'))] = summary

            # Most recent session only
            if index == 0 and summary.message:
                last_message = summary.message

        return cls(fields=dict(raw_job), sessions=sessions, last_message=last_message)

    @classmethod
    def with_session_error(cls, raw_job: Any) -> 'Job':
        """
        Job whose session history could not be fetched.

        An entry that is not an object is kept under ``value``.
        """
        fields = dict(raw_job) if isinstance(raw_job, dict) else {'value': raw_job}
        return cls(fields=fields, last_message=SESSION_ERROR_MESSAGE, session_error=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation."""
        data = dict(self.fields)
        if self.session_error:
            data['sessions'] = dict(SESSION_ERROR_MARKER)
        else:
            data['sessions'] = {session_id: summary.to_dict() for session_id, summary in self.sessions.items()}
        if self.last_message is not None:
            data['lastMessage'] = self.last_message
        return data


def _session_key(session_id: Any) -> str:
    # JSON object keys are strings
    if session_id is None:
        return 'null'
    if isinstance(session_id, bool):
        return 'true' if session_id else 'false'
    return str(session_id)
