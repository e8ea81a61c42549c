#!/usr/bin/env python3
"""
Output documents.

A run produces exactly one of these, serialized to a single JSON string.
"""

import json
from typing import Dict, Any, List
from dataclasses import dataclass, field

from .job import Job


@dataclass
class MetricsDocument:
    """Successful run output: enriched jobs plus repository states."""
    jobs_states: List[Job] = field(default_factory=list)
    repositories_states: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'jobs_states': [job.to_dict() for job in self.jobs_states],
            'repositories_states': self.repositories_states,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


@dataclass
class ErrorDocument:
    """Failed run output."""
    error: str

    def to_dict(self) -> Dict[str, Any]:
        return {'error': self.error}

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)
