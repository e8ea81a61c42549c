#!/usr/bin/env python3
"""
Job Enrichment Pipeline

Fetches the job state list, then for every job fetches its most recent
sessions and reduces them into the job record. Each job is enriched inside
its own failure boundary: a job whose history cannot be fetched or reduced
is kept with an error marker and the run carries on.

Session fetches run sequentially by default. With ``max_workers > 1`` they
run on a bounded thread pool; output order still follows the job list.
"""

import logging
import concurrent.futures
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from .config import RunConfig
from .exceptions import EnrichmentError
from .metrics_collector import MetricsCollector
from .models import Job
from .result import Result, attempt, recover

logger = logging.getLogger(__name__)

JOBS_STATES_PATH = 'api/v1/jobs/states'
SESSIONS_PATH = 'api/v1/sessions'
REPOSITORIES_STATES_PATH = 'api/v1/backupInfrastructure/repositories/states'


def response_data(response: Any) -> List[Any]:
    """
    The ``data`` list of a paged response.

    A missing or null ``data`` means empty. Any other non-list value raises
    ``TypeError``, including empty objects and strings.
    """
    data = response.get('data') if isinstance(response, dict) else None
    if data is None:
        return []
    if not isinstance(data, list):
        raise TypeError(f"Response data is {type(data).__name__}, expected list")
    return data


class JobEnrichmentPipeline:
    """Builds the enriched, ordered job list for one run."""

    def __init__(self, client, config: RunConfig, token: str, max_workers: int = 1,
                 metrics: Optional[MetricsCollector] = None):
        """
        Initialize pipeline.

        Args:
            client: API client exposing ``get(url, token, proxies)``
            config: Validated run configuration
            token: Bearer token from login
            max_workers: Concurrent session fetches (1 = sequential)
            metrics: Optional run timing collector
        """
        self.client = client
        self.config = config
        self.token = token
        self.max_workers = max(1, max_workers)
        self.metrics = metrics

    def _get(self, path: str) -> Any:
        return self.client.get(self.config.url(path), self.token, self.config.proxies)

    def sessions_path(self, job_id: Any) -> str:
        return (
            f"{SESSIONS_PATH}?jobIdFilter={quote(str(job_id), safe='')}"
            f"&limit={self.config.session_history_depth}&orderDesc=true"
        )

    def fetch_jobs(self) -> List[Any]:
        """Fetch job states. Failures propagate."""
        jobs = response_data(self._get(JOBS_STATES_PATH))
        logger.info(f"Fetched {len(jobs)} job states")
        return jobs

    def fetch_repositories_states(self) -> Any:
        """Fetch repository states. Failures propagate and abort the run."""
        return self._get(REPOSITORIES_STATES_PATH)

    def _enrich(self, raw_job: Any) -> Job:
        if not isinstance(raw_job, dict):
            raise TypeError(f"Job entry is {type(raw_job).__name__}, expected object")

        job_id = raw_job.get('id')
        if job_id is None or job_id == '':
            raise ValueError("Job entry has no id")

        sessions = response_data(self._get(self.sessions_path(job_id)))
        return Job.from_sessions(raw_job, sessions)

    def enrich_job(self, raw_job: Any) -> 'Result[Job, EnrichmentError]':
        """
        Enrich one job, capturing any failure as ``Err``.

        Never raises.
        """
        job_id = raw_job.get('id') if isinstance(raw_job, dict) else None
        return attempt(
            lambda: self._enrich(raw_job),
            lambda e: EnrichmentError(job_id, str(e), original_error=e),
        )

    def _recover(self, raw_job: Any, result: 'Result[Job, EnrichmentError]') -> Job:
        def fallback(error: EnrichmentError) -> Job:
            logger.warning(str(error))
            if self.metrics:
                self.metrics.increment_stat('jobs_failed')
            return Job.with_session_error(raw_job)

        return recover(result, fallback)

    def enrich_jobs(self, raw_jobs: List[Any]) -> List[Job]:
        """Enrich every job, preserving the input order."""
        if self.metrics:
            self.metrics.record_stat('jobs_total', len(raw_jobs))

        if self.max_workers == 1 or len(raw_jobs) < 2:
            results = [self.enrich_job(raw_job) for raw_job in raw_jobs]
        else:
            workers = min(self.max_workers, len(raw_jobs))
            logger.debug(f"Enriching {len(raw_jobs)} jobs with {workers} workers")
            with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(self.enrich_job, raw_jobs))

        return [self._recover(raw_job, result) for raw_job, result in zip(raw_jobs, results)]

    def run(self) -> List[Job]:
        """Fetch job states and enrich each of them."""
        if self.metrics:
            with self.metrics.time_operation('jobs_states'):
                raw_jobs = self.fetch_jobs()
            with self.metrics.time_operation('sessions'):
                return self.enrich_jobs(raw_jobs)

        return self.enrich_jobs(self.fetch_jobs())
