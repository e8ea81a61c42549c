#!/usr/bin/env python3
"""
Metrics Aggregator

Top-level orchestration of one collection run:

    validate parameters -> login -> enrich jobs -> fetch repositories -> serialize

Every error raised anywhere in that chain is caught once, here, and turned
into the error document. ``run`` always returns exactly one JSON string.
"""

import json
import logging
from typing import Any, Callable, Optional

import requests

from .config import AppConfig, RunConfig, validate_params
from .enrichment import JobEnrichmentPipeline
from .exceptions import ConfigError, VeeamMetricsError
from .log_sink import LogSink, SEVERITY_WARNING
from .metrics_collector import MetricsCollector, RunMetrics
from .models import MetricsDocument, ErrorDocument
from integrations.http import create_session
from integrations.veeam_auth import AuthSession
from integrations.veeam_client import VeeamApiClient

logger = logging.getLogger(__name__)

ERROR_LOG_PREFIX = '[ VEEAM ] ERROR: '


def normalize_error_message(error: Any) -> str:
    """Stringify an error and make sure it ends with a period."""
    message = str(error)
    if not message.endswith('.'):
        message += '.'
    return message


def parse_params(raw_params: Any) -> Any:
    """Decode a JSON parameter string; mappings pass through."""
    if isinstance(raw_params, (str, bytes, bytearray)):
        try:
            return json.loads(raw_params)
        except ValueError as e:
            raise ConfigError(f"Failed to parse input parameters: {e}")
    return raw_params


class MetricsAggregator:
    """Runs a complete collection and produces the output document."""

    def __init__(self, app_config: Optional[AppConfig] = None, sink: Optional[LogSink] = None,
                 session_factory: Callable[[], requests.Session] = create_session):
        """
        Initialize aggregator.

        Args:
            app_config: Process-wide settings (timeout, workers, API version)
            sink: Monitoring log sink for the top-level error
            session_factory: Creates the HTTP session used for one run
        """
        self.app_config = app_config or AppConfig()
        self.sink = sink or LogSink()
        self.session_factory = session_factory
        self.last_run: Optional[RunMetrics] = None

    def collect(self, config: RunConfig, session: requests.Session,
                metrics: Optional[MetricsCollector] = None) -> MetricsDocument:
        """
        Log in and build the metrics document.

        Raises:
            AuthError, RequestError: Propagated unmodified
        """
        auth = AuthSession(session, timeout=self.app_config.http_timeout, api_version=self.app_config.api_version)
        client = VeeamApiClient(session, timeout=self.app_config.http_timeout, api_version=self.app_config.api_version)
        metrics = metrics or MetricsCollector()

        with metrics.time_operation('login'):
            token = auth.login(config)

        pipeline = JobEnrichmentPipeline(
            client, config, token,
            max_workers=self.app_config.max_workers,
            metrics=metrics,
        )
        jobs = pipeline.run()

        with metrics.time_operation('repositories_states'):
            repositories_states = pipeline.fetch_repositories_states()

        return MetricsDocument(jobs_states=jobs, repositories_states=repositories_states)

    def run(self, raw_params: Any) -> str:
        """
        Execute one run. Timings of the run are kept in ``last_run``.

        Args:
            raw_params: JSON parameter string or an already-decoded mapping

        Returns:
            Serialized metrics document, or serialized error document
        """
        metrics = MetricsCollector()
        metrics.start_run()

        try:
            config = validate_params(parse_params(raw_params))
            with self.session_factory() as session:
                document = self.collect(config, session, metrics)
            output = document.to_json()
        except Exception as e:
            if not isinstance(e, VeeamMetricsError):
                logger.debug("Unexpected error during collection", exc_info=True)
            message = normalize_error_message(e)
            self.sink.log(SEVERITY_WARNING, ERROR_LOG_PREFIX + message)
            self.last_run = metrics.end_run(success=False)
            return ErrorDocument(message).to_json()

        self.last_run = metrics.end_run(success=True)
        return output
