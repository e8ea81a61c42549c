#!/usr/bin/env python3
"""
Authenticated Veeam REST API client.

Issues GET requests with the bearer token and decodes JSON responses.
Every failure surfaces as ``RequestError``.
"""

import json
import logging
from typing import Any, Dict, Optional

import requests

from core.config import DEFAULT_API_VERSION
from core.exceptions import RequestError
from .http import API_VERSION_HEADER, create_session, response_body, describe_body

logger = logging.getLogger(__name__)


class VeeamApiClient:
    """Client for authenticated GET requests against the Veeam REST API."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 30.0,
                 api_version: str = DEFAULT_API_VERSION):
        """
        Initialize API client.

        Args:
            session: HTTP session to send requests through
            timeout: Request timeout in seconds
            api_version: Value of the API version header
        """
        self.session = session or create_session()
        self.timeout = timeout
        self.api_version = api_version

    def get(self, url: str, token: Optional[str], proxies: Optional[Dict[str, str]] = None) -> Any:
        """
        Fetch and decode a JSON resource.

        Without a token the request is not sent and the status check fails
        with status code 0.

        Args:
            url: Absolute resource URL
            token: Bearer token from login
            proxies: Optional ``requests`` proxy mapping

        Returns:
            Decoded JSON value

        Raises:
            RequestError: On a non-200 status, missing body or unparseable body
        """
        status = 0
        body = None

        if token:
            headers = {
                'Authorization': f'Bearer {token}',
                API_VERSION_HEADER: self.api_version,
            }
            logger.debug(f"GET {url}")
            try:
                response = self.session.get(url, headers=headers, proxies=proxies, timeout=self.timeout)
            except requests.RequestException as e:
                logger.warning(f"Request to {url} failed: {e}")
                raise RequestError(f"Request to {url} failed: {e}", url=url, original_error=e)
            status = response.status_code
            body = response_body(response)
        else:
            logger.warning(f"No access token available, skipping request to {url}")

        if status != 200 or body is None:
            raise RequestError(f"Request failed with status code {status}: {describe_body(body)}",
                               url=url, status_code=status)

        try:
            return json.loads(body)
        except ValueError as e:
            raise RequestError("Failed to parse response received from API.",
                               url=url, status_code=status, original_error=e)

    def close(self) -> None:
        self.session.close()
