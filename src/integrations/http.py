#!/usr/bin/env python3
"""
Shared HTTP helpers for the Veeam REST integrations.
"""

from typing import Any, Optional

import requests

API_VERSION_HEADER = 'x-api-version'
USER_AGENT = 'VeeamMetricsCollector/1.0'


def create_session() -> requests.Session:
    """Create an HTTP session with the collector's default headers."""
    session = requests.Session()
    session.headers.update({
        'User-Agent': USER_AGENT,
        'Accept': 'application/json',
    })
    return session


def response_body(response: Any) -> Optional[str]:
    """Text body of a response, or None when the transport returned none."""
    body = getattr(response, 'text', None)
    return body if isinstance(body, str) else None


def describe_body(body: Optional[str]) -> str:
    """Render a body for error messages."""
    return 'null' if body is None else body
