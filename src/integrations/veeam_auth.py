#!/usr/bin/env python3
"""
Veeam REST API authentication.

Exchanges user credentials for a bearer token with the OAuth2 password
grant. One attempt per run; the token is never cached.
"""

import json
import logging
from typing import Dict, Optional

import requests

from core.config import RunConfig, DEFAULT_API_VERSION
from core.exceptions import AuthError
from .http import API_VERSION_HEADER, create_session, response_body, describe_body

logger = logging.getLogger(__name__)

TOKEN_PATH = 'api/oauth2/token'

AuthToken = str


class AuthSession:
    """Obtains the bearer token used by every subsequent API request."""

    def __init__(self, session: Optional[requests.Session] = None, timeout: float = 30.0,
                 api_version: str = DEFAULT_API_VERSION):
        """
        Initialize auth session.

        Args:
            session: HTTP session to send the token request through
            timeout: Request timeout in seconds
            api_version: Value of the API version header
        """
        self.session = session or create_session()
        self.timeout = timeout
        self.api_version = api_version
        self.token: Optional[AuthToken] = None

    @staticmethod
    def build_form(user: str, password: str) -> Dict[str, str]:
        """Password grant fields; requests form-encodes them."""
        return {
            'grant_type': 'password',
            'username': user,
            'password': password,
        }

    def login(self, config: RunConfig) -> AuthToken:
        """
        Exchange the configured credentials for a bearer token.

        Args:
            config: Validated run configuration

        Returns:
            Bearer token string

        Raises:
            AuthError: On a non-200 status, missing body, unparseable body or
                missing ``access_token``
        """
        url = config.url(TOKEN_PATH)
        headers = {
            'Content-Type': 'application/x-www-form-urlencoded',
            API_VERSION_HEADER: self.api_version,
        }

        logger.info(f"Requesting access token from {url}")
        try:
            response = self.session.post(
                url,
                data=self.build_form(config.user, config.password),
                headers=headers,
                proxies=config.proxies,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Token request to {url} failed: {e}")
            raise AuthError(f"Login request failed: {e}", original_error=e)

        status = response.status_code
        body = response_body(response)
        if status != 200 or body is None:
            raise AuthError(f"Login failed with status code {status}: {describe_body(body)}", status_code=status)

        try:
            data = json.loads(body)
        except ValueError as e:
            raise AuthError("Failed to parse authentication token for the logon session.",
                            status_code=status, original_error=e)

        if not isinstance(data, dict) or 'access_token' not in data:
            raise AuthError("Auth response does not contain access token.", status_code=status)

        self.token = data['access_token']
        logger.info("Access token obtained")
        return self.token
