#!/usr/bin/env python3
"""
Centralized Configuration

Two layers live here:

- ``RunConfig``: the validated input parameters of a single collection run.
  Built by ``validate_params`` before any network activity.
- ``AppConfig``: process-wide settings (HTTP timeout, worker pool size,
  logging) read from the environment by ``ConfigManager``.
"""

import os
import math
import logging
from dataclasses import dataclass
from typing import Optional, Any, Mapping, Union

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

REQUIRED_PARAMS = ('api_endpoint', 'user', 'password', 'created_after')
DEFAULT_SESSION_HISTORY_DEPTH = 3
DEFAULT_API_VERSION = '1.1-rev2'


@dataclass(frozen=True)
class RunConfig:
    """Validated parameters for one collection run."""
    api_endpoint: str
    user: str
    password: str
    created_after: Union[int, float]
    http_proxy: Optional[str] = None
    session_history_depth: int = DEFAULT_SESSION_HISTORY_DEPTH

    @property
    def proxies(self) -> Optional[dict]:
        """Proxy mapping in the form ``requests`` expects."""
        if not self.http_proxy:
            return None
        return {'http': self.http_proxy, 'https': self.http_proxy}

    def url(self, path: str) -> str:
        """Absolute URL for an API path relative to the endpoint."""
        return self.api_endpoint + path


def _is_unset(value: Any) -> bool:
    return value is None or value == ''


def _parse_created_after(value: Any) -> Union[int, float]:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            raise ConfigError.invalid('created_after', _created_after_message(value))
        if number.is_integer():
            number = int(number)
    else:
        raise ConfigError.invalid('created_after', _created_after_message(value))

    if isinstance(number, float) and math.isnan(number):
        raise ConfigError.invalid('created_after', _created_after_message(value))
    return number


def _created_after_message(value: Any) -> str:
    return f'Incorrect "created_after" parameter given: {value}\nMust be between 1 and 365 days.'


def _parse_history_depth(value: Any) -> int:
    # Falsy values fall back to the default
    if not value:
        return DEFAULT_SESSION_HISTORY_DEPTH

    try:
        depth = int(value)
    except (TypeError, ValueError):
        depth = 0
    if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()) or depth < 1:
        raise ConfigError.invalid(
            'session_history_depth',
            f'Incorrect "session_history_depth" parameter given: {value}. Must be a positive integer.'
        )
    return depth


def validate_params(params: Any) -> RunConfig:
    """
    Validate and normalize raw input parameters.

    Args:
        params: Mapping parsed from the input JSON document

    Returns:
        Immutable, normalized run configuration

    Raises:
        ConfigError: Naming the first missing field, or describing an invalid value
    """
    if not isinstance(params, Mapping):
        raise ConfigError.missing(REQUIRED_PARAMS[0])

    for field_name in REQUIRED_PARAMS:
        if _is_unset(params.get(field_name)):
            raise ConfigError.missing(field_name)

    api_endpoint = str(params['api_endpoint'])
    if not api_endpoint.endswith('/'):
        api_endpoint += '/'

    created_after = _parse_created_after(params['created_after'])
    # Both bounds are excluded
    if created_after >= 365 or created_after <= 1:
        raise ConfigError.invalid('created_after', _created_after_message(params['created_after']))

    http_proxy = params.get('http_proxy') or None

    config = RunConfig(
        api_endpoint=api_endpoint,
        user=str(params['user']),
        password=str(params['password']),
        created_after=created_after,
        http_proxy=str(http_proxy) if http_proxy else None,
        session_history_depth=_parse_history_depth(params.get('session_history_depth')),
    )
    logger.debug(f"Validated parameters for endpoint {config.api_endpoint}")
    return config


@dataclass
class AppConfig:
    """Process-wide collector settings."""
    http_timeout: float = 30.0
    max_workers: int = 1
    api_version: str = DEFAULT_API_VERSION
    log_level: str = "INFO"
    verbose_logging: bool = False


class ConfigManager:
    """Builds and validates ``AppConfig`` from environment variables."""

    def __init__(self):
        self._config: Optional[AppConfig] = None

    def get_config(self, force_reload: bool = False) -> AppConfig:
        """
        Get application configuration.

        Args:
            force_reload: Force reloading configuration from environment
        """
        if self._config is None or force_reload:
            self._config = self._build_config()
        return self._config

    def _build_config(self) -> AppConfig:
        try:
            config = AppConfig(
                http_timeout=float(os.getenv('HTTP_TIMEOUT', '30')),
                max_workers=int(os.getenv('MAX_WORKERS', '1')),
                api_version=os.getenv('API_VERSION', DEFAULT_API_VERSION),
                log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
                verbose_logging=os.getenv('VERBOSE_LOGGING', 'false').lower() == 'true'
            )
        except ValueError as e:
            raise ValueError(f"Configuration validation failed: {e}")

        self._validate_config(config)
        return config

    def _validate_config(self, config: AppConfig) -> None:
        """Validate configuration values."""
        errors = []

        if config.http_timeout <= 0:
            errors.append("HTTP_TIMEOUT must be greater than 0 seconds")

        if config.max_workers < 1 or config.max_workers > 20:
            errors.append("MAX_WORKERS must be between 1 and 20")

        if not config.api_version:
            errors.append("API_VERSION must not be empty")

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if config.log_level not in valid_log_levels:
            errors.append(f"LOG_LEVEL must be one of: {', '.join(valid_log_levels)}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        logger.debug("Configuration validation passed")

    def update_logging(self) -> None:
        """Configure logging based on current configuration."""
        config = self.get_config()

        numeric_level = getattr(logging, config.log_level)
        logging.getLogger().setLevel(numeric_level)

        if config.verbose_logging:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        else:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        for handler in logging.getLogger().handlers:
            handler.setLevel(numeric_level)
            handler.setFormatter(logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S'))


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> AppConfig:
    """Get application configuration."""
    return get_config_manager().get_config()


def reset_config() -> None:
    """Reset configuration manager (useful for testing)."""
    global _config_manager
    _config_manager = None
