#!/usr/bin/env python3
"""
Dependency Injection Container

Provides a centralized way to manage dependencies and avoid scattered
instantiation throughout the codebase. Supports singleton and factory patterns.
"""

import logging
from typing import Any, Dict, Callable, TypeVar, Optional
from functools import wraps
import threading

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Container:
    """Simple dependency injection container with lifecycle management."""

    def __init__(self):
        self._factories: Dict[str, Callable] = {}
        self._singletons: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def register_singleton(self, service_name: str, factory: Callable[[], T]) -> None:
        """
        Register a service as singleton (created once, reused).

        Args:
            service_name: Unique name for the service
            factory: Function that creates the service instance
        """
        with self._lock:
            self._factories[service_name] = factory
            # Force recreation on next get()
            self._singletons.pop(service_name, None)

    def register_factory(self, service_name: str, factory: Callable[[], T]) -> None:
        """Register a service as factory (new instance each time)."""
        with self._lock:
            self._factories[service_name] = factory

    def register_instance(self, service_name: str, instance: T) -> None:
        """Register an existing instance as singleton."""
        with self._lock:
            self._singletons[service_name] = instance

    def get(self, service_name: str) -> Any:
        """
        Get service instance by name.

        Raises:
            KeyError: If service is not registered
        """
        with self._lock:
            if service_name in self._singletons:
                return self._singletons[service_name]

            if service_name not in self._factories:
                raise KeyError(f"Service '{service_name}' not registered")

            factory = self._factories[service_name]

        # Factories may resolve their own dependencies through get()
        instance = factory()

        if getattr(factory, '_is_singleton', False):
            with self._lock:
                if service_name not in self._singletons:
                    self._singletons[service_name] = instance
                    logger.debug(f"Created singleton instance for '{service_name}'")
                return self._singletons[service_name]

        logger.debug(f"Created new instance for '{service_name}'")
        return instance

    def clear(self) -> None:
        """Clear all registered services and instances."""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()


def singleton(factory_func: Callable[[], T]) -> Callable[[], T]:
    """Decorator to mark a factory function as singleton."""
    @wraps(factory_func)
    def wrapper():
        return factory_func()

    wrapper._is_singleton = True
    return wrapper


# Global container instance
_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get global container instance (thread-safe singleton)."""
    global _container
    if _container is None:
        with _container_lock:
            if _container is None:
                _container = Container()
                _setup_default_services(_container)
    return _container


def reset_container() -> None:
    """Reset global container (useful for testing)."""
    global _container
    with _container_lock:
        if _container:
            _container.clear()
        _container = None


def _setup_default_services(container: Container) -> None:
    """Set up default service registrations with configuration injection."""

    @singleton
    def create_config():
        from core.config import get_config
        return get_config()

    @singleton
    def create_log_sink():
        from core.log_sink import LogSink
        return LogSink()

    def create_http_session():
        from integrations.http import create_session
        return create_session()

    def create_auth_session():
        from integrations.veeam_auth import AuthSession
        config = container.get('config')
        return AuthSession(timeout=config.http_timeout, api_version=config.api_version)

    def create_aggregator():
        from core.aggregator import MetricsAggregator
        return MetricsAggregator(
            app_config=container.get('config'),
            sink=container.get('log_sink'),
            session_factory=lambda: container.get('http_session'),
        )

    container.register_singleton('config', create_config)
    container.register_singleton('log_sink', create_log_sink)

    # Non-singletons
    container.register_factory('http_session', create_http_session)
    container.register_factory('auth_session', create_auth_session)
    container.register_factory('aggregator', create_aggregator)

    logger.debug("Default services registered in container")
