#!/usr/bin/env python3
"""
Base command class for the modular command architecture.

Provides common functionality and interface that all commands inherit.
Uses dependency injection for better testability and maintainability.
"""

import sys
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, List
from argparse import Namespace

from core.container import get_container
from core.env_loader import get_params_from_env

logger = logging.getLogger(__name__)


class BaseCommand(ABC):
    """
    Base class for all command endpoints.

    Provides access to configuration and services via the dependency
    injection container, parameter loading, and error handling.
    """

    def __init__(self, container=None):
        """
        Initialize base command with dependency injection container.

        Args:
            container: Optional container instance. If None, uses global container.
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self._container = container or get_container()

    @property
    def config(self):
        """Get configuration from container."""
        return self._container.get('config')

    def create_aggregator(self):
        """Create new metrics aggregator instance."""
        return self._container.get('aggregator')

    def create_auth_session(self):
        """Create new auth session instance."""
        return self._container.get('auth_session')

    def load_params(self, args: Namespace) -> Any:
        """
        Resolve raw input parameters.

        Order: ``--params`` string, ``--params-file`` (``-`` for stdin),
        then VEEAM_* environment variables.
        """
        params = getattr(args, 'params', None)
        if params:
            return params

        params_file = getattr(args, 'params_file', None)
        if params_file == '-':
            return sys.stdin.read()
        if params_file:
            with open(params_file, 'r', encoding='utf-8') as f:
                return f.read()

        self.logger.debug("No parameter document given, reading VEEAM_* environment variables")
        return json.dumps(get_params_from_env())

    @abstractmethod
    def execute(self, subcommand: str, args: Namespace) -> int:
        """
        Execute the command with given subcommand and arguments.

        Returns:
            Exit code (0 for success, non-zero for error)
        """
        pass

    def get_available_subcommands(self) -> List[str]:
        """List public methods usable as subcommands."""
        methods = []
        for attr_name in dir(self):
            if attr_name.startswith('_') or not callable(getattr(self, attr_name)):
                continue
            if attr_name.startswith(('create_', 'load_', 'get_')) or attr_name in ('execute', 'handle_error'):
                continue
            methods.append(attr_name)
        return methods

    def handle_error(self, error: Exception, context: str = "") -> int:
        """
        Standard error handling for commands.

        Returns:
            Appropriate exit code
        """
        error_msg = f"{context}: {error}" if context else str(error)
        self.logger.error(error_msg, exc_info=True)

        if isinstance(error, KeyboardInterrupt):
            self.logger.info("Command interrupted by user")
            return 130
        elif isinstance(error, FileNotFoundError):
            return 2
        elif isinstance(error, PermissionError):
            return 13
        elif isinstance(error, ValueError):
            return 22
        else:
            return 1
