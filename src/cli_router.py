#!/usr/bin/env python3
"""
CLI Router for the Veeam metrics collector.

Modular command architecture: each top-level command maps to a command class.
"""

import argparse
import logging
import sys
from typing import Optional, List

from core.env_loader import load_env_file
from commands import get_command, COMMANDS

logger = logging.getLogger(__name__)


def enable_debug_logging() -> None:
    """Lower the root logger and its handlers to DEBUG."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in root.handlers:
        handler.setLevel(logging.DEBUG)


class CLIRouter:
    """
    CLI router for collector commands.

    Command structure:
    - python run.py metrics collect --params '{"api_endpoint": ...}'
    - python run.py metrics collect --params-file params.json
    - python run.py health check
    """

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description="Veeam Backup REST API metrics collector",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=self._get_examples_text()
        )

        subparsers = parser.add_subparsers(
            dest='command',
            help='Available commands',
            metavar='{command}'
        )

        self._add_metrics_parser(subparsers)
        self._add_health_parser(subparsers)

        return parser

    @staticmethod
    def _add_params_arguments(parser: argparse.ArgumentParser) -> None:
        source = parser.add_mutually_exclusive_group()
        source.add_argument('--params', help='Input parameters as a JSON document')
        source.add_argument('--params-file', help='Read the JSON parameter document from a file ("-" for stdin)')

    def _add_metrics_parser(self, subparsers):
        """Add metrics command parser."""
        metrics_parser = subparsers.add_parser(
            'metrics',
            help='Collect job and repository metrics'
        )

        metrics_subparsers = metrics_parser.add_subparsers(
            dest='subcommand',
            help='Metrics operations',
            metavar='{collect}'
        )

        collect_parser = metrics_subparsers.add_parser('collect', help='Run one collection and print the JSON document')
        self._add_params_arguments(collect_parser)
        collect_parser.add_argument('--pretty', action='store_true', help='Indent the JSON output')
        collect_parser.add_argument('--timings', action='store_true', help='Write per-phase run timings as JSON to stderr')
        collect_parser.add_argument('--verbose', action='store_true', help='Verbose output')

    def _add_health_parser(self, subparsers):
        """Add health command parser."""
        health_parser = subparsers.add_parser(
            'health',
            help='Configuration and connectivity diagnostics'
        )

        health_subparsers = health_parser.add_subparsers(
            dest='subcommand',
            help='Health operations',
            metavar='{check}'
        )

        check_parser = health_subparsers.add_parser('check', help='Validate parameters and test login')
        self._add_params_arguments(check_parser)
        check_parser.add_argument('--json', action='store_true', help='Print error details as JSON')
        check_parser.add_argument('--verbose', action='store_true', help='Verbose output')

    def _get_examples_text(self) -> str:
        """Get examples text for help."""
        return """
Examples:
  python run.py metrics collect --params '{"api_endpoint": "https://veeam:4443", "user": "admin", "password": "secret", "created_after": 7}'
  python run.py metrics collect --params-file params.json --pretty
  VEEAM_API_ENDPOINT=https://veeam:4443 ... python run.py metrics collect
  python run.py health check --params-file params.json
"""

    def route_command(self, args: Optional[List[str]] = None) -> int:
        """
        Route command to appropriate handler.

        Args:
            args: Command line arguments (uses sys.argv if None)

        Returns:
            Exit code
        """
        try:
            if args is None:
                args = sys.argv[1:]

            parsed_args = self.parser.parse_args(args)

            if not parsed_args.command:
                self.parser.print_help()
                return 1

            if getattr(parsed_args, 'verbose', False):
                enable_debug_logging()

            return self._handle_command(parsed_args)

        except SystemExit as e:
            # argparse calls sys.exit() on error or help
            return e.code if e.code is not None else 0
        except Exception as e:
            logger.error(f"CLI routing error: {e}", exc_info=True)
            return 1

    def _handle_command(self, args: argparse.Namespace) -> int:
        """Handle command structure."""
        logger.debug(f"Handling command: {args.command}")

        if args.command not in COMMANDS:
            available = ', '.join(COMMANDS.keys())
            logger.error(f"Unknown command '{args.command}'. Available: {available}")
            return 1

        subcommand = getattr(args, 'subcommand', None)
        if not subcommand:
            logger.error(f"No subcommand specified for '{args.command}'")
            self.parser.parse_args([args.command, '--help'])
            return 1

        try:
            command = get_command(args.command)
            return command.execute(subcommand, args)
        except Exception as e:
            logger.error(f"Error executing {args.command} {subcommand}: {e}", exc_info=True)
            return 1


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if None)

    Returns:
        Exit code
    """
    # stdout carries only the JSON document
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )

    load_env_file()

    try:
        from core.config import get_config_manager
        get_config_manager().update_logging()
    except ValueError as e:
        logger.error(str(e))
        return 1

    router = CLIRouter()
    return router.route_command(args)


if __name__ == '__main__':
    sys.exit(main())
