#!/usr/bin/env python3
"""
Health check command for monitoring system status.

Validates collector parameters and settings and tries a login against the
API without collecting metrics.
"""

import json
from argparse import Namespace

from .base import BaseCommand
from core.aggregator import parse_params
from core.config import validate_params
from core.exceptions import VeeamMetricsError


class HealthCommand(BaseCommand):
    """Handle system health monitoring and diagnostics."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute health subcommand."""
        try:
            if subcommand == "check":
                return self.check(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return 1

        except Exception as e:
            return self.handle_error(e, f"health {subcommand}")

    def check(self, args: Namespace) -> int:
        """Run health check."""
        print("🏥 Collector Health Check")
        print("=" * 50)

        print("\n⚙️  Configuration:")
        try:
            app_config = self.config
            print(f"  ✅ Settings: timeout {app_config.http_timeout}s, "
                  f"{app_config.max_workers} worker(s), API version {app_config.api_version}")
        except ValueError as e:
            print(f"  ❌ Settings: {e}")
            return 1

        try:
            run_config = validate_params(parse_params(self.load_params(args)))
            print(f"  ✅ Parameters: OK (endpoint {run_config.api_endpoint})")
        except VeeamMetricsError as e:
            print(f"  ❌ Parameters: {e}")
            return 1

        print("\n🔌 API Status:")
        auth = self.create_auth_session()
        try:
            auth.login(run_config)
            print("  ✅ Login: OK")
        except VeeamMetricsError as e:
            print(f"  ❌ Login: {e}")
            if getattr(args, 'json', False):
                print(json.dumps(e.to_dict(), ensure_ascii=False))
            return 1
        finally:
            auth.session.close()

        print("\n" + "=" * 50)
        print("🎉 Collector is healthy")
        return 0
