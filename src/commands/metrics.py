#!/usr/bin/env python3
"""
Metrics collection command.

Runs one collection and prints the resulting JSON document to stdout.
"""

import sys
import json
from argparse import Namespace

from .base import BaseCommand


class MetricsCommand(BaseCommand):
    """Collect backup job and repository metrics."""

    def execute(self, subcommand: str, args: Namespace) -> int:
        """Execute metrics subcommand."""
        try:
            if subcommand == "collect":
                return self.collect(args)
            else:
                available = ", ".join(self.get_available_subcommands())
                self.logger.error(f"Unknown subcommand '{subcommand}'. Available: {available}")
                return 1

        except Exception as e:
            return self.handle_error(e, f"metrics {subcommand}")

    def collect(self, args: Namespace) -> int:
        """Run a collection and print the document."""
        raw_params = self.load_params(args)
        aggregator = self.create_aggregator()
        output = aggregator.run(raw_params)

        if getattr(args, 'pretty', False):
            print(json.dumps(json.loads(output), indent=2, ensure_ascii=False))
        else:
            print(output)

        # stdout carries only the document
        if getattr(args, 'timings', False) and aggregator.last_run:
            print(json.dumps(aggregator.last_run.to_dict()), file=sys.stderr)

        document = json.loads(output)
        return 1 if 'error' in document else 0
