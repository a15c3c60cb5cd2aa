#!/usr/bin/env python3
"""
FNPROTECT CLI
-------------
Feeds a RunFunctionRequest document (YAML or JSON) through the deletion
protection function and renders the outcome.

  fnprotect run request.yaml          print the response document
  fnprotect inspect request.yaml      table of synthesized guard records
  fnprotect inspect --documents ...   the same, plus the records as YAML

Author: FnProtect Team
Date: 2026-10-18
"""

import sys
import json
import argparse
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.logging import RichHandler
from ruamel.yaml import YAML, YAMLError

from fnprotect.function.handler import DeletionProtectionFunction
from fnprotect.function.response import ResponseBuilder
from fnprotect.guard.exporter import GuardExporter
from fnprotect.cli.formatter import GuardFormatter

# Diagnostics go to stderr so `run` output stays pipeable
console = Console(stderr=True)


class FnProtectCLI:
    """
    CLI wrapper that translates user commands into function invocations.
    """

    def __init__(self):
        self.parser = argparse.ArgumentParser(
            prog="fnprotect",
            description="FnProtect - deletion protection for composite resources",
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        self.exporter = GuardExporter()
        self.formatter = GuardFormatter(Console())
        self._setup_args()

    def _setup_args(self):
        self.parser.add_argument("-v", "--version", action="version", version="fnprotect v0.1.0")
        self.parser.add_argument("--debug", action="store_true", help="Enable debug logging")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        run_parser = subparsers.add_parser("run", help="Run the function against a request file")
        self._add_common(run_parser)
        run_parser.add_argument("-o", "--output", choices=["yaml", "json"], default="yaml",
                                help="Response format (default: yaml)")

        inspect_parser = subparsers.add_parser("inspect", help="Show the guard records a request produces")
        self._add_common(inspect_parser)
        inspect_parser.add_argument("--documents", action="store_true",
                                    help="Also print the guard records as YAML documents")

    def _add_common(self, parser: argparse.ArgumentParser):
        parser.add_argument("path", help="Path to a RunFunctionRequest (YAML or JSON)")
        parser.add_argument("--legacy", action="store_true", default=None,
                            help="Emit legacy apiextensions Usages (overrides enableV1Mode)")
        parser.add_argument("--cache-ttl", default=None, help="Response cache TTL, e.g. 5m (overrides cacheTTL)")

    def load_request(self, path: str) -> Optional[Dict[str, Any]]:
        request_path = Path(path)
        if not request_path.is_file():
            console.print(f"[bold red]Error:[/bold red] Path '{path}' not found.")
            return None
        try:
            request = YAML(typ='safe').load(request_path.read_text(encoding='utf-8-sig'))
        except YAMLError as e:
            console.print(f"[bold red]Error:[/bold red] cannot parse '{path}': {e}")
            return None
        if not isinstance(request, dict):
            console.print(f"[bold red]Error:[/bold red] '{path}' does not hold a request object.")
            return None
        return request

    def _function(self, args: argparse.Namespace) -> DeletionProtectionFunction:
        return DeletionProtectionFunction(legacy_override=args.legacy, cache_ttl_override=args.cache_ttl)

    def cmd_run(self, args: argparse.Namespace) -> int:
        request = self.load_request(args.path)
        if request is None:
            return 2

        response = self._function(args).run_function(request)
        if args.output == "json":
            sys.stdout.write(json.dumps(response, indent=2, sort_keys=True) + "\n")
        else:
            sys.stdout.write(self.exporter.dump(response))
        return 1 if ResponseBuilder.is_fatal(response) else 0

    def cmd_inspect(self, args: argparse.Namespace) -> int:
        request = self.load_request(args.path)
        if request is None:
            return 2

        fn = self._function(args)
        response, result = fn.evaluate(request)
        self.formatter.show_results(response)
        if result is None:
            return 1

        self.formatter.print_guard_table(result.guard_records)
        if args.documents and result.guard_records:
            self.formatter.display_document(self.exporter.export(list(result.guard_records.values())),
                                            title="Guard Records")
        self.formatter.print_summary(fn.orchestrator.generate_summary(result))
        return 0

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        args = self.parser.parse_args(argv)
        logging.basicConfig(
            level=logging.DEBUG if args.debug else logging.WARNING,
            format="%(name)s: %(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )

        if args.command == "run":
            return self.cmd_run(args)
        if args.command == "inspect":
            return self.cmd_inspect(args)
        self.parser.print_help()
        return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point with interrupt handling."""
    try:
        return FnProtectCLI().run(argv)
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
