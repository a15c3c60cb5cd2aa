# src/fnprotect/cli/formatter.py
from typing import Any, Dict

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from fnprotect.core.models import GuardRecord

console = Console()


class GuardFormatter:
    """
    GuardFormatter: the visual side of the CLI.
    Renders response documents, guard-record tables and run summaries.
    """

    def __init__(self, out: Console = None):
        self.console = out or console

    def display_document(self, text: str, lexer: str = "yaml", title: str = "Function Response"):
        syntax = Syntax(text.rstrip(), lexer, theme="monokai", line_numbers=False)
        self.console.print(Panel(syntax, title=title, border_style="green"))

    def show_results(self, response: Dict[str, Any]):
        """Prints every result the function reported (fatal ones in red)."""
        for result in response.get("results", []):
            color = "red" if result.get("severity") == "SEVERITY_FATAL" else "yellow"
            self.console.print(f"[bold {color}]{result.get('severity')}:[/bold {color}] {result.get('message')}")

    def print_guard_table(self, records: Dict[str, GuardRecord]):
        table = Table(title="Deletion Protection Report", show_lines=True, header_style="bold magenta")
        table.add_column("Key", style="cyan")
        table.add_column("Kind")
        table.add_column("Name", style="white")
        table.add_column("Namespace", style="dim")
        table.add_column("Protects")
        table.add_column("Reason")

        for key in sorted(records):
            r = records[key]
            table.add_row(
                key, r.kind, r.name, r.namespace or "-",
                f"{r.of_kind}/{r.of_name}", r.reason.name,
            )

        self.console.print(table)

    def print_summary(self, summary: Dict[str, Any]):
        reasons = "\n".join(f"  {name}: {count}" for name, count in sorted(summary["by_reason"].items()))
        self.console.print(Panel(
            f"[bold white]Summary Report[/bold white]\n"
            f"════════════════════════════════════════\n"
            f"Protected:        [green]{summary['protected_count']}[/green]\n"
            f"Composed guards:  {summary['composed_guards']}\n"
            f"Required guards:  {summary['required_guards']}\n"
            f"By reason:\n{reasons or '  none'}",
            border_style="dim"
        ))
