"""Rich-powered console output for prfiles."""

from __future__ import annotations

import logging

from rich.console import Console as RichConsole
from rich.logging import RichHandler
from rich.table import Table

from prfiles.index import FileIndex


class Console:
    """Terminal status output. Goes to stderr so reports can be piped."""

    def __init__(self) -> None:
        self.console = RichConsole(stderr=True)

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def warning(self, message: str) -> None:
        self.console.print(f"[yellow]![/yellow] {message}")

    def info(self, message: str) -> None:
        self.console.print(f"[blue]i[/blue] {message}")

    def show_summary(self, index: FileIndex, pull_request_count: int) -> None:
        """Display the most contended files in a table."""
        table = Table(title="Files touched by open pull requests", border_style="cyan")
        table.add_column("File", style="bold")
        table.add_column("PRs", justify="right", style="cyan")

        for entry in sorted(index.entries(), key=lambda e: (-e.count, e.path))[:10]:
            table.add_row(entry.path, str(entry.count))

        self.console.print(table)
        self.info(f"{len(index)} files across {pull_request_count} pull requests")

    def configure_logging(self, verbose: bool = False) -> None:
        """Route library logging through rich."""
        handler = RichHandler(console=self.console, show_path=False)
        logging.basicConfig(
            level=logging.DEBUG if verbose else logging.WARNING,
            format="%(name)s: %(message)s",
            handlers=[handler],
            force=True,
        )
