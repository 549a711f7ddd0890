#!/usr/bin/env python
"""
Output formatting with Rich console.
"""

from __future__ import annotations

from typing import Iterable

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

from hostlink.sessions import RemoteEntry
from hostlink.trust import FingerprintResult, FingerprintStatus, TrustRecord


custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
    "success": "green",
})

_STATUS_STYLE = {
    FingerprintStatus.NEW: "yellow",
    FingerprintStatus.MATCH: "green",
    FingerprintStatus.CHANGED: "bold red",
    FingerprintStatus.ERROR: "red",
}


class ConsoleOutput:
    """Console output with Rich formatting."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console(theme=custom_theme)

    def print(self, text: str = "", **kwargs):
        """Print text to console."""
        self.console.print(text, **kwargs)

    def print_error(self, text: str):
        """Print error text."""
        self.console.print(f"[red]Error:[/red] {escape(text)}")

    def print_success(self, text: str):
        """Print success text."""
        self.console.print(f"[green]Success:[/green] {text}")

    def print_warning(self, text: str):
        """Print warning text."""
        self.console.print(f"[yellow]Warning:[/yellow] {text}")

    def print_info(self, text: str):
        """Print info text."""
        self.console.print(f"[cyan]Info:[/cyan] {text}")

    def print_fingerprint(self, target: str, result: FingerprintResult):
        style = _STATUS_STYLE[result.status]
        self.console.print(f"[bold]{escape(target)}[/bold]: [{style}]{result.status.value.upper()}[/{style}]")
        if result.status is FingerprintStatus.ERROR:
            self.console.print(f"  {escape(result.error or '')}")
            return
        self.console.print(f"  Key type:    {result.key_type}")
        self.console.print(f"  Fingerprint: {result.fingerprint}")
        if result.previous_fingerprint:
            self.console.print(f"  [red]Previous:    {result.previous_fingerprint}[/red]")

    def print_known_hosts(self, records: Iterable[TrustRecord]):
        table = Table(title="Known hosts")
        table.add_column("Host")
        table.add_column("Key type")
        table.add_column("Fingerprint")
        table.add_column("Added")
        for record in records:
            table.add_row(escape(record.identity.key), record.key_type, record.fingerprint, record.added_at)
        self.console.print(table)

    def print_listing(self, path: str, entries: Iterable[RemoteEntry]):
        table = Table(title=escape(path))
        table.add_column("Mode")
        table.add_column("Size", justify="right")
        table.add_column("Modified")
        table.add_column("Name")
        for entry in entries:
            mode = f"{entry.permissions:o}" if entry.permissions is not None else "-"
            modified = entry.modify_time.strftime("%Y-%m-%d %H:%M") if entry.modify_time else ""
            name = escape(entry.name)
            if entry.is_dir:
                name = f"[bold blue]{name}/[/bold blue]"
            table.add_row(mode, str(entry.size), modified, name)
        self.console.print(table)
