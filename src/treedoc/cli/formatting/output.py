#!/usr/bin/env python
"""
Console messages for the treedoc CLI: errors, notices and the run summary.
"""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.theme import Theme

from treedoc.config.settings import RunConfig
from treedoc.doc_generation.models import PassStats, RunResult


treedoc_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "magenta",
})


class ConsoleOutput:
    """Themed rich console; every CLI message goes through here."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.console.push_theme(treedoc_theme)

    def print(self, text: str = "", **kwargs):
        self.console.print(text, **kwargs)

    def print_error(self, text: str):
        self.console.print(f"[error]Error:[/error] {text}")

    def print_success(self, text: str):
        self.console.print(f"[success]✔[/success] {text}")

    def print_warning(self, text: str):
        self.console.print(f"[warning]Warning:[/warning] {text}")

    def print_run_start(self, config: RunConfig, dry_run: bool = False):
        """One line naming what is documented and where artifacts go."""
        verb = "Estimating" if dry_run else "Documenting"
        self.console.print(
            f"[info]{verb}[/info] {config.name} "
            f"[path]{config.root}[/path] -> [path]{config.output}[/path] "
            f"[dim]({', '.join(config.llms)})[/dim]"
        )

    @staticmethod
    def _stats_line(label: str, stats: PassStats) -> str:
        parts = [f"[success]{stats.produced} produced[/success]"]
        if stats.skipped:
            parts.append(f"[warning]{stats.skipped} skipped[/warning]")
        if stats.failed:
            parts.append(f"[error]{stats.failed} failed[/error]")
        return f"{label}: " + ", ".join(parts)

    def print_run_summary(self, result: RunResult):
        """Per-pass outcome counts; failures are listed, never fatal."""
        self.console.print(self._stats_line("Files", result.files))
        if not result.dry_run:
            self.console.print(self._stats_line("Folders", result.folders))
        if result.files.failed or result.folders.failed:
            self.print_warning("some items failed; see the log above for details")
