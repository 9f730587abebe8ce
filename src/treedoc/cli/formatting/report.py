#!/usr/bin/env python
"""
Usage report - per-model token, call and cost totals for a run.
"""
from __future__ import annotations

from typing import Iterable, Optional

from rich.console import Console
from rich.table import Table

from treedoc.llm.registry import ModelRecord


def build_model_table(models: Iterable[ModelRecord], title: str = "Model usage") -> Table:
    """Render model records as a rich table with a totals row."""
    models = list(models)
    table = Table(title=title, show_footer=len(models) > 1)

    totals = {
        "total": sum(m.total for m in models),
        "succeeded": sum(m.succeeded for m in models),
        "failed": sum(m.failed for m in models),
        "input": sum(m.input_tokens for m in models),
        "output": sum(m.output_tokens for m in models),
        "cost": sum(m.cost for m in models),
    }

    table.add_column("Model", footer="Total", style="cyan")
    table.add_column("File Count", footer=str(totals["total"]), justify="right")
    table.add_column("Succeeded", footer=str(totals["succeeded"]), justify="right", style="green")
    table.add_column("Failed", footer=str(totals["failed"]), justify="right", style="red")
    table.add_column("Input Tokens", footer=f"{totals['input']:,}", justify="right")
    table.add_column("Output Tokens", footer=f"{totals['output']:,}", justify="right")
    table.add_column("Cost", footer=f"${totals['cost']:.4f}", justify="right")

    for m in models:
        table.add_row(
            m.id,
            str(m.total),
            str(m.succeeded),
            str(m.failed),
            f"{m.input_tokens:,}",
            f"{m.output_tokens:,}",
            f"${m.cost:.4f}",
        )
    return table


def print_model_details(models: Iterable[ModelRecord], console: Optional[Console] = None) -> None:
    """Print the end-of-run usage table."""
    console = console or Console()
    console.print(build_model_table(models))


def print_estimate(models: Iterable[ModelRecord], console: Optional[Console] = None) -> None:
    """Print a dry-run estimate: the usage table plus the projected cost."""
    console = console or Console()
    models = list(models)
    console.print(build_model_table(models, title="Estimated usage"))
    total = sum(m.cost for m in models)
    console.print(
        f"[bold]Estimated cost:[/bold] ${total:.2f} "
        "[dim](output tokens are a nominal figure per file)[/dim]"
    )
