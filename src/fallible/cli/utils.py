"""
CLI utility helpers -- output formatting.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

console = Console()
err_console = Console(stderr=True)


def to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / object with to_dict / dict to plain dict."""
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def output_json(payload: Any) -> None:
    """Print a JSON document to stdout."""
    console.print_json(json.dumps(payload, default=str))


def output_table(rows: list[dict[str, Any]], *, title: str = "") -> None:
    """Render a list of dicts as a Rich table."""
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*("-" if v is None else str(v) for v in row.values()))
    console.print(table)


def fail(message: str, *, code: int = 1) -> None:
    """Print an error and exit."""
    err_console.print(f"[bold red]Error[/bold red]: {message}")
    raise typer.Exit(code=code)
