"""
Rendering functions for modulehub output.

This module handles all pretty-printing and table formatting.
Commands return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import Any, Dict, List, Optional

console = Console()


def _format_value(value: Any) -> str:
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    return str(value)


def render_table(headers: List[str], rows: List[List[Any]], title: Optional[str] = None) -> None:
    """
    Render a generic table with the given headers and rows.

    Args:
        headers: List of column headers
        rows: List of rows, where each row is a list of values
        title: Optional table title
    """
    if not rows:
        console.print("[yellow]No data to display.[/yellow]")
        return

    table = Table(
        title=title,
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    for header in headers:
        table.add_column(header)

    for row in rows:
        table.add_row(*[_format_value(val) for val in row])

    console.print(table)


def render_refs_table(refs: List[Dict[str, Any]], title: Optional[str] = None) -> None:
    """
    Render remote refs with their compatibility and cache status.

    Args:
        refs: Ref dictionaries (RefInfo.to_dict() plus 'compatible'/'local')
        title: Optional table title
    """
    if not refs:
        console.print("[yellow]No refs found.[/yellow]")
        return

    table = Table(
        title=title or "Refs",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )
    table.add_column("Kind", style="cyan")
    table.add_column("Name", style="bold")
    table.add_column("Version")
    table.add_column("Published")
    table.add_column("Compatible")
    table.add_column("Local")

    for ref in refs:
        compatible = ref.get('compatible')
        table.add_row(
            ref.get('kind', ''),
            ref.get('name', ''),
            _format_value(ref.get('version')),
            _format_value(ref.get('published_at')),
            "[green]Yes[/green]" if compatible else "[dim]No[/dim]",
            "[green]✓[/green]" if ref.get('local') else "",
        )

    console.print(table)


def render_local_table(entries: List[Dict[str, Any]]) -> None:
    """
    Render refs extracted in the local cache.

    Args:
        entries: Dictionaries with 'kind', 'name' and 'path'
    """
    render_table(
        ["Kind", "Name", "Path"],
        [[e.get('kind'), e.get('name'), e.get('path')] for e in entries],
        title="Local Versions",
    )
