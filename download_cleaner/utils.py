"""
Utility functions for the Download Cleaner.

Includes:
- Shared rich console and message helpers
- Result tables for analyze / sort / undo
- JSON save/load helpers for reports
"""

import json
from pathlib import Path
from typing import Any
from rich.console import Console
from rich.table import Table
from rich.tree import Tree
from rich.panel import Panel
from rich.markup import escape

# Global console instance
console = Console()

def print_header(title: str, subtitle: str = ""):
    """Print a styled header."""
    console.print(Panel(f"[bold blue]{title}[/bold blue]\n[italic]{subtitle}[/italic]", expand=False))

def print_counts_table(counts: dict[str, int], title: str = "Categories"):
    """Print a table of file counts per category."""
    if not counts:
        console.print("[dim](no files found)[/dim]")
        return

    table = Table(title=title)
    table.add_column("Category", style="cyan")
    table.add_column("Files", style="magenta", justify="right")

    for label, count in counts.items():
        table.add_row(escape(label), str(count))
    table.add_row("[bold]Total[/bold]", f"[bold]{sum(counts.values())}[/bold]")

    console.print(table)

def print_sort_summary(report: dict):
    """Print a summary of a sort or dry-run report."""
    moves = report.get("moves", [])

    table = Table(title="Dry-Run Summary" if report.get("dry_run") else "Sort Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", style="magenta")

    if report.get("dry_run"):
        table.add_row("Would move", str(len(moves)))
    else:
        table.add_row("Moved", str(report.get("moved_count", 0)))
        table.add_row("Failed", str(report.get("failed_moves_count", 0)))

    console.print(table)

    if moves:
        tree = Tree("[bold green]Moves by category[/bold green]")
        branches: dict[str, Tree] = {}
        for move in moves:
            label = move["new_rel"].split("/", 1)[0]
            if label not in branches:
                branches[label] = tree.add(f"[blue]{escape(label)}[/blue]")
            branches[label].add(f"[yellow]{escape(move['old_rel'])}[/yellow]")
        console.print(tree)

def print_error(msg: str):
    console.print(f"[bold red]ERROR:[/bold red] {escape(msg)}")

def print_warning(msg: str):
    console.print(f"[bold yellow]WARNING:[/bold yellow] {escape(msg)}")

def print_success(msg: str):
    console.print(f"[bold green]SUCCESS:[/bold green] {escape(msg)}")

def print_info(msg: str):
    console.print(f"[INFO] {msg}", markup=False, highlight=False)


def to_rel(path: Path, root: Path) -> str:
    """
    Return ``path`` relative to ``root`` using forward slashes.

    Args:
        path: A path inside root.
        root: The working directory.

    Returns:
        A relative path string like "Bilder/a.png".
    """
    return path.relative_to(root).as_posix()


def save_json(data: Any, path: Path) -> None:
    """
    Save data to a JSON file with pretty formatting.

    Args:
        data: The data to serialize.
        path: The output file path.
    """
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    print_info(f"Saved: {path}")


def load_json(path: Path) -> Any:
    """
    Load data from a JSON file.

    Args:
        path: The input file path.

    Returns:
        The deserialized data.
    """
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)
