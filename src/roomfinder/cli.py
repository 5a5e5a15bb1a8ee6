"""Command Line Interface for Room Finder.

This module provides a simple CLI for detecting rooms in a floor plan JSON
file, locating the room under a point, applying edit operations and
rendering the plan.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .core.model import Point, RoomPolygon
from .engine.api import apply_operations
from .engine.session import EditSession
from .engine.validators import InvalidOperation
from .io.parser import load_plan, save_plan
from .visualization.generator import generate_plan_image

app = typer.Typer(
    name="room-finder",
    help="Detect enclosed rooms in wall floor plans",
    no_args_is_help=True,
)
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _open_session(plan: Path) -> EditSession:
    try:
        return EditSession(load_plan(plan))
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {e}[/red]")
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: Invalid JSON - {e}[/red]")
        raise typer.Exit(1)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def _room_table(rooms: List[RoomPolygon], title: str) -> Table:
    table = Table(title=title)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Area (m²)", justify="right")
    table.add_column("Vertices", justify="right")
    table.add_column("Centroid (cm)", justify="center")
    for index, room in enumerate(rooms):
        c = room.centroid
        table.add_row(str(index), f"{room.area / 10000.0:.2f}", str(len(room)), f"({c.x:.1f}, {c.y:.1f})")
    return table


@app.command()
def rooms(
    plan: Path = typer.Option(..., "--plan", "-p", help="Path to plan JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """List the rooms enclosed by the plan's walls."""
    _setup_logging(verbose)
    session = _open_session(plan)
    found = session.rooms()
    if not found:
        console.print("[yellow]No enclosed rooms found[/yellow]")
        return
    console.print(_room_table(found, f"{len(found)} rooms ({session.detector.last_strategy} method)"))


@app.command()
def locate(
    plan: Path = typer.Option(..., "--plan", "-p", help="Path to plan JSON file"),
    x: float = typer.Option(..., "--x", help="X coordinate in cm"),
    y: float = typer.Option(..., "--y", help="Y coordinate in cm"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Show the room containing a point."""
    _setup_logging(verbose)
    session = _open_session(plan)
    room = session.room_at(Point(x, y))
    if room is None:
        console.print(f"[yellow]No room contains ({x}, {y})[/yellow]")
        raise typer.Exit(1)
    console.print(_room_table([room], f"Room at ({x}, {y})"))


@app.command()
def largest(
    plan: Path = typer.Option(..., "--plan", "-p", help="Path to plan JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Show the largest room, the default hand-off to 3D extrusion."""
    _setup_logging(verbose)
    session = _open_session(plan)
    room = session.largest_room()
    if room is None:
        console.print("[yellow]No enclosed rooms found[/yellow]")
        raise typer.Exit(1)
    console.print(_room_table([room], "Largest room"))
    if verbose:
        for p in room:
            console.print(f"  ({p.x:.1f}, {p.y:.1f})")


@app.command()
def adjacency(
    plan: Path = typer.Option(..., "--plan", "-p", help="Path to plan JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """List pairs of rooms sharing a wall."""
    _setup_logging(verbose)
    session = _open_session(plan)
    graph = session.room_graph()
    table = Table(title="Room adjacency")
    table.add_column("Room A", justify="right", style="cyan")
    table.add_column("Room B", justify="right", style="cyan")
    table.add_column("Walls")
    table.add_column("Door", justify="center")
    for a, b, data in sorted(graph.edges(data=True)):
        table.add_row(str(a), str(b), ", ".join(str(w) for w in data["wall_ids"]), "yes" if data["has_door"] else "no")
    console.print(table)


@app.command()
def apply(
    plan: Path = typer.Option(..., "--plan", "-p", help="Path to plan JSON file"),
    operations: Path = typer.Option(..., "--operations", help="Path to operations JSON file"),
    output: Path = typer.Option(..., "--out", help="Path to output plan JSON file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Apply a list of edit operations and save the resulting plan."""
    _setup_logging(verbose)
    session = _open_session(plan)
    try:
        with open(operations, encoding="utf-8") as f:
            operations_data = json.load(f)
        results = apply_operations(session.plan, operations_data)
    except FileNotFoundError as e:
        console.print(f"[red]Error: File not found - {e}[/red]")
        raise typer.Exit(1)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: Invalid JSON - {e}[/red]")
        raise typer.Exit(1)
    except (ValueError, InvalidOperation) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    save_plan(session.plan, output)
    console.print(f"[green]✓[/green] Applied {len(results)} operations")
    console.print(f"[green]✓[/green] {len(session.rooms())} rooms after edits")
    console.print(f"[green]✓[/green] Plan saved to {output}")


@app.command()
def render(
    plan: Path = typer.Option(..., "--plan", "-p", help="Path to plan JSON file"),
    output: Path = typer.Option(..., "--out", help="Path to output PNG file"),
    x: Optional[float] = typer.Option(None, "--x", help="Highlight the room containing this X"),
    y: Optional[float] = typer.Option(None, "--y", help="Highlight the room containing this Y"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
):
    """Render walls, openings and detected rooms to a PNG."""
    _setup_logging(verbose)
    session = _open_session(plan)
    highlight = None
    if x is not None and y is not None:
        highlight = session.select(Point(x, y))

    if not generate_plan_image(session.plan, session.rooms(), output, highlight=highlight):
        console.print(f"[red]Error: could not write {output}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] Image saved to {output}")


if __name__ == "__main__":
    app()
