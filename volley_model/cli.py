"""CLI entrypoint using Typer.

This module defines the command-line interface for volleyball player
profiling. Every command reads a JSON player export and recomputes the
requested season from scratch.

Example:
    $ volley-model --help
    $ volley-model seasons players.json
    $ volley-model profile players.json --season 4 --min-sets 5
    $ volley-model similar players.json 17 --season 4
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from volley_model import __version__
from volley_model.config import get_settings
from volley_model.logging import setup_logging
from volley_model.types import VolleyModelError

# Initialize console for rich output
console = Console()

# Create main app
app = typer.Typer(
    name="volley-model",
    help="Volleyball player profiling CLI",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

PlayersFile = Annotated[
    Path,
    typer.Argument(help="JSON export of players with nested stat records"),
]
SeasonOption = Annotated[
    int,
    typer.Option("--season", "-s", help="Season number to profile"),
]
MinSetsOption = Annotated[
    float | None,
    typer.Option(
        "--min-sets",
        "-m",
        help="Minimum sets played to qualify (default: MIN_SETS_PLAYED)",
    ),
]
SchemeOption = Annotated[
    str | None,
    typer.Option(
        "--scheme",
        help="Feature vector version, v1 or v2 (default: VECTOR_VERSION)",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]volley-model[/bold blue] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-V",
            help="Enable verbose output",
        ),
    ] = False,
) -> None:
    """Volleyball player profiling CLI.

    Builds per-set feature vectors, projects them to 3D with PCA, labels
    archetypes and finds similar players for one season at a time.
    """
    # Setup logging based on verbosity
    settings = get_settings()
    log_level = "DEBUG" if verbose else settings.log_level
    setup_logging(level=log_level, log_dir=settings.log_dir_obj)


def _fail(error: Exception) -> typer.Exit:
    console.print(f"[red]Error: {error}[/red]")
    return typer.Exit(1)


def _load(players_file: Path) -> list[dict]:
    from volley_model.data import load_players

    try:
        return load_players(players_file)
    except VolleyModelError as e:
        raise _fail(e) from e


# =============================================================================
# Commands
# =============================================================================


@app.command("seasons")
def seasons(players_file: PlayersFile) -> None:
    """List seasons present in an export, newest first."""
    from volley_model.features import available_seasons

    players = _load(players_file)
    found = available_seasons(players)

    if not found:
        console.print("[yellow]No seasons found in export[/yellow]")
        return

    table = Table(title=f"Seasons ({len(players)} players)")
    table.add_column("Season", style="cyan", justify="right")
    for number in found:
        table.add_row(str(number))
    console.print(table)


@app.command("vectors")
def vectors(
    players_file: PlayersFile,
    season: SeasonOption,
    min_sets: MinSetsOption = None,
    scheme: SchemeOption = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the vectors to a CSV file"),
    ] = None,
) -> None:
    """Build per-set and z-scored vectors for a season."""
    from volley_model.features import build_season_vectors, get_scheme, rows_to_frame

    settings = get_settings()
    players = _load(players_file)
    threshold = min_sets if min_sets is not None else settings.min_sets_played

    try:
        resolved = get_scheme(scheme or settings.vector_version)
        rows = build_season_vectors(players, season, threshold, resolved)
    except VolleyModelError as e:
        raise _fail(e) from e

    if not rows:
        console.print(
            f"[yellow]No players with at least {threshold:g} sets in season "
            f"{season}[/yellow]"
        )
        return

    frame = rows_to_frame(rows)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(output, index=False)
        console.print(f"[green]Saved {len(rows)} vectors to {output}[/green]")
        return

    table = Table(title=f"Season {season} vectors ({resolved.version})")
    table.add_column("Player", style="cyan")
    table.add_column("Sets", justify="right")
    for key in resolved.keys[:4]:
        table.add_column(f"z {key}", justify="right")
    for row in rows:
        table.add_row(
            row.player_name or row.player_id,
            f"{row.sets_played:g}",
            *(f"{z:+.2f}" for z in row.z_vector[:4]),
        )
    console.print(table)


@app.command("profile")
def profile(
    players_file: PlayersFile,
    season: SeasonOption,
    min_sets: MinSetsOption = None,
    scheme: SchemeOption = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the scatter payload to a JSON file"),
    ] = None,
) -> None:
    """Project a season to 3D and label every player's archetype."""
    from volley_model.output import ChartGenerator
    from volley_model.pipeline import build_season_profile

    players = _load(players_file)

    try:
        result = build_season_profile(
            players, season, min_sets_played=min_sets, scheme=scheme
        )
    except VolleyModelError as e:
        raise _fail(e) from e

    if result.is_empty:
        console.print(
            f"[yellow]No players with at least {result.min_sets_played:g} sets in "
            f"season {season}[/yellow]"
        )
        return

    payload = ChartGenerator().scatter_3d(result)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2)
        console.print(f"[green]Saved profile for {len(result.points)} players to {output}[/green]")
        return

    console.print(
        Panel(
            "\n".join(
                f"[bold]{axis['axis']}:[/bold] {axis['label']} "
                f"({axis['explained_variance_ratio']:.1%})"
                for axis in result.axes
            )
            or "No variance in population",
            title=f"Season {season} ({result.version}, {len(result.points)} players)",
        )
    )

    table = Table(title="Player Profiles")
    table.add_column("Player", style="cyan")
    table.add_column("Sets", justify="right")
    table.add_column("X", justify="right")
    table.add_column("Y", justify="right")
    table.add_column("Z", justify="right")
    table.add_column("Archetype", style="green")
    for point in result.points:
        table.add_row(
            point.row.player_name or point.row.player_id,
            f"{point.row.sets_played:g}",
            f"{point.projection.x:+.2f}",
            f"{point.projection.y:+.2f}",
            f"{point.projection.z:+.2f}",
            point.archetype.name if point.archetype else "-",
        )
    console.print(table)


@app.command("similar")
def similar(
    players_file: PlayersFile,
    player_id: Annotated[str, typer.Argument(help="Player to compare")],
    season: SeasonOption,
    min_sets: MinSetsOption = None,
    scheme: SchemeOption = None,
    top: Annotated[
        int,
        typer.Option("--top", "-n", help="Number of closest players to list"),
    ] = 5,
) -> None:
    """Find the most and least similar players in a season."""
    from volley_model.analysis import find_similar_players, rank_neighbors
    from volley_model.features import build_season_vectors, get_scheme

    settings = get_settings()
    players = _load(players_file)
    threshold = min_sets if min_sets is not None else settings.min_sets_played

    try:
        resolved = get_scheme(scheme or settings.vector_version)
        rows = build_season_vectors(players, season, threshold, resolved)
    except VolleyModelError as e:
        raise _fail(e) from e

    target = next((row for row in rows if row.player_id == player_id), None)
    if target is None:
        console.print(
            f"[red]Error: Player {player_id} did not qualify in season {season}[/red]"
        )
        raise typer.Exit(1)

    neighbors = rank_neighbors(rows, player_id)
    if not neighbors:
        console.print("[yellow]No other qualifying players to compare with[/yellow]")
        return

    table = Table(title=f"Players similar to {target.player_name or player_id}")
    table.add_column("Rank", justify="right")
    table.add_column("Player", style="cyan")
    table.add_column("Distance", justify="right", style="green")
    for rank, neighbor in enumerate(neighbors[:top], start=1):
        table.add_row(
            str(rank),
            neighbor.row.player_name or neighbor.row.player_id,
            f"{neighbor.distance:.3f}",
        )
    console.print(table)

    farthest = find_similar_players(rows, player_id).least_similar
    console.print(
        f"Least similar: [bold]{farthest.row.player_name or farthest.row.player_id}"
        f"[/bold] ({farthest.distance:.3f})"
    )


if __name__ == "__main__":
    app()
