"""
matchcore CLI - Command Line Interface for matchmaking and player analytics

Provides commands for:
- Ranking opponents and building lobbies from a profile file
- Scoring event streams for fraud
- Computing Elo updates
- Inspecting behavioral clusters
- Generating a configuration file
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from matchcore import __version__
from matchcore.analysis.fraud import FraudDetector
from matchcore.analysis.rating import EloRating
from matchcore.core.config import MatchcoreConfig, generate_default_config, get_default_config_paths, load_config
from matchcore.core.constants import FEATURE_NAMES, Verdict
from matchcore.core.errors import MatchcoreError
from matchcore.core.schemas import MatchRequest
from matchcore.core.utils import setup_logging
from matchcore.export import export_candidates, export_fraud_analyses, load_event_streams, load_profiles
from matchcore.matchmaking.engine import MatchmakingEngine

app = typer.Typer(
    name="matchcore",
    help="Matchmaking and player analytics - opponent ranking, Elo, clustering and fraud scoring",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)

VERDICT_STYLES = {
    Verdict.LOW: "green",
    Verdict.MEDIUM: "yellow",
    Verdict.HIGH: "red",
}


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]matchcore[/bold blue] v{__version__}")
        raise typer.Exit()


def _fail(message: str) -> None:
    console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


def _get_config(ctx: typer.Context) -> MatchcoreConfig:
    return ctx.obj if isinstance(ctx.obj, MatchcoreConfig) else MatchcoreConfig()


def _build_engine(config: MatchcoreConfig, profiles_path: Path, seed: Optional[int]) -> MatchmakingEngine:
    if seed is not None:
        config.clustering.seed = seed
    engine = MatchmakingEngine(config)
    for profile in load_profiles(profiles_path):
        engine.register_profile(profile)
    engine.rebuild_clusters()
    return engine


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-V",
        help="Enable verbose output"
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a config file (.yaml, .toml or .json)",
        dir_okay=False,
    ),
) -> None:
    """matchcore - Matchmaking and Player Analytics"""
    try:
        config = load_config(config_file)
    except (FileNotFoundError, MatchcoreError) as e:
        _fail(str(e))
    setup_logging(config.logging, verbose=verbose)
    ctx.obj = config


@app.command()
def match(
    ctx: typer.Context,
    profiles_path: Path = typer.Argument(
        ...,
        help="Profiles file (.json or .csv)",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    player: str = typer.Option(..., "--player", "-p", help="Requesting player id"),
    tolerance: Optional[float] = typer.Option(None, "--tolerance", "-t", help="Max rating difference"),
    max_latency: Optional[float] = typer.Option(None, "--max-latency", help="Max opponent latency (ms)"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Preferred region"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Max candidates to return"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for cluster initialization"),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file for candidates (format from extension: .json, .csv)"
    ),
) -> None:
    """
    Rank compatible opponents for a player.
    """
    config = _get_config(ctx)
    try:
        engine = _build_engine(config, profiles_path, seed)
        request = MatchRequest(
            player_id=player,
            max_latency_ms=max_latency,
            region_preference=region,
            tolerance=tolerance,
        )
        candidates = engine.find_matches(request, max_candidates=limit)
        if output:
            export_candidates(player, candidates, output)
    except (MatchcoreError, ValueError) as e:
        _fail(str(e))

    if not candidates:
        console.print(f"[yellow]No candidates found for {player}[/yellow]")
        return

    table = Table(title=f"Match Candidates for {player}")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Player", style="cyan")
    table.add_column("Score", style="green", justify="right")
    table.add_column("Reason")
    for i, candidate in enumerate(candidates, start=1):
        table.add_row(str(i), candidate.player_id, f"{candidate.score:.3f}", candidate.reason or "")
    console.print(table)

    if output:
        console.print(f"\n[green]Candidates exported to:[/green] {output}")


@app.command()
def lobby(
    ctx: typer.Context,
    profiles_path: Path = typer.Argument(
        ...,
        help="Profiles file (.json or .csv)",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    player: str = typer.Option(..., "--player", "-p", help="Requesting player id"),
    team_size: Optional[int] = typer.Option(None, "--team-size", "-s", help="Players per team (default from config)"),
    tolerance: Optional[float] = typer.Option(None, "--tolerance", "-t", help="Max rating difference"),
    max_latency: Optional[float] = typer.Option(None, "--max-latency", help="Max opponent latency (ms)"),
    region: Optional[str] = typer.Option(None, "--region", "-r", help="Preferred region"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for cluster initialization"),
) -> None:
    """
    Build two rating-balanced teams around a player.
    """
    config = _get_config(ctx)
    size = team_size if team_size is not None else config.matchmaking.default_team_size
    try:
        engine = _build_engine(config, profiles_path, seed)
        request = MatchRequest(
            player_id=player,
            max_latency_ms=max_latency,
            region_preference=region,
            tolerance=tolerance,
            team_size=team_size,
        )
        result = engine.build_lobby(request)
        if result is not None:
            ratings = {pid: engine.get_profile(pid).rating for pid in result.player_ids}
    except (MatchcoreError, ValueError) as e:
        _fail(str(e))

    if result is None:
        console.print(
            f"[yellow]Not enough candidates for a {size}v{size} lobby around {player}[/yellow]"
        )
        raise typer.Exit(1)

    table = Table(title=f"Lobby ({size}v{size})")
    table.add_column("Team A", style="cyan")
    table.add_column("Rating", justify="right")
    table.add_column("Team B", style="magenta")
    table.add_column("Rating", justify="right")
    for a, b in zip(result.team_a, result.team_b):
        table.add_row(a, f"{ratings[a]:.0f}", b, f"{ratings[b]:.0f}")
    console.print(table)
    console.print(Panel(f"Mean rating gap: [bold]{result.rating_gap:.1f}[/bold]", expand=False))


@app.command()
def fraud(
    ctx: typer.Context,
    events_path: Path = typer.Argument(
        ...,
        help="Events file (.json or .csv) with a player_id column",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    profiles_path: Optional[Path] = typer.Option(
        None,
        "--profiles",
        help="Profiles file for winrate and region checks",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file for analyses (format from extension: .json, .csv)"
    ),
) -> None:
    """
    Score player event streams for suspicious behavior.
    """
    config = _get_config(ctx)
    try:
        streams = load_event_streams(events_path)
        profiles = {p.id: p for p in load_profiles(profiles_path)} if profiles_path else {}
        detector = FraudDetector(config.fraud, config.limits)
        analyses = detector.analyze_batch(streams, profiles)
        if output:
            export_fraud_analyses(analyses, output)
    except (MatchcoreError, ValueError) as e:
        _fail(str(e))

    if not analyses:
        console.print("[yellow]No events found[/yellow]")
        return

    table = Table(title="Fraud Analysis")
    table.add_column("Player", style="cyan")
    table.add_column("Risk", justify="right")
    table.add_column("Verdict")
    table.add_column("Reasons")
    ranked = sorted(analyses.items(), key=lambda item: item[1].risk_score, reverse=True)
    for player_id, analysis in ranked:
        style = VERDICT_STYLES[analysis.verdict]
        table.add_row(
            player_id,
            str(analysis.risk_score),
            f"[{style}]{analysis.verdict.value}[/{style}]",
            "\n".join(analysis.reasons) or "-",
        )
    console.print(table)

    if output:
        console.print(f"\n[green]Analyses exported to:[/green] {output}")


@app.command()
def elo(
    ctx: typer.Context,
    rating_a: float = typer.Argument(..., help="Player A's rating"),
    rating_b: float = typer.Argument(..., help="Player B's rating"),
    result: float = typer.Option(1.0, "--result", "-r", help="Player A's score: 1, 0.5 or 0"),
    k_factor: Optional[float] = typer.Option(None, "--k-factor", "-k", help="Override the k-factor"),
) -> None:
    """
    Compute Elo updates for a head-to-head result.
    """
    config = _get_config(ctx)
    try:
        calculator = EloRating(k_factor if k_factor is not None else config.rating.k_factor)
        expected = calculator.expected_score(rating_a, rating_b)
        new_a, new_b = calculator.update_pair(rating_a, rating_b, result)
    except MatchcoreError as e:
        _fail(str(e))

    table = Table(title=f"Elo Update (k={calculator.k_factor:g})")
    table.add_column("Player", style="cyan")
    table.add_column("Before", justify="right")
    table.add_column("After", justify="right")
    table.add_column("Change", justify="right")
    for name, before, after in (("A", rating_a, new_a), ("B", rating_b, new_b)):
        delta = after - before
        color = "green" if delta >= 0 else "red"
        table.add_row(name, f"{before:.0f}", str(after), f"[{color}]{delta:+.0f}[/{color}]")
    console.print(table)
    console.print(f"Expected score for A: {expected:.3f}")


@app.command()
def clusters(
    ctx: typer.Context,
    profiles_path: Path = typer.Argument(
        ...,
        help="Profiles file (.json or .csv)",
        exists=True,
        dir_okay=False,
        resolve_path=True,
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for cluster initialization"),
) -> None:
    """
    Cluster players by feature vector and show the centroids.
    """
    config = _get_config(ctx)
    try:
        engine = _build_engine(config, profiles_path, seed)
    except (MatchcoreError, ValueError) as e:
        _fail(str(e))

    centroids = engine.get_centroids()
    if centroids.size == 0:
        console.print(
            f"[yellow]Too few profiles to cluster ({len(engine)} loaded, "
            f"need {config.clustering.min_profiles})[/yellow]"
        )
        return

    sizes = [0] * len(centroids)
    for cluster in engine.cluster_assignments().values():
        if cluster is not None:
            sizes[cluster] += 1

    table = Table(title=f"Player Clusters ({len(engine)} players)")
    table.add_column("Cluster", style="cyan", justify="right")
    table.add_column("Players", justify="right")
    for name in FEATURE_NAMES:
        table.add_column(name, justify="right")
    for i, centroid in enumerate(centroids):
        table.add_row(str(i), str(sizes[i]), *(f"{value:.3f}" for value in centroid))
    console.print(table)
    console.print(f"Inertia: {engine.cluster_inertia():.4f}")


@app.command("init-config")
def init_config(
    path: Path = typer.Argument(Path("matchcore.yaml"), help="Where to write the config file"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """
    Write a default configuration file.
    """
    if path.exists() and not force:
        _fail(f"{path} already exists (use --force to overwrite)")
    try:
        generate_default_config(path)
    except ValueError as e:
        _fail(str(e))
    console.print(f"[green]Config written to:[/green] {path}")


@app.command()
def info() -> None:
    """
    Display information about matchcore and the environment.
    """
    import platform as plat

    console.print(f"\n[bold blue]matchcore[/bold blue] v{__version__}\n")

    table = Table(show_header=False)
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Python", plat.python_version())
    table.add_row("Platform", plat.system())

    import numpy
    import pandas
    import yaml

    for name, module in (("numpy", numpy), ("pandas", pandas), ("pyyaml", yaml)):
        table.add_row(name, getattr(module, "__version__", "installed"))

    found = [p for p in get_default_config_paths() if p.exists()]
    table.add_row("Config File", str(found[0]) if found else "[yellow]none (defaults)[/yellow]")

    console.print(table)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
