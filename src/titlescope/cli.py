"""Command-line interface for titlescope."""

from __future__ import annotations

import json
import sys
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import TYPE_CHECKING, Any, TypeVar

import click
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from titlescope import __version__
from titlescope.config import get_config

if TYPE_CHECKING:
    from titlescope.models import Release
    from titlescope.output import ReportFormatter
    from titlescope.titles.filters import TitleFilter

F = TypeVar("F", bound=Callable[..., Any])

# Load environment variables from .env file
load_dotenv()

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="titlescope")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output (results only)")
@click.pass_context
def main(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    """titlescope - Rank, deduplicate and browse parsed torrent releases."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


def source_options(func: F) -> F:
    """Options selecting where releases come from and how they are filtered."""
    options = [
        click.option(
            "--input",
            "-i",
            "input_path",
            type=click.Path(exists=True, dir_okay=False, path_type=Path),
            default=None,
            help="Read a saved titles JSON payload instead of fetching",
        ),
        click.option("--instance", type=int, default=None, help="Instance ID (default: from config)"),
        click.option("--type", "type_", default=None, help="Release type (movie, episode, ...)"),
        click.option("--source", default=None, help="Source (bluray, web, ...)"),
        click.option("--resolution", default=None, help="Resolution (2160p, 1080p, ...)"),
        click.option("--group", default=None, help="Release group"),
        click.option("--year", type=int, default=None, help="Year"),
        click.option("--search", default=None, help="Search name, title and group"),
        click.option(
            "--preset",
            type=click.Choice(["recent-4k", "incomplete-series", "high-quality", "new-releases"]),
            default=None,
            help="Start from a preset filter",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def format_option(func: F) -> F:
    """The shared --format option."""
    return click.option(
        "--format",
        "-f",
        type=click.Choice(["text", "json", "csv"]),
        default="text",
        help="Output format",
    )(func)


def save_csv_option(func: F) -> F:
    """The shared --save-csv option."""
    return click.option(
        "--save-csv",
        is_flag=True,
        help="Also save the report as a dated CSV file in the current directory",
    )(func)


def _save_csv(formatter: ReportFormatter) -> None:
    """Save the CSV report in the current directory and report the path on stderr."""
    path = formatter.save_csv()
    click.echo(f"Saved CSV report to {path}", err=True)


def handle_errors(func: F) -> F:
    """Report collaborator failures and cancellation, then exit."""
    from titlescope.errors import get_friendly_message, log_error
    from titlescope.qui import QuiError
    from titlescope.titles.actions import UnknownActionError

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (QuiError, UnknownActionError) as e:
            log_error(e, func.__name__)
            console.print(f"[red]Error:[/red] {escape(get_friendly_message(e))}")
            sys.exit(1)
        except KeyboardInterrupt:
            console.print("\n[yellow]Cancelled.[/yellow]")
            sys.exit(130)

    return wrapper  # type: ignore[return-value]


def _build_filter(
    preset: str | None,
    type_: str | None,
    source: str | None,
    resolution: str | None,
    group: str | None,
    year: int | None,
    search: str | None,
) -> TitleFilter:
    """Combine config defaults, a preset and explicit CLI filters (later wins)."""
    from titlescope.titles.filters import TitleFilter, preset_filter

    values: dict[str, Any] = dict(get_config().filters)
    if preset:
        values.update(preset_filter(preset).to_params())
    explicit = {
        "type": type_,
        "source": source,
        "resolution": resolution,
        "group": group,
        "year": year,
        "search": search,
    }
    values.update({k: v for k, v in explicit.items() if v is not None})
    return TitleFilter.from_mapping(values)


def _load_releases(
    input_path: Path | None,
    instance: int | None,
    title_filter: TitleFilter,
) -> list[Release]:
    """Load releases from a file or the configured server and apply the filter."""
    from titlescope.models import TitlesResponse
    from titlescope.qui import QuiClient
    from titlescope.titles.filters import apply_filter

    if input_path is not None:
        try:
            raw = json.loads(input_path.read_text(encoding="utf-8"))
            if isinstance(raw, list):
                raw = {"titles": raw, "total": len(raw)}
            response = TitlesResponse.model_validate(raw)
        except (json.JSONDecodeError, ValidationError) as e:
            console.print(f"[red]Invalid titles file:[/red] {escape(str(e))}")
            sys.exit(1)
        return apply_filter(response.titles, title_filter)

    instance_id = _resolve_instance(instance)

    with QuiClient() as client:
        response = client.get_titles(instance_id, title_filter)
    return apply_filter(response.titles, title_filter)


def _resolve_instance(instance: int | None) -> int:
    instance_id = instance if instance is not None else get_config().qui.instance_id
    if instance_id is None:
        console.print("[red]No instance given.[/red] Use --instance or set instance_id in config.")
        sys.exit(1)
    return instance_id


@main.command()
@source_options
@click.option("--expand", "expand_ids", multiple=True, help="Group or 'title::sub-group' id to expand")
@click.option("--expand-all", is_flag=True, help="Expand every group and sub-group")
@click.option("--tolerance", type=int, default=None, help="Upgrade tolerance in score points")
@format_option
@save_csv_option
@click.pass_context
@handle_errors
def titles(
    ctx: click.Context,
    input_path: Path | None,
    instance: int | None,
    type_: str | None,
    source: str | None,
    resolution: str | None,
    group: str | None,
    year: int | None,
    search: str | None,
    preset: str | None,
    expand_ids: tuple[str, ...],
    expand_all: bool,
    tolerance: int | None,
    format: str,
    save_csv: bool,
) -> None:
    """Show releases grouped by title, best quality first."""
    from titlescope.output import TitlesReportFormatter
    from titlescope.titles.engine import TitlesEngine
    from titlescope.titles.flatten import expand_all as expand_everything

    verbose = ctx.obj.get("verbose", False)
    cfg = get_config()

    title_filter = _build_filter(preset, type_, source, resolution, group, year, search)
    releases = _load_releases(input_path, instance, title_filter)

    engine = TitlesEngine(
        tolerance=tolerance if tolerance is not None else cfg.scoring.upgrade_tolerance
    )
    snapshot = engine.snapshot(releases)

    expanded = frozenset(expand_ids)
    if expand_all:
        expanded = expand_everything(snapshot.groups)

    formatter = TitlesReportFormatter(
        snapshot.groups, expanded, row_heights=cfg.display.row_heights
    )
    if format == "json":
        click.echo(formatter.to_json())
    elif format == "csv":
        click.echo(formatter.to_csv(), nl=False)
    else:
        if not ctx.obj.get("quiet", False):
            console.print(
                f"[bold blue]Titles[/bold blue] [dim]{len(releases)} releases in "
                f"{len(snapshot.groups)} titles[/dim]"
            )
            console.print()
        formatter.to_text(verbose)

    if save_csv:
        _save_csv(formatter)


@main.command()
@source_options
@click.option("--tolerance", type=int, default=None, help="Upgrade tolerance in score points")
@click.option("--explained-only", is_flag=True, help="Only list candidates with a concrete improvement")
@click.option("--all-candidates", is_flag=True, help="Also list candidates without an explained improvement")
@format_option
@save_csv_option
@click.pass_context
@handle_errors
def upgrades(
    ctx: click.Context,
    input_path: Path | None,
    instance: int | None,
    type_: str | None,
    source: str | None,
    resolution: str | None,
    group: str | None,
    year: int | None,
    search: str | None,
    preset: str | None,
    tolerance: int | None,
    explained_only: bool,
    all_candidates: bool,
    format: str,
    save_csv: bool,
) -> None:
    """List potential quality upgrades per title."""
    from titlescope.output import UpgradeReportFormatter
    from titlescope.titles.engine import TitlesEngine

    cfg = get_config()
    if not explained_only:
        explained_only = cfg.scoring.explained_upgrades_only and not all_candidates

    title_filter = _build_filter(preset, type_, source, resolution, group, year, search)
    releases = _load_releases(input_path, instance, title_filter)

    engine = TitlesEngine(
        tolerance=tolerance if tolerance is not None else cfg.scoring.upgrade_tolerance
    )
    snapshot = engine.snapshot(releases)

    formatter = UpgradeReportFormatter(snapshot.recommendations, explained_only=explained_only)
    if format == "json":
        click.echo(formatter.to_json())
    elif format == "csv":
        click.echo(formatter.to_csv(), nl=False)
    else:
        formatter.to_text(ctx.obj.get("verbose", False))

    if save_csv:
        _save_csv(formatter)


@main.command()
@source_options
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
@handle_errors
def stats(
    ctx: click.Context,
    input_path: Path | None,
    instance: int | None,
    type_: str | None,
    source: str | None,
    resolution: str | None,
    group: str | None,
    year: int | None,
    search: str | None,
    preset: str | None,
    as_json: bool,
) -> None:
    """Show size, quality and completion analytics."""
    from titlescope.titles.engine import TitlesEngine
    from titlescope.titles.gaps import EpisodeGapAnalyzer

    cfg = get_config()
    title_filter = _build_filter(preset, type_, source, resolution, group, year, search)
    releases = _load_releases(input_path, instance, title_filter)

    engine = TitlesEngine(
        tolerance=cfg.scoring.upgrade_tolerance,
        gap_analyzer=EpisodeGapAnalyzer(excluded_titles=cfg.exclusions.series),
    )
    snapshot = engine.snapshot(releases)
    analytics = snapshot.analytics

    if as_json:
        output = {
            "total_size": analytics.total_size,
            "total_count": analytics.total_count,
            "completed_count": analytics.completed_count,
            "completion_rate": analytics.completion_rate,
            "types": analytics.type_counts,
            "quality": analytics.quality_counts,
            "sources": analytics.source_counts,
            "series_count": analytics.series_count,
            "missing_episodes": analytics.missing_episodes,
        }
        click.echo(json.dumps(output, indent=2))
        return

    analytics.print_summary(console)

    if ctx.obj.get("verbose", False):
        for gap in snapshot.gaps.series_with_gaps:
            missing = ", ".join(str(n) for n in gap.missing_episodes)
            console.print(f"  [bold]{gap.title}[/bold]: missing {missing}")


@main.command()
@click.argument("action_name", metavar="ACTION")
@click.argument("hashes", nargs=-1, required=True)
@click.option("--instance", type=int, default=None, help="Instance ID (default: from config)")
@handle_errors
def action(action_name: str, hashes: tuple[str, ...], instance: int | None) -> None:
    """Apply ACTION (pause, resume, recheck, delete) to torrents."""
    from titlescope.qui import QuiClient
    from titlescope.titles.actions import dispatch_action, parse_action

    # Validate before touching the network
    resolved = parse_action(action_name)
    instance_id = _resolve_instance(instance)

    with QuiClient() as client:
        sent = dispatch_action(client.for_instance(instance_id), resolved, hashes)

    console.print(f"[green]{resolved.value.capitalize()} sent for {len(sent)} torrent(s).[/green]")


@main.command()
@click.argument("name")
@click.argument("hashes", nargs=-1, required=True)
@click.option("--instance", type=int, default=None, help="Instance ID (default: from config)")
@handle_errors
def category(name: str, hashes: tuple[str, ...], instance: int | None) -> None:
    """Move torrents to category NAME."""
    from titlescope.qui import QuiClient
    from titlescope.titles.actions import dispatch_category_change

    instance_id = _resolve_instance(instance)

    with QuiClient() as client:
        sent = dispatch_category_change(client.for_instance(instance_id), hashes, name)

    console.print(f"[green]Category set to '{name}' for {len(sent)} torrent(s).[/green]")


@main.group()
def config() -> None:
    """Manage titlescope configuration."""
    pass


@config.command(name="show")
def config_show() -> None:
    """Show current configuration."""
    from titlescope.config import find_config_file

    cfg = get_config()
    config_file = find_config_file()

    console.print("[bold]Current Configuration[/bold]")
    console.print()

    if config_file:
        console.print(f"[dim]Config file:[/dim] {config_file}")
    else:
        console.print("[dim]Config file:[/dim] (none - using defaults)")
    console.print()

    console.print("[bold]Server:[/bold]")
    console.print(f"  URL: {cfg.qui.url or '(not set)'}")
    console.print(f"  Instance: {cfg.qui.instance_id if cfg.qui.instance_id is not None else '(not set)'}")
    console.print(f"  Timeout: {cfg.qui.timeout:g}s")
    console.print()

    console.print("[bold]Scoring:[/bold]")
    console.print(f"  Upgrade tolerance: {cfg.scoring.upgrade_tolerance}")
    console.print(f"  Explained upgrades only: {cfg.scoring.explained_upgrades_only}")
    console.print()

    console.print("[bold]Display:[/bold]")
    console.print(
        f"  Row heights: group {cfg.display.group_row_height}, "
        f"sub-group {cfg.display.subgroup_row_height}, item {cfg.display.item_row_height}"
    )
    console.print()

    console.print("[bold]Default filters:[/bold]")
    if cfg.filters:
        for key, value in cfg.filters.items():
            console.print(f"  {key}: {value}")
    else:
        console.print("  (none)")

    console.print()
    console.print("[bold]Exclusions:[/bold]")
    if cfg.exclusions.series:
        console.print(f"  Series: {', '.join(cfg.exclusions.series)}")
    else:
        console.print("  Series: (none)")


@config.command(name="path")
def config_path() -> None:
    """Show configuration file paths."""
    from titlescope.config import find_config_file, get_config_paths
    from titlescope.errors import _get_log_file_path

    console.print("[bold]Configuration paths (in priority order):[/bold]")
    config_file = find_config_file()

    for path in get_config_paths():
        if path.exists():
            if path == config_file:
                console.print(f"  [green]{path}[/green] (active)")
            else:
                console.print(f"  {path} (exists)")
        else:
            console.print(f"  [dim]{path}[/dim]")

    console.print()
    console.print("[bold]Other paths:[/bold]")
    console.print(f"  Error log: {_get_log_file_path()}")
    console.print(f"  .env file: {Path.cwd() / '.env'}")


@config.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite existing config file")
def config_init(force: bool) -> None:
    """Create a default configuration file."""
    from titlescope.config import CONFIG_FILENAME, get_config_dir, save_default_config

    config_path = get_config_dir() / CONFIG_FILENAME

    if config_path.exists() and not force:
        console.print(f"[yellow]Config file already exists:[/yellow] {config_path}")
        console.print("Use --force to overwrite.")
        sys.exit(1)

    save_default_config(config_path)
    console.print(f"[green]Created config file:[/green] {config_path}")
    console.print("Edit this file to customize your settings.")


if __name__ == "__main__":
    main()
