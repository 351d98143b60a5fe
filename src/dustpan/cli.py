"""CLI interface for dustpan."""

import logging
from datetime import timedelta
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from dustpan import __version__
from dustpan.analyzer import invalidate_after_cleanup, perform_scan
from dustpan.cache import clear_cache, get_cache_info, get_cache_path
from dustpan.categories import get_all_categories, get_category_by_alias
from dustpan.cleaner import delete_items
from dustpan.config import Settings, get_config_path, load_settings, save_settings
from dustpan.display import (
    confirm_action,
    console,
    show_cache_info,
    show_categories,
    show_cleanup_preview,
    show_cleanup_summary,
    show_dangerous_warning,
    show_error,
    show_items_json,
    show_paths,
    show_scan_results,
    show_scan_source,
    show_scanning_progress,
)
from dustpan.exceptions import InvalidAgeError, InvalidSizeError, ScanPathError
from dustpan.filters import filter_items, parse_age, parse_size
from dustpan.models import Category, ScanReport

log = logging.getLogger(__name__)


# Create Typer app
app = typer.Typer(
    name="dustpan",
    help="Sweep away gigabytes of build artifacts - find and delete build output, "
    "dependency folders and caches across your projects",
    add_completion=False,
    no_args_is_help=True,
)
cache_app = typer.Typer(help="Manage the scan cache", no_args_is_help=True)
app.add_typer(cache_app, name="cache")

err_console = Console(stderr=True)


def setup_logging(verbose: int = 0, quiet: bool = False) -> None:
    """Route log records through rich on stderr."""
    if quiet:
        level = logging.ERROR
    elif verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"dustpan version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More output (-vv for debug logs)."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-error output."),
) -> None:
    """dustpan - sweep away build artifacts and caches."""
    setup_logging(verbose, quiet)
    ctx.obj = {"verbose": verbose, "quiet": quiet}


def _is_quiet(ctx: typer.Context) -> bool:
    return bool(ctx.obj and ctx.obj.get("quiet"))


def _is_verbose(ctx: typer.Context) -> bool:
    return bool(ctx.obj and ctx.obj.get("verbose"))


def _parse_filters(
    min_size: Optional[str], older_than: Optional[str]
) -> tuple[Optional[int], Optional[timedelta]]:
    """Parse filter options, exiting on invalid input."""
    min_size_bytes = None
    age = None
    try:
        if min_size is not None:
            min_size_bytes = parse_size(min_size)
    except InvalidSizeError as e:
        show_error(
            "Invalid Size Format",
            f"Could not parse minimum size: {e}",
            [
                "Use format like: 100MB, 1GB, 500KB",
                "Examples: --min-size 100MB or --min-size 1GB",
            ],
        )
        raise typer.Exit(1)

    try:
        if older_than is not None:
            age = parse_age(older_than)
    except InvalidAgeError as e:
        show_error(
            "Invalid Age Format",
            f"Could not parse age: {e}",
            ["Use format like: 12h, 30d, 2w, 6m"],
        )
        raise typer.Exit(1)

    return min_size_bytes, age


def _parse_categories(values: Optional[List[str]]) -> list[Category]:
    """Resolve category aliases, exiting on unknown names."""
    categories: list[Category] = []
    for value in values or []:
        for alias in filter(None, (v.strip() for v in value.split(","))):
            category = get_category_by_alias(alias)
            if category is None:
                console.print(f"[red]Unknown category: {alias}[/red]")
                console.print("\nAvailable categories:")
                for info in get_all_categories():
                    console.print(f"  • [bold]{info.alias}[/bold] - {info.name}")
                raise typer.Exit(1)
            if category not in categories:
                categories.append(category)
    return categories


def _run_scan(
    path: str,
    max_depth: int,
    force: bool,
    index: bool,
    quiet: bool,
) -> ScanReport:
    """Scan with a progress display, turning bad roots into a clean exit."""
    try:
        if quiet:
            return perform_scan(path, max_depth, force=force, use_index=index)

        if force:
            console.print("[yellow]Forcing fresh scan (cache ignored)...[/yellow]")

        with show_scanning_progress() as progress:
            task = progress.add_task("Scanning...", total=None)

            def update_progress(stage: str, current: int, total: int) -> None:
                if stage == "discover":
                    progress.update(task, description=f"Scanning... {current} entries, {total} found")
                else:
                    progress.update(task, description="Calculating sizes...", completed=current, total=total)

            return perform_scan(
                path, max_depth, force=force, use_index=index, progress_callback=update_progress
            )
    except ScanPathError as e:
        if e.reason == ScanPathError.MISSING:
            show_error(
                "Path Not Found",
                f"The specified path does not exist: {e.path}",
                [
                    "Check if the path is typed correctly",
                    "Use an absolute path (e.g., /home/name/projects)",
                    "Try using '.' for the current directory",
                ],
            )
        else:
            show_error(
                "Invalid Path Type",
                f"The path is not a directory: {e.path}",
                ["Provide a directory path, not a file", "Use the parent directory instead"],
            )
        raise typer.Exit(1)


@app.command()
def scan(
    ctx: typer.Context,
    path: str = typer.Argument(".", help="Directory to scan (defaults to current directory)"),
    max_depth: Optional[int] = typer.Option(
        None, "--max-depth", "-d", min=0, help="Maximum depth to scan"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Force fresh scan, ignore cache"),
    index: bool = typer.Option(
        False, "--index", "-i", help="Use system indexing (Spotlight on macOS) - faster but may miss items"
    ),
    min_size: Optional[str] = typer.Option(
        None, "--min-size", "-s", help="Minimum size threshold (e.g. 100MB, 1GB)"
    ),
    older_than: Optional[str] = typer.Option(
        None, "--older-than", "-o", help="Only items older than (e.g. 30d, 1w, 12h)"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output results as JSON"),
    paths_only: bool = typer.Option(False, "--paths", "-p", help="Print only the item paths"),
) -> None:
    """Scan a directory for deletable build artifacts."""
    settings = load_settings()
    depth = settings.default_max_depth if max_depth is None else max_depth
    machine_output = json_output or paths_only
    quiet = _is_quiet(ctx) or machine_output

    min_size_bytes, age = _parse_filters(min_size, older_than)

    if not quiet:
        console.print(f"[bold]Scanning:[/bold] [yellow]{path}[/yellow]")
        console.print(f"[bold]Max depth:[/bold] [yellow]{depth}[/yellow]\n")

    report = _run_scan(path, depth, force, index or settings.use_index, quiet)
    items = filter_items(report.items, min_size=min_size_bytes, older_than=age)

    if json_output:
        show_items_json(items)
        return
    if paths_only:
        show_paths(items)
        return

    if not quiet:
        show_scan_source(report)
        if min_size is not None:
            console.print(f"[dim]Filtered by minimum size: {min_size}[/dim]")
    show_scan_results(items, verbose=_is_verbose(ctx))

    if items and not quiet:
        console.print()
        console.print("[dim]Run [bold]dustpan clean --category <name>[/bold] to delete items[/dim]")


@app.command()
def clean(
    ctx: typer.Context,
    path: str = typer.Argument(".", help="Directory to clean (defaults to current directory)"),
    max_depth: Optional[int] = typer.Option(
        None, "--max-depth", "-d", min=0, help="Maximum depth to scan"
    ),
    category: Optional[List[str]] = typer.Option(
        None, "--category", "-c", help="Category to clean (repeatable or comma-separated; see 'dustpan list')"
    ),
    all_categories: bool = typer.Option(False, "--all", "-a", help="Clean all categories"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompts"),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Preview what would be deleted without deleting"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Force fresh scan, ignore cache"),
    index: bool = typer.Option(False, "--index", "-i", help="Use system indexing - faster but may miss items"),
    min_size: Optional[str] = typer.Option(
        None, "--min-size", "-s", help="Minimum size threshold (e.g. 100MB, 1GB)"
    ),
    older_than: Optional[str] = typer.Option(
        None, "--older-than", "-o", help="Only items older than (e.g. 30d, 1w, 12h)"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output matching items as JSON and exit"),
) -> None:
    """Clean (delete) build artifacts and caches."""
    if not all_categories and not category:
        console.print("[red]Error: Specify --all or --category[/red]")
        console.print("  dustpan clean --category rust,node   # Clean Rust and Node artifacts")
        console.print("  dustpan clean --all --dry-run        # Preview everything")
        raise typer.Exit(1)

    settings = load_settings()
    depth = settings.default_max_depth if max_depth is None else max_depth
    quiet = _is_quiet(ctx) or json_output

    selected = Category.all() if all_categories else _parse_categories(category)
    log.debug("Cleaning categories: %s", ", ".join(c.value for c in selected))
    min_size_bytes, age = _parse_filters(min_size, older_than)

    report = _run_scan(path, depth, force, index or settings.use_index, quiet)
    items = filter_items(report.items, min_size=min_size_bytes, older_than=age, categories=selected)

    if not items:
        if not quiet:
            console.print("\n[yellow]No items found for selected categories.[/yellow]")
        return

    if json_output:
        show_items_json(items)
        return

    if not _is_quiet(ctx):
        show_cleanup_preview(items, dry_run=dry_run)
        show_dangerous_warning(items)

    if not yes and not dry_run:
        console.print()
        if not confirm_action("Proceed with deletion?"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)
        if any(i.category.is_dangerous for i in items):
            if not confirm_action("Are you ABSOLUTELY SURE you want to delete global caches?"):
                console.print("[yellow]Cancelled for safety.[/yellow]")
                raise typer.Exit(0)

    summary = delete_items(items, dry_run=dry_run)
    if not _is_quiet(ctx):
        console.print()
        show_cleanup_summary(summary)

    invalidate_after_cleanup(summary)

    if summary.failed_count > 0:
        raise typer.Exit(1)


@cache_app.command("clear")
def cache_clear() -> None:
    """Clear the scan cache."""
    clear_cache()
    console.print(f"[green]Cache cleared[/green] [dim]({get_cache_path()})[/dim]")


@cache_app.command("info")
def cache_info() -> None:
    """Show cache information."""
    show_cache_info(get_cache_info())


@app.command(name="list")
def list_categories() -> None:
    """List all artifact categories."""
    show_categories(get_all_categories())
    console.print("\n[dim]Use the alias with [bold]dustpan clean --category <alias>[/bold][/dim]")


@app.command()
def config(
    init: bool = typer.Option(False, "--init", help="Write a config file with default settings"),
) -> None:
    """Show the active configuration."""
    config_path = get_config_path()

    if init:
        if config_path.exists():
            console.print(f"[yellow]Config file already exists: {config_path}[/yellow]")
            raise typer.Exit(1)
        if not save_settings(Settings()):
            console.print(f"[red]Could not write {config_path}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]Wrote default config to {config_path}[/green]")
        return

    settings = load_settings()
    source = config_path if config_path.exists() else "defaults"
    console.print(f"[bold]Configuration[/bold] [dim]({source})[/dim]")
    for key, value in settings.model_dump().items():
        console.print(f"  {key}: {value}")


if __name__ == "__main__":
    app()
