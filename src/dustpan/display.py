"""Rich terminal display for dustpan."""

from pydantic import TypeAdapter
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from dustpan.analyzer import summarize_by_category
from dustpan.categories import CategoryInfo
from dustpan.models import CacheInfo, CleanupSummary, DeletableItem, ScanReport, ScanSource

console = Console()

# Items shown per category before collapsing into "...and N more"
MAX_ITEMS_PER_CATEGORY = 5

_ITEMS_ADAPTER = TypeAdapter(list[DeletableItem])


def format_size(size_bytes: int) -> str:
    """Format bytes to a human-readable string (binary units)."""
    for unit, factor in (("TB", 1024**4), ("GB", 1024**3), ("MB", 1024**2), ("KB", 1024)):
        if size_bytes >= factor:
            return f"{size_bytes / factor:.2f} {unit}"
    return f"{size_bytes} B"


def format_age(seconds: float) -> str:
    """Format an age in seconds as the largest whole unit."""
    secs = int(max(seconds, 0))
    if secs < 60:
        return f"{secs} seconds"
    if secs < 3600:
        return f"{secs // 60} minutes"
    if secs < 86400:
        return f"{secs // 3600} hours"
    return f"{secs // 86400} days"


def size_bar(size: int, total: int, width: int = 20) -> str:
    """Proportional bar for ``size`` out of ``total``."""
    if total <= 0:
        return ""
    filled = round(width * size / total)
    return f"[cyan]{'█' * filled}[/cyan][dim]{'░' * (width - filled)}[/dim]"


def show_scan_source(report: ScanReport) -> None:
    """Explain where scan results came from."""
    if report.source == ScanSource.CACHE:
        console.print("[green]Using cached scan results (less than 5 minutes old)[/green]")
        console.print(f"[bright_green]Loaded:[/bright_green] {len(report.items)} items\n")
    elif report.source == ScanSource.INDEX:
        console.print("[green]✓ Used Spotlight indexing[/green]")
        console.print("[dim]  Finds ALL directories (ignores depth limit)[/dim]")
        console.print("[dim]  Note: May miss very recently created files[/dim]")
    else:
        console.print("[dim]Scan results cached for future use[/dim]")


def show_scan_results(items: list[DeletableItem], verbose: bool = False) -> None:
    """Display scan results grouped by category, largest first."""
    if not items:
        console.print("\n[bold green]No deletable items found![/bold green]")
        return

    total_size = sum(i.size for i in items)
    console.print(
        f"\n📋 [bold yellow]{len(items)}[/bold yellow] items found "
        f"([bold green]{format_size(total_size)}[/bold green])"
    )

    for summary in summarize_by_category(items):
        category_size = summary.total_bytes
        percentage = (category_size / total_size * 100) if total_size else 0.0
        console.print(
            f"\n{summary.category.emoji} [bold]{summary.category.display_name}[/bold] • "
            f"[bold green]{format_size(category_size)}[/bold green] • "
            f"{summary.count} items ({percentage:.1f}%)"
        )

        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column("#", justify="right", style="dim")
        table.add_column("Project", style="cyan", max_width=30, no_wrap=True)
        table.add_column("Size", justify="right")
        table.add_column("Share")

        for idx, item in enumerate(summary.items[:MAX_ITEMS_PER_CATEGORY], 1):
            table.add_row(
                f"{idx}.",
                item.project_name,
                format_size(item.size),
                size_bar(item.size, category_size),
            )
            if verbose:
                table.add_row("", f"[dim]{escape(str(item.path))}[/dim]", "", "")

        console.print(table)

        hidden = summary.count - MAX_ITEMS_PER_CATEGORY
        if hidden > 0:
            console.print(f"      [dim]...and[/dim] [bright_yellow]{hidden}[/bright_yellow] more items")


def show_paths(items: list[DeletableItem]) -> None:
    """Print one path per line, for piping into other tools."""
    for item in items:
        console.print(str(item.path), markup=False, highlight=False, soft_wrap=True)


def show_items_json(items: list[DeletableItem]) -> None:
    """Print items as pretty JSON."""
    payload = _ITEMS_ADAPTER.dump_json(items, indent=2).decode()
    console.print(payload, markup=False, highlight=False, soft_wrap=True)


def show_cleanup_preview(items: list[DeletableItem], dry_run: bool = False) -> None:
    """Display the deletion summary before confirmation."""
    if dry_run:
        console.print("[yellow]DRY RUN - No files will be deleted[/yellow]\n")

    table = Table(title="Deletion Summary", show_header=True, header_style="bold")
    table.add_column("Category")
    table.add_column("Items", justify="right")
    table.add_column("Size", justify="right")

    for summary in summarize_by_category(items):
        name = f"{summary.category.emoji} {summary.category.display_name}"
        if summary.category.is_dangerous:
            name = f"[red]{name} (DANGEROUS)[/red]"
        table.add_row(name, str(summary.count), format_size(summary.total_bytes))

    console.print(table)
    total = sum(i.size for i in items)
    console.print(f"\n[bold]Will delete:[/bold] {len(items)} items")
    console.print(f"[bold]Will free:[/bold] [green]{format_size(total)}[/green]")
    if not dry_run:
        console.print("[red]⚠ Warning: This action cannot be undone![/red]")


def show_dangerous_warning(items: list[DeletableItem]) -> None:
    """Warn about categories that affect all projects."""
    dangerous = sorted({i.category for i in items if i.category.is_dangerous}, key=lambda c: c.value)
    if not dangerous:
        return

    lines = [f"• {c.display_name}: deleting affects ALL projects, not just this tree" for c in dangerous]
    lines.append("All projects will need to re-download dependencies!")
    console.print(
        Panel(
            "\n".join(lines),
            title="[bold red]⚠️  DANGER WARNING ⚠️[/bold red]",
            border_style="red",
        )
    )


def show_cleanup_summary(summary: CleanupSummary) -> None:
    """Display the outcome of a batch of deletions."""
    for result in summary.results:
        if result.success:
            verb = "Would delete" if summary.dry_run else "Deleted"
            console.print(f"  [green]✓[/green] {verb} {escape(str(result.path))}")
        else:
            console.print(f"  [red]✗[/red] {escape(str(result.path))}: {escape(result.error or '')}")

    console.print()
    table = Table(show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    if summary.dry_run:
        table.add_row("Would delete", f"{summary.deleted_count} items")
        table.add_row("Would free", format_size(summary.bytes_freed))
    else:
        table.add_row("Successfully deleted", f"[green]{summary.deleted_count}[/green] items")
        if summary.failed_count > 0:
            table.add_row("[red]Failed[/red]", f"{summary.failed_count} items")
        table.add_row("Space freed", f"[bold green]{format_size(summary.bytes_freed)}[/bold green]")

    console.print(table)


def show_cache_info(info: CacheInfo) -> None:
    """Display cache location, parameters and freshness."""
    if not info.exists:
        console.print("[yellow]No cache file found.[/yellow]")
        return

    console.print("[bold cyan]Cache Information:[/bold cyan]")
    console.print(f"  Location: {info.location}")
    console.print(f"  Size: {format_size(info.size_bytes)}")

    if not info.readable:
        console.print("  [yellow]Cache file is unreadable and will be ignored[/yellow]")
        return

    console.print(f"  Scan path: {info.scan_path}")
    console.print(f"  Max depth: {info.max_depth}")
    console.print(f"  Items cached: {info.item_count}")
    if info.age_seconds is not None:
        console.print(f"  Cache age: {format_age(info.age_seconds)} ago")
    if info.is_fresh:
        console.print("  [green]Cache is fresh[/green]")
    else:
        console.print("  [yellow]Cache is stale (>5 minutes old)[/yellow]")


def show_categories(categories: list[CategoryInfo]) -> None:
    """List all categories with their command-line aliases."""
    table = Table(title="Available Categories", show_header=True, header_style="bold")
    table.add_column("", width=3)
    table.add_column("Alias", style="bold")
    table.add_column("Name")
    table.add_column("Contents")

    for info in categories:
        name = f"[red]{info.name} (DANGEROUS)[/red]" if info.dangerous else info.name
        table.add_row(info.emoji, info.alias, name, info.description)

    console.print(table)


def show_error(title: str, message: str, hints: list[str] | None = None) -> None:
    """Display an error panel with optional suggestions."""
    body = message
    if hints:
        body += "\n\n[bold]Suggestions:[/bold]\n" + "\n".join(f"  • {h}" for h in hints)
    console.print(Panel(body, title=f"[bold red]{title}[/bold red]", border_style="red"))


def show_scanning_progress() -> Progress:
    """Create progress bar for scanning."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


def confirm_action(message: str) -> bool:
    """Ask for confirmation."""
    from rich.prompt import Confirm

    return Confirm.ask(message, default=False)
