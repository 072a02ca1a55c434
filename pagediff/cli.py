"""CLI entry point for the page comparison tool."""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from pagediff.errors import PageDiffError
from pagediff.models.config import FrameworkConfig
from pagediff.models.result import ComparisonBundle, ProgressEvent
from pagediff.orchestrator import ComparisonOrchestrator
from pagediff.reporter.reporter import Reporter
from pagediff.store.result_store import ResultStore

console = Console()

DEFAULT_CONFIG = "pagediff-config.json"

SEVERITY_STYLES = {"high": "red", "medium": "yellow", "low": "blue"}


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(path: str) -> FrameworkConfig:
    """Load the config file; the default path may be absent, an explicit one may not."""
    try:
        return FrameworkConfig.load(path)
    except FileNotFoundError:
        if path != DEFAULT_CONFIG:
            console.print(f"[red]Config file not found: {path}[/red]")
            console.print("Run 'pagediff init' to create a default config.")
            sys.exit(1)
        return FrameworkConfig()


def _print_progress(event: ProgressEvent) -> None:
    console.print(f"[dim]{event.step:>2}. {event.detail}[/dim]")


def _print_differences(bundle: ComparisonBundle) -> None:
    for result in bundle.results:
        table = Table(title=f"State: {result.state} ({len(result.differences)} differences)")
        table.add_column("#", justify="right")
        table.add_column("Severity")
        table.add_column("Type")
        table.add_column("Category", style="bold")
        table.add_column("Detail", overflow="fold")
        for index, diff in enumerate(result.differences, 1):
            style = SEVERITY_STYLES.get(diff.severity, "white")
            table.add_row(
                str(index),
                f"[{style}]{diff.severity.upper()}[/{style}]",
                diff.type,
                diff.category,
                diff.detail,
            )
        console.print(table)
        console.print(
            f"  {result.summary.pixel_differences} changed pixels in "
            f"{result.summary.regions} regions"
        )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Visual and structural comparison of two web pages"""
    setup_logging(verbose)


@cli.command()
def init() -> None:
    """Create a default configuration file."""
    config_path = Path(DEFAULT_CONFIG)
    if config_path.exists():
        if not click.confirm(f"{DEFAULT_CONFIG} already exists. Overwrite?"):
            return

    FrameworkConfig().save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nYou can now customize this file and run:")
    console.print("  [blue]pagediff compare https://example.com https://staging.example.com[/blue]")


@cli.command()
@click.argument("url1")
@click.argument("url2")
@click.option("--interactions", "-i", default="", help="Comma-separated labels to click before capturing")
@click.option("--description", "-d", default="", help="Free-text note stored with the result")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def compare(url1: str, url2: str, interactions: str, description: str, config: str) -> None:
    """Compare two pages: capture, diff, highlight and store the result."""
    cfg = _load_config(config)
    orchestrator = ComparisonOrchestrator(cfg, progress=_print_progress)

    try:
        bundle = orchestrator.run(url1, url2, interactions, description)
    except (PageDiffError, ValueError) as e:
        console.print(f"[red]Comparison failed: {e}[/red]")
        sys.exit(1)

    console.print(f"\n[bold green]Comparison Complete[/bold green] (id {bundle.id})")
    _print_differences(bundle)

    for fmt, path in orchestrator.generate_reports(bundle).items():
        console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")


@cli.group()
def results() -> None:
    """Browse stored comparison results."""
    pass


@results.command("list")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def results_list(config: str) -> None:
    """List stored comparisons, newest first."""
    cfg = _load_config(config)
    summaries = ResultStore(Path(cfg.results_dir)).list_summaries()
    if not summaries:
        console.print("[yellow]No stored comparisons[/yellow]")
        return

    table = Table(title="Stored Comparisons")
    table.add_column("ID", style="bold", no_wrap=True)
    table.add_column("Date")
    table.add_column("URL 1", overflow="fold")
    table.add_column("URL 2", overflow="fold")
    table.add_column("Differences", justify="right")
    for s in summaries:
        table.add_row(
            s.id,
            datetime.fromtimestamp(s.timestamp / 1000).strftime("%Y-%m-%d %H:%M"),
            s.url1,
            s.url2,
            str(s.total_differences),
        )
    console.print(table)


@results.command("show")
@click.argument("result_id")
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def results_show(result_id: str, config: str) -> None:
    """Show the differences of a stored comparison."""
    cfg = _load_config(config)
    try:
        bundle = ResultStore(Path(cfg.results_dir)).load(result_id)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    console.print(f"[bold]{bundle.url1}[/bold] vs [bold]{bundle.url2}[/bold]")
    if bundle.description:
        console.print(bundle.description)
    _print_differences(bundle)


@cli.command()
@click.argument("result_id")
@click.option(
    "--format", "-f", "formats", multiple=True, default=["html"],
    type=click.Choice(["html", "json", "markdown"]), help="Report format (repeatable)",
)
@click.option("--config", "-c", default=DEFAULT_CONFIG, help="Config file path")
def report(result_id: str, formats: tuple[str, ...], config: str) -> None:
    """Regenerate reports for a stored comparison (HTML by default)."""
    cfg = _load_config(config)
    try:
        bundle = ResultStore(Path(cfg.results_dir)).load(result_id)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    generated = Reporter(cfg).generate_reports(bundle, formats=list(formats))
    for fmt, path in generated.items():
        console.print(f"  {fmt.upper()} report: [blue]{path}[/blue]")


if __name__ == "__main__":
    cli()
