"""CLI entry point for csscritic."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from csscritic.critic import CssCritic
from csscritic.models.comparison import TestCase
from csscritic.models.config import CriticConfig
from csscritic.regression import ImageComparer
from csscritic.renderer.page_renderer import PageRenderer
from csscritic.reporter.json_report import JsonReporter
from csscritic.reporter.reporting import ReportedComparison
from csscritic.reporter.terminal_reporter import TerminalReporter
from csscritic.storage.file_store import FileImageStore
from csscritic.url_query_filter import Location, UrlQueryFilter

console = Console()


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _load_config(config: str) -> CriticConfig:
    try:
        return CriticConfig.load(config)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config}[/red]")
        console.print("Run 'csscritic init' to create a default config.")
        sys.exit(1)


def build_reporters(cfg: CriticConfig) -> list:
    reporters = []
    if "terminal" in cfg.report_formats:
        reporters.append(TerminalReporter(console))
    if "json" in cfg.report_formats:
        reporters.append(JsonReporter(Path(cfg.report_output_dir)))
    return reporters


def _build_critic(cfg: CriticConfig, renderer: PageRenderer, reporters: list) -> CssCritic:
    critic = CssCritic(
        renderer,
        FileImageStore(Path(cfg.reference_dir)),
        reporters=reporters,
        comparer=ImageComparer(tolerance=cfg.diff_tolerance),
        default_viewport=cfg.default_viewport,
    )
    for test_case in cfg.test_cases:
        critic.add(test_case)
    return critic


class AcceptingReporter:
    """Stores every rendered page as its new reference, optionally re-rendered first."""

    def __init__(self, width: int | None = None, height: int | None = None):
        self.width = width
        self.height = height
        self.accepted: list[str] = []

    async def report_comparison(self, comparison: ReportedComparison) -> None:
        if comparison.accept_page is None:
            raise click.ClickException(f"Could not render {comparison.test_case.url}")
        if self.width and self.height:
            await comparison.resize_page_image(self.width, self.height)
        await comparison.accept_page(lambda: self.accepted.append(comparison.test_case.url))


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Visual regression testing for web pages"""
    setup_logging(verbose)


@cli.command()
@click.option("--config", "-c", default="csscritic.json", help="Config file path")
def run(config: str) -> None:
    """Compare every configured page against its reference image."""
    cfg = _load_config(config)
    if not cfg.test_cases:
        console.print("[yellow]No test cases configured[/yellow]")
        return

    async def _run() -> bool:
        async with PageRenderer(cfg.browser_timeout_ms, base_dir=Path(config).parent) as renderer:
            critic = _build_critic(cfg, renderer, build_reporters(cfg))
            return await critic.execute()

    success = asyncio.run(_run())
    sys.exit(0 if success else 1)


@cli.command()
@click.argument("url")
@click.option("--width", type=int, help="Viewport width to render at before accepting")
@click.option("--height", type=int, help="Viewport height to render at before accepting")
@click.option("--config", "-c", default="csscritic.json", help="Config file path")
def accept(url: str, width: int | None, height: int | None, config: str) -> None:
    """Render a page and store it as its new reference image."""
    if (width is None) != (height is None):
        raise click.UsageError("--width and --height must be given together")
    cfg = _load_config(config)
    test_case = next((tc for tc in cfg.test_cases if tc.url == url), TestCase(url=url))
    accepting = AcceptingReporter(width, height)

    async def _accept() -> None:
        async with PageRenderer(cfg.browser_timeout_ms, base_dir=Path(config).parent) as renderer:
            critic = _build_critic(cfg, renderer, [accepting])
            result = await critic.regression.compare(test_case)
            await critic.reporting.report_comparison(critic.reporters, result)

    asyncio.run(_accept())
    for accepted_url in accepting.accepted:
        console.print(f"[green]Stored reference for[/green] {accepted_url}")


@cli.command()
@click.argument("url")
@click.option("--hover", default=None, help="Selector to hover before capturing")
@click.option("--config", "-c", default="csscritic.json", help="Config file path")
def add(url: str, hover: str | None, config: str) -> None:
    """Add a page to the configuration."""
    cfg = _load_config(config)
    params = {"hover": hover} if hover else {}
    cfg.test_cases.append(TestCase(url=url, **params))
    cfg.save(config)
    console.print(f"[green]Added test case:[/green] {url}")


@cli.command("filter-url")
@click.argument("url", required=False)
@click.option("--search", default="", help="Current query string, e.g. '?some=param'")
def filter_url(url: str | None, search: str) -> None:
    """Print the report query string selecting URL, or clearing the filter if URL is omitted."""
    query_filter = UrlQueryFilter(Location(search=search))
    if url is None:
        click.echo(query_filter.clear_filter_url())
    else:
        click.echo(query_filter.filter_url_for(url))


@cli.command()
@click.option("--target", "-t", prompt="Page URL", help="First page to test")
def init(target: str) -> None:
    """Create a default configuration file."""
    config_path = Path("csscritic.json")
    if config_path.exists():
        if not click.confirm("csscritic.json already exists. Overwrite?"):
            return

    cfg = CriticConfig(test_cases=[TestCase(url=target)])
    cfg.save(config_path)
    console.print(f"[green]Created {config_path}[/green]")
    console.print("\nStore the first reference images with:")
    console.print(f"  [blue]csscritic accept {target}[/blue]")
    console.print("\nThen check for regressions with:")
    console.print("  [blue]csscritic run[/blue]")


if __name__ == "__main__":
    cli()
