"""
Command-line interface for rssfinder.

Takes one or more YouTube channel URLs, finds the RSS feed advertised in each
channel page and prints a channel/feed table. Failures for individual channels
are reported on stderr after the table and do not change the exit code.
"""

import asyncio
import sys

import structlog
import typer
from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from rssfinder.core.config import settings
from rssfinder.core.errors import AggregatedFailure, EmptyInputError, OutputError
from rssfinder.core.logging_setup import configure_logging
from rssfinder.services.fetcher import HttpFetcher
from rssfinder.services.orchestrator import run_pipeline
from rssfinder.services.types import PipelineResult

logger = structlog.get_logger(__name__)

HEADERS = ("Youtube Channel", "RSS Feed")

app = typer.Typer(
    name="rssfinder",
    help="Find the RSS feed of YouTube channels",
    add_completion=False,
)


async def _collect(urls: list[str]) -> PipelineResult:
    async with HttpFetcher() as fetcher:
        return await run_pipeline(urls, fetcher)


def _write_results(result: PipelineResult, console: Console) -> None:
    if console.is_terminal:
        table = Table(box=box.ROUNDED, show_lines=True)
        for header in HEADERS:
            table.add_column(header, overflow="fold")
        for channel, feed in result.rows():
            table.add_row(channel, feed)
        console.print(table)
        return

    # Piped output: no borders, one tab-separated row per channel
    lines = ["\t".join(HEADERS), *("\t".join(row) for row in result.rows())]
    sys.stdout.write("\n".join(lines) + "\n")
    sys.stdout.flush()


def _write_failure(failure: AggregatedFailure, console: Console) -> None:
    if console.is_terminal:
        console.print(Text(failure.render(), style="red"))
        return
    sys.stderr.write(failure.render() + "\n")
    sys.stderr.flush()


@app.command()
def main(
    urls: list[str] = typer.Argument(..., help="The urls of the youtube channels"),
) -> None:
    """Extract the RSS feed url of every given YouTube channel."""
    configure_logging(settings.LOG_LEVEL, settings.ENVIRONMENT)

    try:
        result = asyncio.run(_collect(urls))
    except EmptyInputError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=2) from exc

    try:
        _write_results(result, Console())
        if result.failure is not None:
            _write_failure(result.failure, Console(stderr=True))
    except OSError as exc:
        logger.error("cli.output_failed", error=str(exc))
        raise OutputError("unable to write results", stage="output") from exc
