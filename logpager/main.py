#!/usr/bin/env python3
"""
logpager - Main Entry Point
Print pages of a log file in the terminal
"""
from typing import List, Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from logpager.config import load_settings
from logpager.logging_setup import setup_logging
from logpager.log_viewer import KeywordFetcher, LogEntry, LogParser, LogPaginator, PageRequest


def build_table(entries: List[LogEntry], title: Optional[str] = None) -> Table:
    """Render entries as a table with color-coded levels"""
    table = Table(title=title, show_lines=False)
    table.add_column("Level", no_wrap=True)
    table.add_column("Env", no_wrap=True)
    table.add_column("Time", no_wrap=True)
    table.add_column("Message")

    for entry in entries:
        message = Text(entry.message)
        if entry.trace:
            message.append("\n" + entry.trace, style="dim")
        table.add_row(
            Text(entry.level, style=entry.severity.color),
            Text(entry.environment, style="bold"),
            entry.timestamp,
            message,
        )
    return table


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Page through timestamp-delimited log files."""
    try:
        settings = load_settings()
    except ValidationError as e:
        raise click.UsageError(f"Invalid LOGPAGER_* setting: {e}")
    setup_logging(settings.log_level)
    ctx.obj = settings


@cli.command("page")
@click.argument("file", type=click.Path(dir_okay=False))
@click.option("--seek", "-s", type=int, default=0, show_default=True,
              help="0 = latest page, negative = older page, positive = newer page")
@click.option("--lines", "-n", type=int, default=None, help="Entries per page")
@click.option("--buffer", "-b", "buffer_size", type=int, default=None, help="Bytes per read call")
@click.option("--keyword", "-k", default=None, help="Only show entries containing this text")
@click.pass_obj
def page_command(settings, file: str, seek: int, lines: Optional[int],
                 buffer_size: Optional[int], keyword: Optional[str]) -> None:
    """Print one page of FILE."""
    console = Console()
    try:
        request = PageRequest(
            seek=seek,
            line_count=settings.line_count if lines is None else lines,
            buffer_size=settings.buffer_size if buffer_size is None else buffer_size,
        )
    except ValueError as e:
        raise click.BadParameter(str(e))

    paginator = LogPaginator(file, LogParser(root_path=settings.root_path))
    fetcher = KeywordFetcher(paginator, max_pages=settings.max_pages)
    page = fetcher.fetch_filtered(request, keyword)

    if page.offset is None:
        console.print(f"[yellow]No entries available in {escape(file)}[/yellow]")
        return

    console.print(build_table(page.entries, title=escape(file)))

    if page.keyword_active:
        console.print("[dim]Paging is disabled while a keyword filter is active[/dim]")
        return

    console.print(f"next: {page.next_seek if page.next_seek is not None else '-'}  "
                  f"previous: {page.previous_seek if page.previous_seek is not None else '-'}")


@cli.command("tail")
@click.argument("file", type=click.Path(dir_okay=False))
@click.option("--seek", "-s", type=int, default=0, show_default=True,
              help="Position printed by the previous tail call")
@click.pass_obj
def tail_command(settings, file: str, seek: int) -> None:
    """Print entries appended to FILE since SEEK."""
    console = Console()
    paginator = LogPaginator(file, LogParser(root_path=settings.root_path))
    position, entries = paginator.tail(seek, settings.buffer_size)

    if entries:
        console.print(build_table(entries))
    console.print(f"position: {position}")


if __name__ == "__main__":
    cli()
