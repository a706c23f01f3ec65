"""CLI commands for trending lists.

Usage:
    chii trending subjects
    chii trending subjects --type 2 --period week --flush
    chii trending topics
    chii trending show --type 2 --limit 10
"""

from __future__ import annotations

import asyncio

import typer

from chii.cli.runtime import open_aggregator, setup_logging
from chii.core.types import SUBJECT_TYPES, SubjectType, TrendingPeriod
from chii.jobs.tasks import trending_subject_topics

app = typer.Typer(help="Recompute and inspect trending lists", no_args_is_help=True)


def _subject_type(value: int) -> SubjectType:
    try:
        return SubjectType(value)
    except ValueError:
        valid = ", ".join(str(int(t)) for t in SUBJECT_TYPES)
        raise typer.BadParameter(f"unknown subject type {value} (expected one of {valid})") from None


@app.command("subjects")
def subjects(
    subject_type: int | None = typer.Option(
        None,
        "--type",
        "-t",
        help="Subject type to recompute (all types when omitted)",
    ),
    period: str = typer.Option(
        TrendingPeriod.MONTH.value,
        "--period",
        "-p",
        help="Trending window: day, week or month",
    ),
    flush: bool = typer.Option(
        False,
        "--flush",
        help="Delete a held lock before recomputing",
    ),
) -> None:
    """Recompute trending subjects."""
    types = SUBJECT_TYPES if subject_type is None else (_subject_type(subject_type),)
    setup_logging()

    async def _run() -> None:
        async with open_aggregator() as aggregator:
            for t in types:
                done = await aggregator.trigger(t, period, flush=flush)
                typer.echo(f"{int(t)}: {'updated' if done else 'skipped'}")

    asyncio.run(_run())


@app.command("topics")
def topics(
    flush: bool = typer.Option(
        False,
        "--flush",
        help="Delete a held lock before recomputing",
    ),
) -> None:
    """Recompute the weekly trending subject topics."""
    setup_logging()

    async def _run() -> None:
        async with open_aggregator() as aggregator:
            await trending_subject_topics(aggregator, flush=flush)

    asyncio.run(_run())


@app.command("show")
def show(
    subject_type: int = typer.Option(
        int(SubjectType.ANIME),
        "--type",
        "-t",
        help="Subject type",
    ),
    period: str = typer.Option(
        TrendingPeriod.MONTH.value,
        "--period",
        "-p",
        help="Trending window: day, week or month",
    ),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of items"),
    offset: int = typer.Option(0, "--offset", help="Items to skip"),
) -> None:
    """Print a cached trending list."""
    setup_logging()
    resolved = _subject_type(subject_type)

    async def _run() -> None:
        async with open_aggregator() as aggregator:
            items = await aggregator.read(resolved, period, limit=limit, offset=offset)
        if not items:
            typer.echo("No trending list cached")
            return
        for rank, item in enumerate(items, start=offset + 1):
            typer.echo(f"{rank:>4}  {item.id:>8}  {item.total}")

    asyncio.run(_run())
