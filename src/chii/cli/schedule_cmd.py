"""CLI command for running the job scheduler.

Usage:
    chii schedule
    chii schedule --check-interval 10
"""

from __future__ import annotations

import asyncio

import typer

from chii.cli.runtime import open_aggregator, setup_logging
from chii.config import settings
from chii.jobs.scheduler import JobScheduler
from chii.jobs.tasks import register_trending_jobs

app = typer.Typer(help="Run the trending jobs on their cron schedules")


@app.callback(invoke_without_command=True)
def schedule(
    check_interval: float = typer.Option(
        30.0,
        "--check-interval",
        "-i",
        help="Seconds between schedule checks",
    ),
    subjects_cron: str = typer.Option(
        settings.trending_schedule,
        "--subjects-cron",
        help="Cron expression for trending subjects",
    ),
    topics_cron: str = typer.Option(
        settings.topic_trending_schedule,
        "--topics-cron",
        help="Cron expression for trending subject topics",
    ),
) -> None:
    """Run the scheduler until interrupted."""
    setup_logging()
    typer.echo("Starting chii scheduler...")
    typer.echo(f"  Trending subjects: {subjects_cron}")
    typer.echo(f"  Trending topics: {topics_cron}")

    async def _run() -> None:
        async with open_aggregator() as aggregator:
            scheduler = JobScheduler(check_interval=check_interval)
            register_trending_jobs(scheduler, aggregator, subjects_cron, topics_cron)
            await scheduler.run()

    try:
        asyncio.run(_run())
    except KeyboardInterrupt:
        typer.echo("Scheduler stopped")
