"""Trending recomputation jobs."""

from __future__ import annotations

import logging

from chii.core.types import SUBJECT_TYPES, TrendingPeriod
from chii.jobs.scheduler import JobScheduler
from chii.observability.logging import LogContext
from chii.trending.aggregator import TrendingAggregator

logger = logging.getLogger(__name__)


async def trending_subjects(aggregator: TrendingAggregator, flush: bool = False) -> None:
    """Recompute the monthly trending list of every subject type."""
    logger.info("Updating trending subjects...")
    for subject_type in SUBJECT_TYPES:
        with LogContext(job="trending_subjects", subject_type=int(subject_type), period="month"):
            logger.info(f"Updating trending subjects for {int(subject_type)}...")
            await aggregator.trigger(subject_type, TrendingPeriod.MONTH, flush=flush)


async def trending_subject_topics(aggregator: TrendingAggregator, flush: bool = False) -> None:
    """Recompute the weekly trending subject topics."""
    with LogContext(job="trending_subject_topics", period="week"):
        logger.info("Updating trending subject topics...")
        await aggregator.trigger_topics(TrendingPeriod.WEEK, flush=flush)


def register_trending_jobs(
    scheduler: JobScheduler,
    aggregator: TrendingAggregator,
    subjects_cron: str,
    topics_cron: str,
) -> None:
    async def run_subjects() -> None:
        await trending_subjects(aggregator)

    async def run_topics() -> None:
        await trending_subject_topics(aggregator)

    scheduler.add_job("trending_subjects", run_subjects, cron=subjects_cron)
    scheduler.add_job("trending_subject_topics", run_topics, cron=topics_cron)
