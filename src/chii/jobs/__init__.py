"""Scheduled background jobs."""

from chii.jobs.scheduler import CronExpression, JobScheduler, ScheduledJob
from chii.jobs.tasks import register_trending_jobs, trending_subject_topics, trending_subjects

__all__ = [
    "CronExpression",
    "JobScheduler",
    "ScheduledJob",
    "register_trending_jobs",
    "trending_subject_topics",
    "trending_subjects",
]
