"""Cron-driven runner for the periodic trending jobs.

Jobs are plain coroutine functions registered under a name with a 5-field
cron expression. ``JobScheduler.tick`` starts whatever is due as background
tasks; ``run`` calls it every ``check_interval`` seconds until ``stop`` is
called.

Several processes may run a scheduler at the same time. The trending jobs
guard each recomputation with their own advisory lock, so duplicate ticks
across processes cost one cache round-trip each.

Example:
    scheduler = JobScheduler()
    scheduler.add_job("trending_subjects", recompute, cron="0 * * * *")

    await scheduler.run()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

logger = logging.getLogger(__name__)

JobFunc = Callable[[], Awaitable[Any]]

# (name, lowest, highest) for each cron field, in expression order
_FIELDS = (
    ("minute", 0, 59),
    ("hour", 0, 23),
    ("day_of_month", 1, 31),
    ("month", 1, 12),
    ("day_of_week", 0, 6),
)

# A year of minutes bounds the search for expressions like "0 0 29 2 *"
_SEARCH_LIMIT = timedelta(days=366)


def _expand(term: str, low: int, high: int) -> range:
    """Values covered by one comma-separated term of a cron field."""
    base, _, step_text = term.partition("/")
    step = int(step_text) if step_text else 1
    if step < 1:
        raise ValueError(f"Invalid cron step in {term!r}")

    if base == "*":
        first, last = low, high
    elif "-" in base:
        first_text, last_text = base.split("-", 1)
        first, last = int(first_text), int(last_text)
    else:
        first = last = int(base)
        if step_text:
            last = high

    if first < low or last > high or first > last:
        raise ValueError(f"Cron term {term!r} out of range {low}-{high}")
    return range(first, last + 1, step)


@dataclass
class ScheduledJob:
    name: str
    func: JobFunc
    cron: str
    enabled: bool = True
    last_run: datetime | None = None
    next_run: datetime | None = None


class CronExpression:
    """A parsed 5-field cron expression.

    Each field accepts ``*``, single values, ranges ``a-b``, steps ``*/n`` or
    ``a-b/n``, and comma-separated lists of those. Day of week counts from
    0 = Sunday. Day of month and day of week must both match.
    """

    minute: frozenset[int]
    hour: frozenset[int]
    day_of_month: frozenset[int]
    month: frozenset[int]
    day_of_week: frozenset[int]

    def __init__(self, expression: str) -> None:
        self.expression = expression
        terms = expression.split()
        if len(terms) != len(_FIELDS):
            raise ValueError(
                f"Invalid cron expression (expected {len(_FIELDS)} parts): {expression!r}"
            )

        for (name, low, high), field in zip(_FIELDS, terms):
            values: set[int] = set()
            for term in field.split(","):
                values.update(_expand(term, low, high))
            setattr(self, name, frozenset(values))

        # datetime.weekday() counts from Monday
        self._weekdays = frozenset((day + 6) % 7 for day in self.day_of_week)

    def __repr__(self) -> str:
        return f"CronExpression({self.expression!r})"

    def matches(self, dt: datetime) -> bool:
        return (
            dt.minute in self.minute
            and dt.hour in self.hour
            and dt.day in self.day_of_month
            and dt.month in self.month
            and dt.weekday() in self._weekdays
        )

    def next_run(self, after: datetime | None = None) -> datetime:
        """First whole minute strictly later than ``after`` that matches."""
        start = (after or datetime.now(UTC)).replace(second=0, microsecond=0)
        candidate = start + timedelta(minutes=1)
        while candidate - start <= _SEARCH_LIMIT:
            if self.matches(candidate):
                return candidate
            candidate += timedelta(minutes=1)
        raise ValueError(f"Cron expression never fires: {self.expression!r}")


class JobScheduler:
    """Runs registered coroutines when their cron expressions come due.

    Args:
        check_interval: Seconds between two ticks of ``run``
        clock: Current time, timezone-aware
    """

    def __init__(
        self,
        check_interval: float = 30.0,
        clock: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self.check_interval = check_interval
        self._clock = clock
        self._jobs: dict[str, ScheduledJob] = {}
        self._crons: dict[str, CronExpression] = {}
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._running = False

    def add_job(
        self,
        name: str,
        func: JobFunc,
        cron: str = "* * * * *",
        enabled: bool = True,
    ) -> ScheduledJob:
        """Register ``func`` under ``name``, replacing any job of that name."""
        expression = CronExpression(cron)
        job = ScheduledJob(
            name=name,
            func=func,
            cron=cron,
            enabled=enabled,
            next_run=expression.next_run(self._clock()),
        )
        self._jobs[name] = job
        self._crons[name] = expression
        logger.info(f"Registered job {name} ({cron}), first run at {job.next_run}")
        return job

    def remove_job(self, name: str) -> bool:
        self._crons.pop(name, None)
        return self._jobs.pop(name, None) is not None

    def enable_job(self, name: str) -> bool:
        return self._set_enabled(name, True)

    def disable_job(self, name: str) -> bool:
        return self._set_enabled(name, False)

    def _set_enabled(self, name: str, enabled: bool) -> bool:
        job = self._jobs.get(name)
        if job is None:
            return False
        job.enabled = enabled
        return True

    def list_jobs(self) -> list[ScheduledJob]:
        return list(self._jobs.values())

    def stop(self) -> None:
        self._running = False

    async def run(self) -> None:
        """Tick every ``check_interval`` seconds until ``stop`` is called."""
        self._running = True
        logger.info(f"Scheduler running {len(self._jobs)} jobs")
        try:
            while self._running:
                await self.tick()
                await asyncio.sleep(self.check_interval)
        finally:
            self._running = False
            await self.wait_idle()
            logger.info("Scheduler stopped")

    async def tick(self) -> list[str]:
        """Start every due job in the background and return their names.

        Jobs run as tasks, so a long recomputation never holds back the next
        tick. A job whose previous run is still going is skipped for this
        slot. A job that raises is logged; it does not affect the other jobs
        or its own next run.
        """
        now = self._clock()
        started: list[str] = []
        for job in self._jobs.values():
            if not job.enabled or job.next_run is None or job.next_run > now:
                continue
            job.next_run = self._crons[job.name].next_run(now)

            running = self._tasks.get(job.name)
            if running is not None and not running.done():
                logger.warning(f"Job {job.name} still running, skipping this run")
                continue

            job.last_run = now
            self._tasks[job.name] = asyncio.create_task(self._execute(job), name=job.name)
            started.append(job.name)
        return started

    async def _execute(self, job: ScheduledJob) -> None:
        try:
            await job.func()
        except Exception as e:
            logger.error(f"Job {job.name} failed: {e!r}")
        else:
            logger.debug(f"Job {job.name} finished, next run at {job.next_run}")

    async def wait_idle(self) -> None:
        """Wait for every job started by ``tick`` to finish."""
        while self._tasks:
            tasks = list(self._tasks.values())
            self._tasks.clear()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def run_now(self, name: str) -> bool:
        """Run a job immediately, outside its schedule. False if unknown."""
        job = self._jobs.get(name)
        if job is None:
            return False
        logger.info(f"Running job {name} on demand")
        await job.func()
        job.last_run = self._clock()
        return True
