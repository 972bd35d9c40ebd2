"""Recurring trigger for reconciliation passes."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from tenantsync.domain.errors import SchedulerInitError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable
    from datetime import datetime, tzinfo

log = getLogger(__name__)

DEFAULT_JOB_ID = "reconciliation-pass"

# crontab numbering: 0 and 7 are Sunday; APScheduler numbers days from Monday
_CRON_WEEKDAYS = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


def _weekday_number(token: str) -> int:
    name = token.lower()
    if name in _CRON_WEEKDAYS:
        return _CRON_WEEKDAYS.index(name)
    if name.isdigit() and 0 <= int(name) <= 7:
        return int(name)
    raise ValueError(f"Invalid day of week {token!r}")


def translate_day_of_week(field: str) -> str:
    """Rewrite a crontab day-of-week field as APScheduler day names.

    ``"1-5"`` becomes ``"mon,tue,wed,thu,fri"`` and ``"7"`` becomes ``"sun"``.
    Steps and ranges are expanded, so the result is a plain list of names.
    """

    if field in {"*", "?"}:
        return "*"
    days: set[int] = set()
    for item in field.split(","):
        base, _, step_text = item.partition("/")
        step = int(step_text) if step_text else 1
        if step < 1:
            raise ValueError(f"Invalid step in day of week {item!r}")
        if base == "*":
            first, last = 0, 6
        elif "-" in base:
            low, high = base.split("-", 1)
            first, last = _weekday_number(low), _weekday_number(high)
        else:
            first = _weekday_number(base)
            last = 6 if step_text else first
        if first > last:
            raise ValueError(f"Invalid day of week range {item!r}")
        days.update(day % 7 for day in range(first, last + 1, step))
    return ",".join(_CRON_WEEKDAYS[day] for day in sorted(days))


def crontab_trigger(expression: str, *, timezone: tzinfo | str | None = None) -> CronTrigger:
    """Build a trigger from a five-field crontab expression."""

    fields = expression.split()
    if len(fields) != 5:
        raise ValueError(f"Wrong number of fields; got {len(fields)}, expected 5")
    minute, hour, day, month, day_of_week = fields
    return CronTrigger(
        minute=minute,
        hour=hour,
        day=day,
        month=month,
        day_of_week=translate_day_of_week(day_of_week),
        timezone=timezone,
    )


class CronScheduler:
    """Runs one coroutine job on a crontab schedule inside the running event loop.

    Overlapping runs are allowed here: a pass that outlives its interval is
    followed by the next one, and the job itself decides whether to skip.
    """

    def __init__(self, *, timezone: tzinfo | str | None = None, max_overlap: int = 2) -> None:
        options: dict[str, Any] = {}
        if timezone is not None:
            options["timezone"] = timezone
        self._scheduler = AsyncIOScheduler(**options)
        self._timezone = timezone
        self._max_overlap = max_overlap

    @property
    def running(self) -> bool:
        return bool(self._scheduler.running)

    def register(
        self,
        job: Callable[[], Awaitable[object]],
        expression: str,
        *,
        job_id: str = DEFAULT_JOB_ID,
    ) -> None:
        try:
            trigger = crontab_trigger(expression, timezone=self._timezone)
        except ValueError as exc:
            raise SchedulerInitError(f"Invalid cron expression {expression!r}: {exc}") from exc

        try:
            self._scheduler.add_job(
                job,
                trigger=trigger,
                id=job_id,
                replace_existing=True,
                coalesce=True,
                max_instances=self._max_overlap,
            )
            if not self._scheduler.running:
                self._scheduler.start()
        except Exception as exc:
            raise SchedulerInitError(f"Could not schedule {job_id}: {exc}") from exc
        log.info("Scheduled %s with %r", job_id, expression)

    def next_run_time(self, job_id: str = DEFAULT_JOB_ID) -> datetime | None:
        job = self._scheduler.get_job(job_id)
        return None if job is None else job.next_run_time

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
