from __future__ import annotations

import asyncio
from datetime import UTC, datetime

import pytest

from tenantsync.domain.errors import SchedulerInitError
from tenantsync.domain.sync import DEFAULT_JOB_ID, CronScheduler
from tenantsync.domain.sync.scheduler import crontab_trigger, translate_day_of_week

SATURDAY_MORNING = datetime(2026, 10, 17, 10, 0, tzinfo=UTC)


async def _noop() -> None:
    return None


def test_register_starts_scheduler_with_single_job() -> None:
    async def scenario() -> tuple[bool, object, object]:
        scheduler = CronScheduler(timezone="UTC")
        scheduler.register(_noop, "*/5 * * * *")
        scheduler.register(_noop, "0 * * * *")
        try:
            jobs = scheduler._scheduler.get_jobs()
            return scheduler.running, scheduler.next_run_time(), [job.id for job in jobs]
        finally:
            scheduler.shutdown()

    running, next_run, job_ids = asyncio.run(scenario())

    assert running is True
    assert next_run is not None
    assert job_ids == [DEFAULT_JOB_ID]


@pytest.mark.parametrize("expression", ["not a cron", "61 * * * *", "* * * *"])
def test_register_rejects_invalid_expressions(expression: str) -> None:
    scheduler = CronScheduler(timezone="UTC")

    with pytest.raises(SchedulerInitError, match="Invalid cron expression"):
        scheduler.register(_noop, expression)

    assert scheduler.running is False


def test_shutdown_without_start_is_harmless() -> None:
    scheduler = CronScheduler()

    scheduler.shutdown()

    assert scheduler.running is False
    assert scheduler.next_run_time() is None


@pytest.mark.parametrize(
    ("field", "expected"),
    [
        ("*", "*"),
        ("0", "sun"),
        ("7", "sun"),
        ("1-5", "mon,tue,wed,thu,fri"),
        ("5-7", "sun,fri,sat"),
        ("0,6", "sun,sat"),
        ("*/2", "sun,tue,thu,sat"),
        ("MON-wed", "mon,tue,wed"),
    ],
)
def test_translate_day_of_week_uses_crontab_numbering(field: str, expected: str) -> None:
    assert translate_day_of_week(field) == expected


@pytest.mark.parametrize("field", ["8", "5-1", "*/0", "funday"])
def test_translate_day_of_week_rejects_invalid_fields(field: str) -> None:
    with pytest.raises(ValueError):
        translate_day_of_week(field)


@pytest.mark.parametrize("expression", ["0 9 * * 0", "0 9 * * 7", "0 9 * * sun"])
def test_sunday_expressions_fire_on_sunday(expression: str) -> None:
    trigger = crontab_trigger(expression, timezone="UTC")

    next_fire = trigger.get_next_fire_time(None, SATURDAY_MORNING)

    assert next_fire == datetime(2026, 10, 18, 9, 0, tzinfo=UTC)
    assert next_fire.weekday() == 6


def test_weekday_range_skips_the_weekend() -> None:
    trigger = crontab_trigger("0 9 * * 1-5", timezone="UTC")

    next_fire = trigger.get_next_fire_time(None, SATURDAY_MORNING)

    assert next_fire == datetime(2026, 10, 19, 9, 0, tzinfo=UTC)


def test_register_accepts_seven_as_sunday() -> None:
    async def scenario() -> object:
        scheduler = CronScheduler(timezone="UTC")
        scheduler.register(_noop, "0 9 * * 7")
        try:
            return scheduler.next_run_time()
        finally:
            scheduler.shutdown()

    next_run = asyncio.run(scenario())

    assert isinstance(next_run, datetime)
    assert next_run.weekday() == 6
