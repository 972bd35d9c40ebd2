"""Reconciliation schedule and timeout settings."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, optional_env_var
from .errors import ConfigurationError

DEFAULT_CRON_EXPRESSION = "*/5 * * * *"
DEFAULT_FETCH_TIMEOUT_SECONDS = 30.0
CRON_FIELD_COUNT = 5


@dataclass(frozen=True, slots=True)
class SyncConfig:
    cron_expression: str = DEFAULT_CRON_EXPRESSION
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS


def validate_cron_expression(expression: str) -> str:
    """Return the normalised expression if it has the five crontab fields."""

    fields = expression.split()
    if len(fields) != CRON_FIELD_COUNT:
        raise ConfigurationError(
            f"Cron expression must have {CRON_FIELD_COUNT} fields "
            f"(minute hour day month weekday), got {expression!r}"
        )
    return " ".join(fields)


def get_sync_config(*, cron_expression: str | None = None) -> SyncConfig:
    expression = cron_expression or optional_env_var("SYNC_CRON_EXPRESSION")
    return SyncConfig(
        cron_expression=validate_cron_expression(expression or DEFAULT_CRON_EXPRESSION),
        fetch_timeout_seconds=env_float(
            "SYNC_FETCH_TIMEOUT_SECONDS", DEFAULT_FETCH_TIMEOUT_SECONDS
        ),
    )
