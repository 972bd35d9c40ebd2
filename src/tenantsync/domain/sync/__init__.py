"""Reconciliation engine and its scheduler."""

from __future__ import annotations

from .engine import SyncEngine
from .scheduler import DEFAULT_JOB_ID, CronScheduler

__all__ = ["DEFAULT_JOB_ID", "CronScheduler", "SyncEngine"]
