"""Failure taxonomy of the reconciliation engine."""

from __future__ import annotations

from tenantsync.config.errors import ConfigurationError


class SyncError(RuntimeError):
    """Base class for reconciliation failures."""


class SourceUnavailable(SyncError):  # noqa: N818
    """Raised when the tenant or device registry cannot be read."""


class StoreError(SyncError):
    """Raised when the local store cannot be opened, written or cleared."""


class SchedulerInitError(SyncError):
    """Raised when the recurring pass cannot be registered."""


class SchemaFieldError(ConfigurationError):
    """Raised when a record lacks a field referenced by the leveled schema."""

    def __init__(self, field_path: str) -> None:
        super().__init__(f"Record has no field {field_path!r}")
        self.field_path = field_path


__all__ = [
    "SchedulerInitError",
    "SchemaFieldError",
    "SourceUnavailable",
    "StoreError",
    "SyncError",
]
