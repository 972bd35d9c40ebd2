"""Entities fetched from the registries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping

type DeviceId = str


@dataclass(frozen=True, slots=True)
class Tenant:
    """A tenant known to the tenant registry.

    ``payload`` carries whatever else the registry reports about the tenant; it is
    persisted verbatim next to the tenant id and never interpreted.
    """

    id: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    def as_record(self) -> dict[str, Any]:
        return {**self.payload, "id": self.id}

    def __str__(self) -> str:
        return self.id


@dataclass(slots=True)
class PassResult:
    """Outcome of one reconciliation pass."""

    tenants: list[str] = field(default_factory=list)
    synced: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    devices_written: int = 0
    skipped: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return not self.skipped and self.error is None and not self.failed
