"""Ports for reading the authoritative registries."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from tenantsync.domain.model import DeviceId, Tenant


@runtime_checkable
class TenantSource(Protocol):
    """Yields the current tenant set; raises ``SourceUnavailable`` on failure."""

    async def load_tenants(self) -> Sequence[Tenant]: ...


@runtime_checkable
class DeviceSource(Protocol):
    """Yields the device ids of one tenant; raises ``SourceUnavailable`` on failure."""

    async def get_devices(self, tenant: Tenant) -> Sequence[DeviceId]: ...


__all__ = ["DeviceSource", "TenantSource"]
