"""Layout of tenants and their device memberships in the store.

``tenants`` maps each tenant id to the tenant's JSON record, and the sublevel
``tenants/<tenant id>`` holds one ``<device id> -> true`` entry per device that
currently belongs to the tenant.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .schema import DynamicField, Encoding, Frame, Level, LeveledSchema, StaticValue

if TYPE_CHECKING:
    from tenantsync.domain.model import DeviceId, Tenant

TENANTS_SUBLEVEL = "tenants"
# level holding the device memberships; the levels above it hold the tenant record
DEVICE_LEVEL = 1

TENANT_DEVICE_SCHEMA = LeveledSchema(
    levels=(
        Level(
            name=StaticValue(TENANTS_SUBLEVEL),
            key_encoding=Encoding.UTF8,
            value_encoding=Encoding.JSON,
        ),
        Level(
            name=DynamicField("service"),
            key_encoding=Encoding.UTF8,
            value_encoding=Encoding.BOOL,
        ),
    ),
    frames=(
        Frame(level=0, key=DynamicField("tenant.id"), value=DynamicField("tenant")),
        Frame(level=DEVICE_LEVEL, key=DynamicField("device"), value=StaticValue(True)),
    ),
)


def tenant_record(tenant: Tenant) -> dict[str, Any]:
    return {"tenant": tenant.as_record(), "service": tenant.id}


def device_record(tenant: Tenant, device: DeviceId) -> dict[str, Any]:
    return {**tenant_record(tenant), "device": device}
