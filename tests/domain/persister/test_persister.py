from __future__ import annotations

import asyncio
import json

import pytest

from tenantsync.domain.errors import SchemaFieldError
from tenantsync.domain.model import Tenant
from tenantsync.domain.persister import (
    DEVICE_LEVEL,
    TENANT_DEVICE_SCHEMA,
    DynamicField,
    Encoding,
    Frame,
    InputPersister,
    Level,
    LeveledSchema,
    Operation,
    StaticValue,
    Write,
    device_record,
    tenant_record,
)
from tests.helpers.sync_fakes import InMemoryStore

TENANT = Tenant(id="t1", payload={"name": "Acme"})


def test_plan_for_tenant_device_record() -> None:
    persister = InputPersister(InMemoryStore(), TENANT_DEVICE_SCHEMA)

    writes = persister.plan(device_record(TENANT, "devA"), Operation.INSERT)

    assert writes == [
        Write(path=("tenants",), key="t1", value='{"id":"t1","name":"Acme"}'),
        Write(path=("tenants", "t1"), key="devA", value="true"),
    ]


def test_plan_limits_frames_to_level_range() -> None:
    persister = InputPersister(InMemoryStore(), TENANT_DEVICE_SCHEMA)

    tenant_only = persister.plan(tenant_record(TENANT), Operation.INSERT, depth=DEVICE_LEVEL)
    device_only = persister.plan(
        {"service": "t1", "device": "devA"}, Operation.INSERT, start=DEVICE_LEVEL
    )

    assert tenant_only == [
        Write(path=("tenants",), key="t1", value='{"id":"t1","name":"Acme"}'),
    ]
    assert device_only == [Write(path=("tenants", "t1"), key="devA", value="true")]


def test_plan_is_deterministic() -> None:
    persister = InputPersister(InMemoryStore(), TENANT_DEVICE_SCHEMA)
    record = device_record(TENANT, "devA")

    assert persister.plan(record, Operation.INSERT) == persister.plan(
        dict(record), Operation.INSERT
    )
    assert persister.resolve_path(record) == persister.resolve_path(record) == ("tenants", "t1")


def test_resolve_path_needs_only_level_fields() -> None:
    persister = InputPersister(InMemoryStore(), TENANT_DEVICE_SCHEMA)

    assert persister.resolve_path(tenant_record(TENANT)) == ("tenants", "t1")
    assert persister.resolve_path({}, depth=1) == ("tenants",)


def test_dispatch_insert_writes_every_framed_level(memory_store: InMemoryStore) -> None:
    persister = InputPersister(memory_store, TENANT_DEVICE_SCHEMA)

    asyncio.run(persister.dispatch(device_record(TENANT, "devA")))

    assert json.loads(memory_store.sublevels[("tenants",)]["t1"]) == {"id": "t1", "name": "Acme"}
    assert memory_store.sublevels[("tenants", "t1")] == {"devA": "true"}


def test_dispatch_delete_removes_only_deepest_entry(memory_store: InMemoryStore) -> None:
    persister = InputPersister(memory_store, TENANT_DEVICE_SCHEMA)

    async def insert_then_delete() -> None:
        await persister.dispatch(device_record(TENANT, "devA"))
        await persister.dispatch(device_record(TENANT, "devB"))
        await persister.dispatch(device_record(TENANT, "devA"), Operation.DELETE)

    asyncio.run(insert_then_delete())

    assert memory_store.sublevels[("tenants", "t1")] == {"devB": "true"}
    assert "t1" in memory_store.sublevels[("tenants",)]


def test_dispatch_with_missing_field_writes_nothing(memory_store: InMemoryStore) -> None:
    persister = InputPersister(memory_store, TENANT_DEVICE_SCHEMA)
    record = tenant_record(TENANT)  # no "device"

    with pytest.raises(SchemaFieldError, match="device"):
        asyncio.run(persister.dispatch(record))

    assert memory_store.operations == []


def test_static_levels_and_values_in_custom_schema(memory_store: InMemoryStore) -> None:
    schema = LeveledSchema(
        levels=(
            Level(name=StaticValue("sites")),
            Level(name=DynamicField("site.code")),
            Level(name=StaticValue("sensors"), value_encoding=Encoding.UTF8),
        ),
        frames=(Frame(level=2, key=DynamicField("sensor"), value=StaticValue("active")),),
    )
    persister = InputPersister(memory_store, schema)

    asyncio.run(persister.dispatch({"site": {"code": "lis"}, "sensor": "s-1"}))

    assert memory_store.sublevels == {("sites", "lis", "sensors"): {"s-1": "active"}}
