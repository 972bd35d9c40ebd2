"""Declarative persistence of records into leveled sublevels."""

from __future__ import annotations

from .persister import InputPersister, Operation, Write
from .schema import (
    DynamicField,
    Encoding,
    Frame,
    Level,
    LeveledSchema,
    StaticValue,
    ValueRule,
    lookup_field,
    resolve_rule,
)
from .tenant_devices import (
    DEVICE_LEVEL,
    TENANT_DEVICE_SCHEMA,
    TENANTS_SUBLEVEL,
    device_record,
    tenant_record,
)

__all__ = [
    "DEVICE_LEVEL",
    "TENANTS_SUBLEVEL",
    "TENANT_DEVICE_SCHEMA",
    "DynamicField",
    "Encoding",
    "Frame",
    "InputPersister",
    "Level",
    "LeveledSchema",
    "Operation",
    "StaticValue",
    "ValueRule",
    "Write",
    "device_record",
    "lookup_field",
    "resolve_rule",
    "tenant_record",
]
