"""Pydantic models describing the registry payloads."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _require_text(value: object) -> object:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        return value.strip()
    return value


class RegistryBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TenantPayload(BaseModel):
    # tenant metadata is opaque and persisted as-is
    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)

    _normalize_id = field_validator("id", mode="before")(_require_text)


class TenantsResponse(RegistryBaseModel):
    tenants: list[TenantPayload]


class DevicePayload(RegistryBaseModel):
    id: str = Field(min_length=1)

    _normalize_id = field_validator("id", mode="before")(_require_text)


class Paging(RegistryBaseModel):
    next: int | None = None


class DevicesResponse(RegistryBaseModel):
    devices: list[DevicePayload]
    paging: Paging = Field(default_factory=Paging)
