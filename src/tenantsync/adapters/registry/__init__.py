"""Public interface for the registry adapters."""

from __future__ import annotations

from .client import TENANT_HEADER, HttpDeviceSource, HttpTenantSource
from .schema import DevicePayload, DevicesResponse, TenantPayload, TenantsResponse

__all__ = [
    "TENANT_HEADER",
    "DevicePayload",
    "DevicesResponse",
    "HttpDeviceSource",
    "HttpTenantSource",
    "TenantPayload",
    "TenantsResponse",
]
