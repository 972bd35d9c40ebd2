"""HTTP clients for the tenant and device registries."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from tenantsync.adapters.http_resilience import ResilienceConfig, ResilientClient
from tenantsync.config.registry import DEFAULT_DEVICE_PAGE_SIZE
from tenantsync.domain.errors import SourceUnavailable
from tenantsync.domain.model import Tenant
from tenantsync.domain.ports.fetching import DeviceSource, TenantSource

from .schema import DevicesResponse, TenantsResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from tenantsync.domain.model import DeviceId

log = getLogger(__name__)

TENANTS_PATH = "/tenants"
DEVICES_PATH = "/devices"
TENANT_HEADER = "X-Tenant-Id"


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


async def _get_json(
    client: ResilientClient,
    path: str,
    *,
    what: str,
    params: dict[str, str | int] | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    try:
        response = await client.get(path, params=params, headers=headers)
        response.raise_for_status()
        return response.json()
    except httpx.HTTPStatusError as exc:
        raise SourceUnavailable(
            f"{client.config.name} answered {exc.response.status_code} for {what}"
        ) from exc
    except httpx.HTTPError as exc:
        raise SourceUnavailable(f"{client.config.name} unreachable for {what}: {exc}") from exc
    except ValueError as exc:
        raise SourceUnavailable(f"{client.config.name} sent invalid JSON for {what}") from exc


@dataclass(slots=True)
class HttpTenantSource:
    resilience: ResilienceConfig
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    tenants: list[Tenant] = field(default_factory=list)

    async def load_tenants(self) -> list[Tenant]:
        """Refresh ``tenants`` from the registry and return it."""

        async with self.client_factory(self.resilience) as client:
            payload = await _get_json(client, TENANTS_PATH, what="tenants")
        try:
            response = TenantsResponse.model_validate(payload)
        except ValidationError as exc:
            raise SourceUnavailable(f"Unexpected tenant registry payload: {exc}") from exc

        self.tenants = [
            Tenant(id=item.id, payload=item.model_dump(exclude={"id"}))
            for item in response.tenants
        ]
        log.debug("Loaded %d tenants", len(self.tenants))
        return self.tenants


@dataclass(slots=True)
class HttpDeviceSource:
    resilience: ResilienceConfig
    page_size: int = DEFAULT_DEVICE_PAGE_SIZE
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def get_devices(self, tenant: Tenant) -> list[DeviceId]:
        devices: list[DeviceId] = []
        seen: set[DeviceId] = set()
        page: int | None = 1
        headers = {TENANT_HEADER: tenant.id}

        async with self.client_factory(self.resilience) as client:
            while page is not None:
                payload = await _get_json(
                    client,
                    DEVICES_PATH,
                    what=f"devices of tenant {tenant.id}",
                    params={"page": page, "page_size": self.page_size},
                    headers=headers,
                )
                try:
                    response = DevicesResponse.model_validate(payload)
                except ValidationError as exc:
                    raise SourceUnavailable(
                        f"Unexpected device registry payload for tenant {tenant.id}: {exc}"
                    ) from exc

                for device in response.devices:
                    if device.id in seen:
                        continue
                    seen.add(device.id)
                    devices.append(device.id)

                next_page = response.paging.next
                if next_page is not None and next_page <= page:
                    raise SourceUnavailable(
                        f"Device registry paging went backwards for tenant {tenant.id}"
                    )
                page = next_page

        log.debug("Loaded %d devices for tenant %s", len(devices), tenant.id)
        return devices


if TYPE_CHECKING:
    _tenant_source_check: TenantSource = HttpTenantSource(ResilienceConfig(name="check"))
    _device_source_check: DeviceSource = HttpDeviceSource(ResilienceConfig(name="check"))
