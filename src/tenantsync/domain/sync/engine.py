"""Periodic reconciliation of the local store with the tenant and device registries."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from tenantsync.config.sync import DEFAULT_CRON_EXPRESSION, DEFAULT_FETCH_TIMEOUT_SECONDS
from tenantsync.domain.errors import SchedulerInitError, SourceUnavailable
from tenantsync.domain.model import PassResult
from tenantsync.domain.persister import (
    DEVICE_LEVEL,
    TENANT_DEVICE_SCHEMA,
    InputPersister,
    Operation,
    device_record,
    tenant_record,
)
from tenantsync.domain.ports.hooks import NoopPassHooks

if TYPE_CHECKING:
    from collections.abc import Awaitable, Sequence

    from tenantsync.domain.model import Tenant
    from tenantsync.domain.persister import LeveledSchema
    from tenantsync.domain.ports import DeviceSource, HierarchicalStore, PassHooks, TenantSource
    from tenantsync.domain.sync.scheduler import CronScheduler


class SyncEngine:
    """Keeps the store's tenant/device layout equal to what the registries report.

    Each pass fetches the tenant set, then for every tenant fetches its devices,
    clears the tenant's device sublevel and writes the devices back. A tenant
    whose devices cannot be fetched keeps its previous entries; a failure while
    fetching tenants leaves every sublevel untouched.
    """

    def __init__(
        self,
        *,
        store: HierarchicalStore,
        tenant_source: TenantSource,
        device_source: DeviceSource,
        scheduler: CronScheduler | None = None,
        schema: LeveledSchema = TENANT_DEVICE_SCHEMA,
        cron_expression: str = DEFAULT_CRON_EXPRESSION,
        fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        hooks: PassHooks | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.tenant_source = tenant_source
        self.device_source = device_source
        self.scheduler = scheduler
        self.persister = InputPersister(store, schema)
        self.cron_expression = cron_expression
        self.fetch_timeout_seconds = fetch_timeout_seconds
        self.hooks: PassHooks = hooks or NoopPassHooks()
        self.log = logger or logging.getLogger(__name__)
        self._initialised = False
        self._pass_lock = asyncio.Lock()

    async def init(self) -> None:
        """Open the store, run the first pass now, then schedule the recurring one."""

        if self._initialised:
            return
        self._initialised = True

        try:
            await self.store.init()
        except Exception:
            self.log.exception("Could not initialise the local store; synchronization disabled")
            return

        self.log.debug("First synchronization")
        try:
            await self.load()
        except Exception:
            self.log.exception("First synchronization failed")

        if self.scheduler is None:
            self.log.info("No scheduler configured; running as a one-shot sync")
            return
        try:
            self.scheduler.register(self._scheduled_load, self.cron_expression)
        except SchedulerInitError:
            self.log.exception("Could not schedule synchronization; running as a one-shot sync")
            return
        self.log.info("Data sync scheduled with %r", self.cron_expression)

    async def load(self) -> PassResult:
        """Run one reconciliation pass unless another one is still in progress."""

        if self._pass_lock.locked():
            self.log.warning("Skipping synchronization: previous pass still running")
            return PassResult(skipped=True)

        async with self._pass_lock:
            await self._call_hook(self.hooks.pause(), "pause")
            try:
                return await self._run_pass()
            finally:
                await self._call_hook(self.hooks.resume(), "resume")

    async def load_devices(self, tenant: Tenant) -> int:
        """Replace the stored device set of ``tenant`` with the registry's current one."""

        self.log.debug("Syncing devices of tenant %s", tenant.id)
        devices = await self._fetch(
            self.device_source.get_devices(tenant), f"devices of tenant {tenant.id}"
        )

        record = tenant_record(tenant)
        sublevel = self.persister.resolve_path(record)
        try:
            self.log.debug("Clean up %s sublevel", "/".join(sublevel))
            await self.store.clear(sublevel)
        except Exception:
            self.log.exception("Could not clear sublevel of tenant %s; writing anyway", tenant.id)

        await self.persister.dispatch(record, Operation.INSERT, depth=DEVICE_LEVEL)

        written = 0
        for device in devices:
            await self.persister.dispatch(
                device_record(tenant, device), Operation.INSERT, start=DEVICE_LEVEL
            )
            written += 1
        return written

    async def close(self) -> None:
        if self.scheduler is not None:
            self.scheduler.shutdown()
        await self.store.close()

    async def _run_pass(self) -> PassResult:
        result = PassResult()
        self.log.info("Synchronizing tenant and device data with the registries")
        try:
            tenants: Sequence[Tenant] = await self._fetch(
                self.tenant_source.load_tenants(), "tenants"
            )
        except SourceUnavailable as exc:
            self.log.error("Aborting synchronization: %s", exc)
            result.error = str(exc)
            return result

        for tenant in tenants:
            result.tenants.append(tenant.id)
            try:
                result.devices_written += await self.load_devices(tenant)
            except Exception as exc:  # noqa: BLE001
                self.log.error(
                    "Could not synchronize devices of tenant %s: %s",
                    tenant.id,
                    exc,
                    exc_info=not isinstance(exc, SourceUnavailable),
                )
                result.failed[tenant.id] = str(exc)
            else:
                result.synced.append(tenant.id)

        self.log.info(
            "Synchronization finished: tenants=%d, synced=%d, failed=%d, devices=%d",
            len(result.tenants),
            len(result.synced),
            len(result.failed),
            result.devices_written,
        )
        return result

    async def _scheduled_load(self) -> None:
        self.log.debug("Start data synchronization with the registries")
        try:
            await self.load()
        except Exception:
            self.log.exception("Scheduled synchronization failed")

    async def _fetch[T](self, call: Awaitable[T], what: str) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.fetch_timeout_seconds)
        except TimeoutError as exc:
            raise SourceUnavailable(
                f"Timed out after {self.fetch_timeout_seconds}s fetching {what}"
            ) from exc
        except SourceUnavailable:
            raise
        except Exception as exc:
            raise SourceUnavailable(f"Could not fetch {what}: {exc}") from exc

    async def _call_hook(self, call: Awaitable[None], name: str) -> None:
        try:
            await call
        except Exception:
            self.log.exception("Pass hook %s failed", name)


__all__ = ["SyncEngine"]
