"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from tenantsync.adapters.registry import HttpDeviceSource, HttpTenantSource
from tenantsync.adapters.sqlalchemy import SqlAlchemyHierarchicalStore
from tenantsync.config import get_registry_config, get_sync_config
from tenantsync.domain.sync import CronScheduler, SyncEngine

if TYPE_CHECKING:
    from tenantsync.config import RegistryConfig, SyncConfig
    from tenantsync.domain.model import PassResult
    from tenantsync.domain.ports import DeviceSource, HierarchicalStore, PassHooks, TenantSource


log = getLogger(__name__)


def build_sync_engine(
    *,
    registry: RegistryConfig | None = None,
    sync: SyncConfig | None = None,
    store: HierarchicalStore | None = None,
    tenant_source: TenantSource | None = None,
    device_source: DeviceSource | None = None,
    scheduler: CronScheduler | None = None,
    hooks: PassHooks | None = None,
) -> SyncEngine:
    """Wire the engine to the configured registries and the SQLAlchemy store."""

    sync_config = sync or get_sync_config()
    if tenant_source is None or device_source is None:
        registry_config = registry or get_registry_config()
        tenant_source = tenant_source or HttpTenantSource(registry_config.tenant_resilience)
        device_source = device_source or HttpDeviceSource(
            registry_config.device_resilience,
            page_size=registry_config.device_page_size,
        )
    return SyncEngine(
        store=store or SqlAlchemyHierarchicalStore(),
        tenant_source=tenant_source,
        device_source=device_source,
        scheduler=scheduler or CronScheduler(),
        cron_expression=sync_config.cron_expression,
        fetch_timeout_seconds=sync_config.fetch_timeout_seconds,
        hooks=hooks,
    )


async def run_once(engine: SyncEngine) -> PassResult:
    """Run a single pass without scheduling, then release the store."""

    await engine.store.init()
    try:
        return await engine.load()
    finally:
        await engine.close()


async def serve(engine: SyncEngine, *, stop: asyncio.Event | None = None) -> None:
    """Start the engine and keep the event loop alive until ``stop`` is set."""

    stop_event = stop or asyncio.Event()
    await engine.init()
    log.info("tenantsync running; next pass per %r", engine.cron_expression)
    try:
        await stop_event.wait()
    finally:
        await engine.close()
        log.info("tenantsync stopped")
