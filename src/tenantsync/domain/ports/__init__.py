"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import DeviceSource, TenantSource
from .hooks import NoopPassHooks, PassHooks
from .store import HierarchicalStore, SublevelPath

__all__ = [
    "DeviceSource",
    "HierarchicalStore",
    "NoopPassHooks",
    "PassHooks",
    "SublevelPath",
    "TenantSource",
]
