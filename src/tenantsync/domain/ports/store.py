"""Port for the leveled key-value store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

type SublevelPath = tuple[str, ...]


@runtime_checkable
class HierarchicalStore(Protocol):
    """Ordered key-value store partitioned into nested sublevels.

    A sublevel is addressed by the path of names from the root. Entries and child
    sublevels live in separate namespaces, so ``("tenants",)`` may hold a key
    ``"t1"`` while ``("tenants", "t1")`` is a sublevel of its own. Keys and values
    are already encoded strings; encoding is the persister's concern.

    Every method raises ``StoreError`` when the underlying engine fails.
    """

    async def init(self) -> None: ...

    async def put(self, path: SublevelPath, key: str, value: str) -> None: ...

    async def get(self, path: SublevelPath, key: str) -> str | None: ...

    async def delete(self, path: SublevelPath, key: str) -> None: ...

    async def items(self, path: SublevelPath) -> Mapping[str, str]:
        """Return the entries directly inside ``path``, ordered by key."""
        ...

    async def clear(self, path: SublevelPath) -> None:
        """Remove every entry in ``path`` and all of its descendants."""
        ...

    async def close(self) -> None: ...


__all__ = ["HierarchicalStore", "SublevelPath"]
