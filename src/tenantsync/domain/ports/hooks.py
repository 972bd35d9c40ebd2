"""Seam for collaborators that must be quiesced while a pass runs."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PassHooks(Protocol):
    async def pause(self) -> None: ...

    async def resume(self) -> None: ...


class NoopPassHooks:
    async def pause(self) -> None:
        return None

    async def resume(self) -> None:
        return None


__all__ = ["NoopPassHooks", "PassHooks"]
