"""Schema-driven writes into the hierarchical store."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Any

from .schema import Encoding, LeveledSchema, resolve_rule

if TYPE_CHECKING:
    from collections.abc import Mapping

    from tenantsync.domain.ports.store import HierarchicalStore, SublevelPath

log = getLogger(__name__)


class Operation(StrEnum):
    INSERT = "insert"
    DELETE = "delete"


@dataclass(frozen=True, slots=True)
class Write:
    """A single store mutation derived from a record."""

    path: SublevelPath
    key: str
    value: str | None


class InputPersister:
    """Derives sublevel paths and entries from records and applies them.

    The derivation is a fold over the schema levels: each level appends one name
    to the path, and a level that carries a frame contributes one entry at that
    path. Every write of a record is derived before any is applied, so a record
    with a missing field leaves the store untouched.
    """

    def __init__(self, store: HierarchicalStore, schema: LeveledSchema) -> None:
        self.store = store
        self.schema = schema

    def resolve_path(self, record: Mapping[str, Any], depth: int | None = None) -> SublevelPath:
        levels = self.schema.levels if depth is None else self.schema.levels[:depth]
        return tuple(Encoding.UTF8.encode(resolve_rule(level.name, record)) for level in levels)

    def plan(
        self,
        record: Mapping[str, Any],
        operation: Operation,
        *,
        depth: int | None = None,
        start: int = 0,
    ) -> list[Write]:
        """Derive the writes of ``record`` for the framed levels in ``[start, depth)``.

        Levels before ``start`` still contribute their names to the path.
        ``DELETE`` targets the deepest framed level of that range only.
        """

        levels = self.schema.levels if depth is None else self.schema.levels[:depth]
        framed = [
            index for index in range(start, len(levels)) if self.schema.frame_for(index) is not None
        ]
        writes: list[Write] = []
        path: SublevelPath = ()
        for index, level in enumerate(levels):
            path = (*path, Encoding.UTF8.encode(resolve_rule(level.name, record)))
            frame = self.schema.frame_for(index)
            if frame is None or index not in framed:
                continue
            if operation is Operation.DELETE and index != framed[-1]:
                continue
            key = level.key_encoding.encode(resolve_rule(frame.key, record))
            value = (
                level.value_encoding.encode(resolve_rule(frame.value, record))
                if operation is Operation.INSERT
                else None
            )
            writes.append(Write(path=path, key=key, value=value))
        return writes

    async def dispatch(
        self,
        record: Mapping[str, Any],
        operation: Operation = Operation.INSERT,
        *,
        depth: int | None = None,
        start: int = 0,
    ) -> None:
        for write in self.plan(record, operation, depth=depth, start=start):
            if write.value is None:
                await self.store.delete(write.path, write.key)
            else:
                await self.store.put(write.path, write.key, write.value)
        log.debug("Dispatched %s for %s", operation, record.get("device", record))
