"""Hierarchical store backed by a single SQLAlchemy table."""

from __future__ import annotations

import asyncio
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from functools import partial
from logging import getLogger
from typing import TYPE_CHECKING

from sqlalchemy import create_engine, delete, func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError

from tenantsync.config.storage import get_database_config
from tenantsync.domain.errors import StoreError

from .tables import encode_sublevel, metadata, store_entry_table

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from sqlalchemy.engine import Connection, Engine

    from tenantsync.domain.ports.store import HierarchicalStore, SublevelPath

log = getLogger(__name__)


class SqlAlchemyHierarchicalStore:
    """Stores every sublevel in one table keyed by ``(sublevel prefix, key)``.

    Clearing a sublevel deletes all rows whose prefix starts with the sublevel's
    prefix, which covers its descendants and nothing else.

    Statements run on one worker thread owned by the store, so the event loop
    keeps serving timers and sockets while the database works and SQLite
    connections never change threads.
    """

    def __init__(self, *, engine: Engine | None = None, database_uri: str | None = None) -> None:
        self._engine = engine
        self._database_uri = database_uri
        self._owns_engine = engine is None
        self._executor: ThreadPoolExecutor | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StoreError("Store not initialised. Call init() before using it.")
        return self._engine

    async def init(self) -> None:
        await self._run(self._init_sync)
        log.debug("Store ready at %s", self.engine.url)

    async def put(self, path: SublevelPath, key: str, value: str) -> None:
        await self._run(partial(self._put_sync, encode_sublevel(path), key, value))

    async def get(self, path: SublevelPath, key: str) -> str | None:
        return await self._run(partial(self._get_sync, encode_sublevel(path), key))

    async def delete(self, path: SublevelPath, key: str) -> None:
        await self._run(partial(self._delete_sync, encode_sublevel(path), key))

    async def items(self, path: SublevelPath) -> dict[str, str]:
        return await self._run(partial(self._items_sync, encode_sublevel(path)))

    async def clear(self, path: SublevelPath) -> None:
        removed = await self._run(partial(self._clear_sync, encode_sublevel(path)))
        log.debug("Cleared %s (%s entries)", "/".join(path) or "<root>", removed)

    async def close(self) -> None:
        if self._engine is not None and self._owns_engine:
            await self._run(self._engine.dispose)
            self._engine = None
        if self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None

    async def _run[T](self, func: Callable[[], T]) -> T:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="tenantsync-store"
            )
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, func)

    def _init_sync(self) -> None:
        try:
            if self._engine is None:
                uri = self._database_uri or get_database_config().uri
                self._engine = create_engine(uri, future=True)
            metadata.create_all(self._engine, checkfirst=True)
        except SQLAlchemyError as exc:
            raise StoreError(f"Could not open store: {exc}") from exc

    def _put_sync(self, sublevel: str, key: str, value: str) -> None:
        with self._transaction("put") as conn:
            updated = conn.execute(
                update(store_entry_table)
                .where(store_entry_table.c.sublevel == sublevel)
                .where(store_entry_table.c.key == key)
                .values(value=value)
            )
            if updated.rowcount == 0:
                conn.execute(
                    insert(store_entry_table).values(sublevel=sublevel, key=key, value=value)
                )

    def _get_sync(self, sublevel: str, key: str) -> str | None:
        stmt = (
            select(store_entry_table.c.value)
            .where(store_entry_table.c.sublevel == sublevel)
            .where(store_entry_table.c.key == key)
        )
        with self._transaction("get") as conn:
            return conn.execute(stmt).scalar_one_or_none()

    def _delete_sync(self, sublevel: str, key: str) -> None:
        with self._transaction("delete") as conn:
            conn.execute(
                delete(store_entry_table)
                .where(store_entry_table.c.sublevel == sublevel)
                .where(store_entry_table.c.key == key)
            )

    def _items_sync(self, sublevel: str) -> dict[str, str]:
        stmt = (
            select(store_entry_table.c.key, store_entry_table.c.value)
            .where(store_entry_table.c.sublevel == sublevel)
            .order_by(store_entry_table.c.key)
        )
        with self._transaction("items") as conn:
            return {row.key: row.value for row in conn.execute(stmt)}

    def _clear_sync(self, prefix: str) -> int:
        stmt = delete(store_entry_table)
        if prefix:
            column = store_entry_table.c.sublevel
            stmt = stmt.where(func.substr(column, 1, len(prefix)) == prefix)
        with self._transaction("clear") as conn:
            return conn.execute(stmt).rowcount

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[Connection]:
        try:
            with self.engine.begin() as conn:
                yield conn
        except SQLAlchemyError as exc:
            raise StoreError(f"Store {operation} failed: {exc}") from exc


if TYPE_CHECKING:
    _store_check: HierarchicalStore = SqlAlchemyHierarchicalStore()
