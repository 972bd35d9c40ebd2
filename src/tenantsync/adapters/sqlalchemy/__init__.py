"""SQLAlchemy adapter package for tenantsync."""

from __future__ import annotations

from .store import SqlAlchemyHierarchicalStore
from .tables import encode_sublevel, metadata, store_entry_table

__all__ = [
    "SqlAlchemyHierarchicalStore",
    "encode_sublevel",
    "metadata",
    "store_entry_table",
]
