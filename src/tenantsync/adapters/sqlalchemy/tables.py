"""SQLAlchemy table metadata for the leveled key-value store."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import quote

from sqlalchemy import Column, MetaData, String, Table, Text

if TYPE_CHECKING:
    from tenantsync.domain.ports.store import SublevelPath

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "pk": "pk_%(table_name)s",
    }
)

store_entry_table = Table(
    "store_entry",
    metadata,
    Column("sublevel", String(1024), primary_key=True),
    Column("key", String(512), primary_key=True),
    Column("value", Text, nullable=False),
)


def encode_sublevel(path: SublevelPath) -> str:
    """Return the storage prefix of ``path``.

    Each segment is percent-encoded and wrapped in ``!``, so the prefix of a
    sublevel is a string prefix of exactly its descendants' prefixes and of no
    sibling's (``!tenants!!t1!`` does not prefix ``!tenants!!t10!``).
    """

    return "".join(f"!{quote(part, safe='')}!" for part in path)
