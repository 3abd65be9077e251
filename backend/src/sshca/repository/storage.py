"""Key/value storage backends for CA key material.

Backends guarantee atomicity per key only. There is no multi-key
transaction, so callers that write several keys must compensate themselves.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sshca.domain.models import StorageEntryRecord, utc_now

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the storage backend fails a read, write or delete."""

    pass


@dataclass(frozen=True)
class StorageEntry:
    """A single stored value addressed by a hierarchical path."""

    key: str
    value: bytes


class Storage(Protocol):
    """Minimal storage contract used by the key store."""

    async def get(self, key: str) -> StorageEntry | None: ...

    async def put(self, entry: StorageEntry) -> None: ...

    async def delete(self, key: str) -> None: ...


class DatabaseStorage:
    """Storage backed by the ``storage_entries`` table, partitioned by scope.

    Every put and delete commits on its own.
    """

    def __init__(self, db: AsyncSession, scope: str):
        self.db = db
        self.scope = scope

    async def get(self, key: str) -> StorageEntry | None:
        """Get the entry at key, or None if absent."""
        try:
            result = await self.db.execute(
                select(StorageEntryRecord)
                .where(StorageEntryRecord.scope == self.scope)
                .where(StorageEntryRecord.key == key)
                .execution_options(populate_existing=True)
            )
            record = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise StorageError(f"failed to read {key!r}: {e}") from e

        if record is None:
            return None
        return StorageEntry(key=key, value=bytes(record.value))

    async def put(self, entry: StorageEntry) -> None:
        """Insert or replace the entry."""
        stmt = pg_insert(StorageEntryRecord).values(
            scope=self.scope,
            key=entry.key,
            value=bytes(entry.value),
            updated_at=utc_now(),
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[StorageEntryRecord.scope, StorageEntryRecord.key],
            set_={"value": stmt.excluded["value"], "updated_at": stmt.excluded["updated_at"]},
        )
        try:
            await self.db.execute(stmt)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"failed to write {entry.key!r}: {e}") from e

    async def delete(self, key: str) -> None:
        """Delete the entry at key. Deleting an absent key is not an error."""
        try:
            await self.db.execute(
                delete(StorageEntryRecord)
                .where(StorageEntryRecord.scope == self.scope)
                .where(StorageEntryRecord.key == key)
            )
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise StorageError(f"failed to delete {key!r}: {e}") from e


class InMemoryStorage:
    """Process-local storage for tests and single-process development."""

    def __init__(self) -> None:
        self._entries: dict[str, bytes] = {}

    async def get(self, key: str) -> StorageEntry | None:
        value = self._entries.get(key)
        if value is None:
            return None
        return StorageEntry(key=key, value=bytes(value))

    async def put(self, entry: StorageEntry) -> None:
        self._entries[entry.key] = bytes(entry.value)

    async def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def keys(self) -> list[str]:
        """List stored keys in sorted order."""
        return sorted(self._entries)
