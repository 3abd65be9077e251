"""CA key storage with transparent migration from legacy paths."""

import logging

from sshca.domain.models import location_for
from sshca.domain.states import KeyRole
from sshca.metrics import sshca_metrics
from sshca.repository.storage import Storage, StorageEntry

logger = logging.getLogger(__name__)


class CAKeyStore:
    """Reads and writes the two CA key halves by role.

    Storage errors are never wrapped or retried here.
    """

    def __init__(self, storage: Storage):
        self.storage = storage

    async def read(self, role: KeyRole) -> str:
        """Read a key half, promoting it from the legacy path if needed.

        A value found only at the deprecated path is written to the current
        path and the deprecated entry is then deleted. If that delete fails
        the error propagates; the current-path copy is already authoritative
        and the legacy entry is left behind.

        Returns:
            The stored key text, or "" if the role is not configured.
        """
        location = location_for(role)

        entry = await self.storage.get(location.current)
        if entry is None:
            entry = await self.storage.get(location.deprecated)
            if entry is not None:
                await self.storage.put(StorageEntry(key=location.current, value=entry.value))
                await self.storage.delete(location.deprecated)

                sshca_metrics.record_key_migrated(role.value)
                logger.info(
                    "ca_key_migrated",
                    extra={
                        "role": role.value,
                        "from_path": location.deprecated,
                        "to_path": location.current,
                    },
                )

        if entry is None:
            return ""

        return entry.value.decode("utf-8")

    async def write(self, role: KeyRole, text: str) -> None:
        """Write a key half at its current path."""
        location = location_for(role)
        await self.storage.put(StorageEntry(key=location.current, value=text.encode("utf-8")))

    async def delete(self, role: KeyRole) -> None:
        """Delete a key half at its current path. Legacy paths are untouched."""
        await self.storage.delete(location_for(role).current)
