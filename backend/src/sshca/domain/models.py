from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import DateTime, LargeBinary, String
from sqlalchemy.orm import Mapped, mapped_column

from shared.database import Base

from .states import KeyRole


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StorageEntryRecord(Base):
    """Row backing one storage path within a scope."""

    __tablename__ = "storage_entries"

    scope: Mapped[str] = mapped_column(String(255), primary_key=True)
    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )


@dataclass(frozen=True)
class SigningKeyPair:
    """CA key pair as text: authorized-key public half and PEM private half."""

    public_key: str
    private_key: str


@dataclass(frozen=True)
class KeyLocation:
    """Current and legacy storage paths for one key role."""

    current: str
    deprecated: str


CA_PUBLIC_KEY_STORAGE_PATH = "config/ca_public_key"
CA_PUBLIC_KEY_STORAGE_PATH_DEPRECATED = "public_key"
CA_PRIVATE_KEY_STORAGE_PATH = "config/ca_private_key"
CA_PRIVATE_KEY_STORAGE_PATH_DEPRECATED = "config/ca_bundle"

KEY_LOCATIONS: dict[KeyRole, KeyLocation] = {
    KeyRole.PUBLIC: KeyLocation(
        current=CA_PUBLIC_KEY_STORAGE_PATH,
        deprecated=CA_PUBLIC_KEY_STORAGE_PATH_DEPRECATED,
    ),
    KeyRole.PRIVATE: KeyLocation(
        current=CA_PRIVATE_KEY_STORAGE_PATH,
        deprecated=CA_PRIVATE_KEY_STORAGE_PATH_DEPRECATED,
    ),
}


def location_for(role: KeyRole) -> KeyLocation:
    """Resolve the storage paths for a key role."""
    return KEY_LOCATIONS[role]
