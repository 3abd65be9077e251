"""Shared fixtures: key material and fault-injecting storage."""

import logging
from unittest.mock import MagicMock

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa

from sshca.ca.codec import encode_private_key, encode_public_key
from sshca.ca.generator import SSHKeyPairGenerator
from sshca.domain.models import SigningKeyPair
from sshca.repository.storage import InMemoryStorage, StorageEntry, StorageError


class FaultyStorage(InMemoryStorage):
    """In-memory storage that fails chosen operations on chosen paths."""

    def __init__(self) -> None:
        super().__init__()
        self.fail_get: set[str] = set()
        self.fail_put: set[str] = set()
        self.fail_delete: set[str] = set()
        self.calls: list[tuple[str, str]] = []

    async def get(self, key: str) -> StorageEntry | None:
        self.calls.append(("get", key))
        if key in self.fail_get:
            raise StorageError(f"injected get failure on {key}")
        return await super().get(key)

    async def put(self, entry: StorageEntry) -> None:
        self.calls.append(("put", entry.key))
        if entry.key in self.fail_put:
            raise StorageError(f"injected put failure on {entry.key}")
        await super().put(entry)

    async def delete(self, key: str) -> None:
        self.calls.append(("delete", key))
        if key in self.fail_delete:
            raise StorageError(f"injected delete failure on {key}")
        await super().delete(key)

    def writes(self) -> list[tuple[str, str]]:
        """Calls that modify state."""
        return [call for call in self.calls if call[0] in ("put", "delete")]


def make_key_pair() -> SigningKeyPair:
    """Build an RSA-2048 key pair as text (smaller than production for speed)."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return SigningKeyPair(
        public_key=encode_public_key(private_key.public_key()),
        private_key=encode_private_key(private_key),
    )


@pytest.fixture
def storage() -> FaultyStorage:
    """Empty fault-injecting storage."""
    return FaultyStorage()


@pytest.fixture(scope="session")
def provided_key_pair() -> SigningKeyPair:
    """Key pair supplied by a caller."""
    return make_key_pair()


@pytest.fixture(scope="session")
def generated_key_pair() -> SigningKeyPair:
    """Key pair returned by the stub generator."""
    return make_key_pair()


@pytest.fixture
def stub_generator(generated_key_pair: SigningKeyPair) -> MagicMock:
    """Generator that returns a fixed key pair without RSA-4096 work."""
    generator = MagicMock(spec=SSHKeyPairGenerator)
    generator.generate.return_value = generated_key_pair
    return generator


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """Undo root-logger handlers/level installed (possibly mocked) by a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
