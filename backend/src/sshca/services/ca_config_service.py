"""CA configuration service: provisioning and removal of the SSH CA key pair."""

import logging
from dataclasses import dataclass

from opentelemetry import trace

from sshca.ca.codec import KeyParseError, parse_private_key, parse_public_key
from sshca.ca.generator import SSHKeyPairGenerator
from sshca.domain.models import SigningKeyPair
from sshca.domain.states import ConfigStage, GenerateSigningKey, KeyRole, KeySource
from sshca.metrics import sshca_metrics
from sshca.repository.key_store import CAKeyStore
from sshca.repository.storage import Storage, StorageError

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class InvalidRequestError(Exception):
    """Raised when the supplied fields cannot be used to configure the CA."""

    pass


class ConflictError(Exception):
    """Raised when a CA key pair is already configured."""

    pass


class CAConfigError(Exception):
    """Raised on internal failures while configuring the CA."""

    pass


@dataclass(frozen=True)
class StageFailure:
    """One failed persist stage and its underlying error."""

    stage: ConfigStage
    error: Exception

    def __str__(self) -> str:
        return f"{self.stage.value}: {self.error}"


class RollbackError(CAConfigError):
    """Raised when the private key write failed and cleanup failed too.

    The public key is left stored without its private counterpart and needs
    manual removal.
    """

    def __init__(self, failures: list[StageFailure]):
        self.failures = failures
        lines = "\n".join(f"\t* {failure}" for failure in failures)
        super().__init__(f"{len(failures)} errors occurred:\n{lines}")


def resolve_key_source(
    public_key: str,
    private_key: str,
    generate_signing_key: GenerateSigningKey,
) -> KeySource:
    """Decide whether to generate a key pair or use the provided one.

    Rules are evaluated in order; an explicit false with no keys is reported
    as a missing public key rather than falling back to generation.

    Raises:
        InvalidRequestError: If the field combination is not allowed.
    """
    if generate_signing_key is GenerateSigningKey.EXPLICIT_TRUE:
        if public_key or private_key:
            raise InvalidRequestError(
                "public_key and private_key must not be set when generate_signing_key "
                "is set to true"
            )
        return KeySource.GENERATED

    if generate_signing_key is GenerateSigningKey.EXPLICIT_FALSE or (public_key and private_key):
        if not public_key:
            raise InvalidRequestError("missing public_key")
        if not private_key:
            raise InvalidRequestError("missing private_key")
        return KeySource.PROVIDED

    if not public_key and not private_key:
        return KeySource.GENERATED

    raise InvalidRequestError(
        "only one of public_key and private_key set; both must be set to use, "
        "or both must be blank to auto-generate"
    )


def validate_key_pair(public_key: str, private_key: str) -> SigningKeyPair:
    """Check that provided key text parses; return it unchanged.

    Raises:
        InvalidRequestError: If either half does not parse.
    """
    try:
        parse_private_key(private_key)
    except KeyParseError as e:
        raise InvalidRequestError(
            f"Unable to parse private_key as an SSH private key: {e}"
        ) from e

    try:
        parse_public_key(public_key)
    except KeyParseError as e:
        raise InvalidRequestError(f"Unable to parse public_key as an SSH public key: {e}") from e

    return SigningKeyPair(public_key=public_key, private_key=private_key)


class CAConfigService:
    """Service for configuring, reading and deleting the CA key pair.

    Configuration is write-once: an existing pair must be deleted before a
    new one is stored. The existence check and the writes are not serialized
    across concurrent requests.
    """

    def __init__(self, storage: Storage, generator: SSHKeyPairGenerator | None = None):
        self.key_store = CAKeyStore(storage)
        self.generator = generator or SSHKeyPairGenerator()

    async def configure(
        self,
        public_key: str,
        private_key: str,
        generate_signing_key: GenerateSigningKey,
    ) -> KeySource:
        """Provision the CA key pair from input or by generation.

        Args:
            public_key: Authorized-key text, or "".
            private_key: PEM text, or "".
            generate_signing_key: Tri-state generate flag.

        Returns:
            Where the stored key pair came from.

        Raises:
            InvalidRequestError: If the input is rejected.
            ConflictError: If a key pair is already configured.
            CAConfigError: If the existing keys cannot be read.
            RollbackError: If the private key write and its cleanup both failed.
            KeyGenerationError: If key generation fails.
            StorageError: If a write fails (after successful cleanup).
        """
        with tracer.start_as_current_span("CAConfigService.configure") as span:
            span.set_attribute("generate_signing_key", generate_signing_key.value)

            try:
                source = resolve_key_source(public_key, private_key, generate_signing_key)
                span.set_attribute("source", source.value)

                if source is KeySource.GENERATED:
                    key_pair = self.generator.generate()
                else:
                    key_pair = validate_key_pair(public_key, private_key)
            except InvalidRequestError as e:
                sshca_metrics.record_ca_config_rejected("invalid_request")
                logger.info("ca_config_rejected", extra={"reason": str(e)})
                raise

            if not key_pair.public_key or not key_pair.private_key:
                raise CAConfigError("failed to generate or parse the keys")

            await self._ensure_not_configured()
            await self._persist(key_pair)

            sshca_metrics.record_ca_configured(source.value)
            logger.info("ca_configured", extra={"source": source.value})

            return source

    async def _ensure_not_configured(self) -> None:
        try:
            stored_public_key = await self.key_store.read(KeyRole.PUBLIC)
        except (StorageError, UnicodeDecodeError) as e:
            raise CAConfigError(f"failed to read CA public key: {e}") from e

        try:
            stored_private_key = await self.key_store.read(KeyRole.PRIVATE)
        except (StorageError, UnicodeDecodeError) as e:
            raise CAConfigError(f"failed to read CA private key: {e}") from e

        if stored_public_key or stored_private_key:
            sshca_metrics.record_ca_config_rejected("conflict")
            logger.info("ca_config_rejected", extra={"reason": "already_configured"})
            raise ConflictError("keys are already configured; delete them before reconfiguring")

    async def _persist(self, key_pair: SigningKeyPair) -> None:
        """Write public then private half, removing the public half on failure."""
        await self.key_store.write(KeyRole.PUBLIC, key_pair.public_key)

        try:
            await self.key_store.write(KeyRole.PRIVATE, key_pair.private_key)
        except Exception as write_err:
            failures = [
                StageFailure(
                    ConfigStage.WRITE_PRIVATE_KEY,
                    CAConfigError(f"failed to store CA private key: {write_err}"),
                )
            ]

            try:
                await self.key_store.delete(KeyRole.PUBLIC)
            except Exception as delete_err:
                failures.append(
                    StageFailure(
                        ConfigStage.CLEANUP_PUBLIC_KEY,
                        CAConfigError(f"failed to cleanup CA public key: {delete_err}"),
                    )
                )
                sshca_metrics.record_rollback("failure")
                logger.error(
                    "ca_config_rollback_failed",
                    extra={"write_error": str(write_err), "cleanup_error": str(delete_err)},
                )
                raise RollbackError(failures) from write_err

            sshca_metrics.record_rollback("success")
            logger.warning("ca_config_rolled_back", extra={"error": str(write_err)})
            raise

    async def get_public_key(self) -> str:
        """Get the configured CA public key, or "" if none is configured."""
        with tracer.start_as_current_span("CAConfigService.get_public_key"):
            return await self.key_store.read(KeyRole.PUBLIC)

    async def delete(self) -> None:
        """Delete both key halves at their current paths.

        The private half goes first. A failure stops immediately, without
        attempting the public half.
        """
        with tracer.start_as_current_span("CAConfigService.delete"):
            await self.key_store.delete(KeyRole.PRIVATE)
            await self.key_store.delete(KeyRole.PUBLIC)

            sshca_metrics.record_ca_deleted()
            logger.info("ca_deleted")
