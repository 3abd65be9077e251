from enum import StrEnum


class KeyRole(StrEnum):
    """The two halves of the CA signing key."""

    PUBLIC = "ca_public_key"
    PRIVATE = "ca_private_key"


class GenerateSigningKey(StrEnum):
    """Tri-state value of the generate_signing_key request field."""

    EXPLICIT_TRUE = "explicit_true"
    EXPLICIT_FALSE = "explicit_false"
    UNSET = "unset"

    @classmethod
    def from_field(cls, value: bool | None) -> "GenerateSigningKey":
        """Map an optional boolean (None = field absent) to the tri-state."""
        if value is None:
            return cls.UNSET
        return cls.EXPLICIT_TRUE if value else cls.EXPLICIT_FALSE


class KeySource(StrEnum):
    """Where the configured key pair came from."""

    GENERATED = "generated"
    PROVIDED = "provided"


class ConfigStage(StrEnum):
    """Persist stages that can fail during CA configuration."""

    WRITE_PRIVATE_KEY = "write_private_key"
    CLEANUP_PUBLIC_KEY = "cleanup_public_key"
