"""Pydantic schemas for SSH CA API request/response validation."""

from pydantic import BaseModel, Field

from sshca.domain.states import GenerateSigningKey


class ConfigureCARequest(BaseModel):
    """Request body for configuring the CA signing key."""

    private_key: str = Field(
        "", description="Private half of the SSH key that will be used to sign certificates."
    )
    public_key: str = Field(
        "", description="Public half of the SSH key that will be used to sign certificates."
    )
    generate_signing_key: bool | None = Field(
        None,
        description=(
            "Generate SSH key pair internally rather than use the private_key and "
            "public_key fields. Treated as true when omitted and no keys are given."
        ),
    )

    @property
    def generate_flag(self) -> GenerateSigningKey:
        """Tri-state view of generate_signing_key; null counts as absent."""
        return GenerateSigningKey.from_field(self.generate_signing_key)


class CAPublicKeyResponse(BaseModel):
    """Response model for the configured CA public key."""

    public_key: str


class StageFailureResponse(BaseModel):
    """One failed stage of a partially rolled back configuration."""

    stage: str
    error: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    code: str
    detail: str | None = None
    failures: list[StageFailureResponse] | None = None
