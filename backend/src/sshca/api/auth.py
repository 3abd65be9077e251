"""Operator API key authentication for the SSH CA API."""

import logging

from fastapi import Depends, HTTPException, status
from fastapi.security import APIKeyHeader
from shared.security import API_KEY_PREFIX, verify_api_key

logger = logging.getLogger(__name__)

# Define API key header
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

# Argon2id hash of the operator key, set at startup
_operator_key_hash: str | None = None


def set_operator_key_hash(api_key_hash: str) -> None:
    """Set the operator API key hash used for authentication."""
    global _operator_key_hash
    _operator_key_hash = api_key_hash


def get_operator_key_hash() -> str:
    """Get the operator API key hash."""
    if _operator_key_hash is None:
        raise RuntimeError("Operator API key not initialized")
    return _operator_key_hash


async def require_operator(api_key: str | None = Depends(api_key_header)) -> None:
    """
    Authenticate the operator via API key.

    - Extract API key from X-API-Key header
    - Verify format: sca_<base64url>
    - Verify against the operator Argon2id hash
    - Raise 401 UNAUTHORIZED on any failure

    Log: DEBUG auth_attempt {result: success|failure}
    """
    if not api_key:
        logger.debug("auth_attempt", extra={"result": "failure", "reason": "missing_key"})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
        )

    if not api_key.startswith(API_KEY_PREFIX):
        logger.debug("auth_attempt", extra={"result": "failure", "reason": "invalid_format"})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key format",
        )

    if not verify_api_key(api_key, get_operator_key_hash()):
        logger.debug("auth_attempt", extra={"result": "failure", "reason": "invalid_key"})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )

    logger.debug("auth_attempt", extra={"result": "success"})
