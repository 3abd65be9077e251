"""Bootstrap service for first-run operator credentials."""

import logging

from shared.config import settings
from shared.security import generate_api_key, hash_api_key

logger = logging.getLogger(__name__)

# Distinct banner for easy grep in logs
API_KEY_BANNER = "=" * 60


def _print_api_key(api_key: str) -> None:
    """Print API key with clear formatting for easy discovery."""
    # Use print() for immediate visibility (not buffered like logging)
    print(f"\n{API_KEY_BANNER}")
    print("OPERATOR API KEY (shown once, not persisted)")
    print(f"{api_key}")
    print(f"{API_KEY_BANNER}\n")
    logger.info("bootstrap_api_key_generated")


def bootstrap_operator_key() -> str:
    """
    Resolve the Argon2id hash that operator requests are checked against.

    Environment variables:
    - OPERATOR_API_KEY_HASH: Hash of a pre-issued key. Used as is when set.

    Without it, a key is generated for this process only and printed to
    stdout with a distinct banner. Grep for '====' in logs.

    Returns:
        The operator API key hash.
    """
    if settings.OPERATOR_API_KEY_HASH:
        logger.debug("bootstrap_skipped", extra={"reason": "hash_configured"})
        return settings.OPERATOR_API_KEY_HASH

    logger.warning("bootstrap_ephemeral_operator_key")

    api_key = generate_api_key()
    _print_api_key(api_key)

    return hash_api_key(api_key)
