"""SSH CA key material.

This module provides:
- Parsing and encoding of PEM private keys and authorized-key public keys
- CA signing key pair generation
"""

from sshca.ca.codec import KeyParseError, parse_private_key, parse_public_key
from sshca.ca.generator import KeyGenerationError, SSHKeyPairGenerator

__all__ = [
    "KeyGenerationError",
    "KeyParseError",
    "SSHKeyPairGenerator",
    "parse_private_key",
    "parse_public_key",
]
