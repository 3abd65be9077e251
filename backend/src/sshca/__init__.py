"""SSH certificate authority signing-key management."""
