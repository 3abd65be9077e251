"""SSH CA key pair generation."""

import logging
import time

from cryptography.hazmat.primitives.asymmetric import rsa
from opentelemetry import trace

from sshca.ca.codec import encode_private_key, encode_public_key, key_algorithm_name
from sshca.domain.models import SigningKeyPair
from sshca.metrics import sshca_metrics

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class KeyGenerationError(Exception):
    """Raised when the CA key pair cannot be generated."""

    pass


class SSHKeyPairGenerator:
    """Generates RSA signing key pairs for the SSH CA.

    Every call draws a fresh key from the OS random source; nothing is
    pre-generated or cached. RSA-4096 generation is CPU bound and usually
    takes from a few hundred milliseconds to a few seconds.
    """

    RSA_KEY_SIZE = 4096
    RSA_PUBLIC_EXPONENT = 65537

    def generate(self) -> SigningKeyPair:
        """Generate a new key pair rendered as authorized-key and PEM text.

        Raises:
            KeyGenerationError: If key construction or encoding fails.
        """
        with tracer.start_as_current_span("SSHKeyPairGenerator.generate") as span:
            span.set_attribute("key_size", self.RSA_KEY_SIZE)
            start_time = time.time()

            try:
                private_key = rsa.generate_private_key(
                    public_exponent=self.RSA_PUBLIC_EXPONENT,
                    key_size=self.RSA_KEY_SIZE,
                )
                key_pair = SigningKeyPair(
                    public_key=encode_public_key(private_key.public_key()),
                    private_key=encode_private_key(private_key),
                )
            except Exception as e:
                logger.error("ca_key_generation_failed", extra={"error": str(e)})
                raise KeyGenerationError(f"Failed to generate SSH key pair: {e}") from e

            duration = time.time() - start_time
            sshca_metrics.record_ca_key_generated(duration)

            logger.info(
                "ca_key_generated",
                extra={"algorithm": key_algorithm_name(private_key), "duration_seconds": duration},
            )

            return key_pair
