"""OpenTelemetry metrics for the SSH CA module."""

from opentelemetry import metrics

# Get meter for sshca module
meter = metrics.get_meter("sshca")

# Key generation
ca_keys_generated_total = meter.create_counter(
    name="sshca_ca_keys_generated_total",
    description="Total CA key pairs generated",
    unit="1",
)

ca_key_generation_duration = meter.create_histogram(
    name="sshca_ca_key_generation_duration_seconds",
    description="CA key pair generation duration in seconds",
    unit="s",
)

# Configuration lifecycle
ca_configured_total = meter.create_counter(
    name="sshca_ca_configured_total",
    description="Total successful CA configurations",
    unit="1",
)

ca_config_rejected_total = meter.create_counter(
    name="sshca_ca_config_rejected_total",
    description="Total rejected CA configuration requests",
    unit="1",
)

ca_deleted_total = meter.create_counter(
    name="sshca_ca_deleted_total",
    description="Total CA configuration deletions",
    unit="1",
)

# Storage
ca_key_migrations_total = meter.create_counter(
    name="sshca_ca_key_migrations_total",
    description="Total CA key halves promoted from a legacy storage path",
    unit="1",
)

ca_rollbacks_total = meter.create_counter(
    name="sshca_ca_rollbacks_total",
    description="Total compensating deletes after a failed private key write",
    unit="1",
)


class SSHCAMetrics:
    """Facade for SSH CA metrics with proper labels."""

    def record_ca_key_generated(self, duration_seconds: float) -> None:
        """Record key pair generation with duration."""
        ca_keys_generated_total.add(1)
        ca_key_generation_duration.record(duration_seconds)

    def record_ca_configured(self, source: str) -> None:
        """Record CA configuration. Labels: source=generated|provided"""
        ca_configured_total.add(1, {"source": source})

    def record_ca_config_rejected(self, reason: str) -> None:
        """Record rejected configuration. Labels: reason=invalid_request|conflict"""
        ca_config_rejected_total.add(1, {"reason": reason})

    def record_ca_deleted(self) -> None:
        """Record CA deletion."""
        ca_deleted_total.add(1)

    def record_key_migrated(self, role: str) -> None:
        """Record legacy path promotion. Labels: role=ca_public_key|ca_private_key"""
        ca_key_migrations_total.add(1, {"role": role})

    def record_rollback(self, result: str) -> None:
        """Record compensating delete. Labels: result=success|failure"""
        ca_rollbacks_total.add(1, {"result": result})


# Singleton instance
sshca_metrics = SSHCAMetrics()
