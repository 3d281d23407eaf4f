"""
Forge Allowlist - Allowlist Metrics

Metrics Categories:
- Merkle tree building
- Proof generation
- Proof verification
"""

import structlog
from prometheus_client import Counter, Histogram, Info

logger = structlog.get_logger(__name__)


class AllowlistMetrics:
    """
    Centralized metrics for the allowlist service.

    Provides visibility into:
    - Tree build times, sizes and failures
    - Proof generation times
    - Verification outcomes
    """

    def __init__(self) -> None:
        """Initialize all allowlist metrics."""
        self._init_merkle_metrics()
        self._init_proof_metrics()
        self._init_info_metrics()

    def _init_merkle_metrics(self) -> None:
        """Initialize Merkle tree metrics."""
        self.merkle_build_duration = Histogram(
            "forge_allowlist_merkle_build_duration_seconds",
            "Merkle tree build time",
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 5.0],
        )

        self.merkle_tree_size = Histogram(
            "forge_allowlist_merkle_tree_size",
            "Number of leaves in Merkle tree",
            buckets=[2, 16, 128, 1024, 8192, 65536, 131072],
        )

        self.merkle_build_failures = Counter(
            "forge_allowlist_merkle_build_failures_total",
            "Merkle tree builds that raised an error",
            ["reason"],
        )

    def _init_proof_metrics(self) -> None:
        """Initialize proof metrics."""
        self.proof_generation_duration = Histogram(
            "forge_allowlist_proof_duration_seconds",
            "Merkle proof generation time",
            buckets=[0.0001, 0.0005, 0.001, 0.005, 0.01],
        )

        self.proofs_generated = Counter(
            "forge_allowlist_proofs_generated_total",
            "Merkle proofs generated",
        )

        self.verifications = Counter(
            "forge_allowlist_verifications_total",
            "Merkle proof verifications",
            ["result"],
        )

    def _init_info_metrics(self) -> None:
        """Initialize info metrics."""
        self.service_info = Info(
            "forge_allowlist_service",
            "Allowlist service information",
        )

    # Convenience methods

    def record_merkle_build(self, duration: float, tree_size: int) -> None:
        """Record Merkle tree build."""
        self.merkle_build_duration.observe(duration)
        self.merkle_tree_size.observe(tree_size)

    def record_build_failure(self, reason: str) -> None:
        """Record failed Merkle tree build."""
        self.merkle_build_failures.labels(reason=reason).inc()

    def record_proof(self, duration: float) -> None:
        """Record proof generation."""
        self.proofs_generated.inc()
        self.proof_generation_duration.observe(duration)

    def record_verification(self, valid: bool) -> None:
        """Record Merkle proof verification."""
        result = "valid" if valid else "invalid"
        self.verifications.labels(result=result).inc()

    def set_service_info(
        self,
        version: str,
        environment: str,
        algorithm: str,
        odd_layer_policy: str,
    ) -> None:
        """Set service info labels."""
        self.service_info.info({
            "version": version,
            "environment": environment,
            "algorithm": algorithm,
            "odd_layer_policy": odd_layer_policy,
        })


# Singleton instance
_allowlist_metrics: AllowlistMetrics | None = None


def get_allowlist_metrics() -> AllowlistMetrics:
    """Get global allowlist metrics instance."""
    global _allowlist_metrics
    if _allowlist_metrics is None:
        _allowlist_metrics = AllowlistMetrics()
        logger.debug("Allowlist metrics initialized")
    return _allowlist_metrics
