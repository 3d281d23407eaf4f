"""
Forge Allowlist - Metrics Module

Prometheus metrics for allowlist tree building, proof generation and
verification.
"""

from forge_allowlist.metrics.allowlist_metrics import (
    AllowlistMetrics,
    get_allowlist_metrics,
)

__all__ = [
    "AllowlistMetrics",
    "get_allowlist_metrics",
]
