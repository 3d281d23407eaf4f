"""
Forge Allowlist - Services Package

Provides allowlist loading, tree building and proof services.
"""

from forge_allowlist.services.allowlist_service import (
    AllowlistProof,
    AllowlistService,
    AllowlistServiceError,
    deduplicate_addresses,
    load_addresses,
)

__all__ = [
    "AllowlistProof",
    "AllowlistService",
    "AllowlistServiceError",
    "deduplicate_addresses",
    "load_addresses",
]
