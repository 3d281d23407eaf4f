"""
Forge Allowlist

Merkle allowlist engine for token-minting gates.
"""

__version__ = "1.0.0"
