"""
Forge Allowlist - Merkle Engine Errors

All failures raised by the Merkle engine derive from MerkleError so callers
can handle the whole family with a single except clause.
"""


class MerkleError(Exception):
    """Base exception for Merkle engine errors."""

    pass


class InvalidAddress(MerkleError):
    """Address is not a 0x-prefixed 40-hex string or 20 raw bytes."""

    pass


class InvalidDigest(MerkleError):
    """Digest text is not a 0x-prefixed 64-hex string."""

    pass


class EmptyInput(MerkleError):
    """No leaves were supplied to the tree builder."""

    pass


class UnpairableLayer(MerkleError):
    """A non-root layer has an odd number of nodes."""

    def __init__(self, layer: int, size: int) -> None:
        super().__init__(f"Layer {layer} has {size} nodes and cannot be paired")
        self.layer = layer
        self.size = size


class LeafNotFound(MerkleError):
    """Proof requested for a leaf that is not in the tree."""

    pass
