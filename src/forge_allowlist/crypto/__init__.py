"""
Forge Allowlist - Cryptographic Utilities

Provides leaf hashing, Merkle tree construction, proof generation, and
verification.
"""

from forge_allowlist.crypto.address import canonicalize_address, hash_leaf
from forge_allowlist.crypto.errors import (
    EmptyInput,
    InvalidAddress,
    InvalidDigest,
    LeafNotFound,
    MerkleError,
    UnpairableLayer,
)
from forge_allowlist.crypto.hashing import HashAlgorithm, from_hex, hash_pair, to_hex
from forge_allowlist.crypto.merkle import (
    MerkleTree,
    OddLayerPolicy,
    Proof,
    TreeOptions,
    build,
    prove,
    verify,
)

__all__ = [
    "EmptyInput",
    "HashAlgorithm",
    "InvalidAddress",
    "InvalidDigest",
    "LeafNotFound",
    "MerkleError",
    "MerkleTree",
    "OddLayerPolicy",
    "Proof",
    "TreeOptions",
    "UnpairableLayer",
    "build",
    "canonicalize_address",
    "from_hex",
    "hash_leaf",
    "hash_pair",
    "prove",
    "to_hex",
    "verify",
]
