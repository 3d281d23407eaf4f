"""
Forge Allowlist - Hash Functions

A tree instance pins one hash algorithm for leaves and internal nodes.
keccak256 matches EVM verifiers (MerkleProof.verify in OpenZeppelin).
"""

import hashlib
from enum import Enum

from eth_utils import encode_hex, keccak

from forge_allowlist.crypto.errors import InvalidDigest

DIGEST_SIZE = 32


class HashAlgorithm(str, Enum):
    """Supported 32-byte hash functions."""

    KECCAK256 = "keccak256"
    SHA256 = "sha256"


def digest(data: bytes, algorithm: HashAlgorithm = HashAlgorithm.KECCAK256) -> bytes:
    """Hash data with the given algorithm, returning 32 raw bytes."""
    if algorithm == HashAlgorithm.SHA256:
        return hashlib.sha256(data).digest()
    return keccak(data)


def hash_pair(
    a: bytes,
    b: bytes,
    algorithm: HashAlgorithm = HashAlgorithm.KECCAK256,
) -> bytes:
    """
    Compute the parent of two nodes.

    Children are concatenated smaller-first (unsigned byte-lexicographic),
    so the result does not depend on which side each child came from.
    """
    if a <= b:
        return digest(a + b, algorithm)
    return digest(b + a, algorithm)


def to_hex(value: bytes) -> str:
    """Render a digest as 0x-prefixed lowercase hex."""
    return encode_hex(value)


def from_hex(value: str) -> bytes:
    """
    Parse a 0x-prefixed 64-hex digest.

    Raises:
        InvalidDigest: If the text is not exactly 32 bytes of hex
    """
    if not isinstance(value, str) or not value.startswith("0x") or len(value) != 2 + 2 * DIGEST_SIZE:
        raise InvalidDigest(f"Invalid digest: {value!r}")
    try:
        return bytes.fromhex(value[2:])
    except ValueError as e:
        raise InvalidDigest(f"Invalid digest: {value!r}") from e
