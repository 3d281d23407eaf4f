"""
Forge Allowlist - Leaf Hashing

Addresses are canonicalized to their 20 raw bytes before hashing, so any
letter case of the same hex text produces the same leaf.
"""

from eth_utils import decode_hex, is_hex_address

from forge_allowlist.crypto.errors import InvalidAddress
from forge_allowlist.crypto.hashing import HashAlgorithm, digest

ADDRESS_SIZE = 20


def canonicalize_address(address: str | bytes) -> bytes:
    """
    Convert an address to its canonical 20-byte form.

    Args:
        address: 0x-prefixed 40-hex string (any case) or 20 raw bytes

    Returns:
        The 20 address bytes

    Raises:
        InvalidAddress: On wrong length, non-hex characters or missing prefix
    """
    if isinstance(address, (bytes, bytearray)):
        if len(address) != ADDRESS_SIZE:
            raise InvalidAddress(f"Address must be {ADDRESS_SIZE} bytes, got {len(address)}")
        return bytes(address)

    if not isinstance(address, str):
        raise InvalidAddress(f"Unsupported address type: {type(address).__name__}")

    if not address.startswith("0x") or not is_hex_address(address):
        raise InvalidAddress(f"Invalid address: {address!r}")

    return decode_hex(address)


def hash_leaf(
    address: str | bytes,
    algorithm: HashAlgorithm = HashAlgorithm.KECCAK256,
) -> bytes:
    """Hash an address into a 32-byte leaf digest."""
    return digest(canonicalize_address(address), algorithm)
