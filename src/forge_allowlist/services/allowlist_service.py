"""
Forge Allowlist - Allowlist Service

Sits between the Merkle engine and its collaborators (CLI, HTTP API).
Loads address lists, builds trees with pinned options, and produces
serializable proofs. The engine itself stays free of I/O and logging.
"""

import json
import re
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog

from forge_allowlist.crypto.address import canonicalize_address, hash_leaf
from forge_allowlist.crypto.errors import InvalidAddress, InvalidDigest, LeafNotFound, MerkleError
from forge_allowlist.crypto.hashing import HashAlgorithm, from_hex, to_hex
from forge_allowlist.crypto.merkle import MerkleTree, TreeOptions, verify
from forge_allowlist.metrics import AllowlistMetrics, get_allowlist_metrics

logger = structlog.get_logger(__name__)


class AllowlistServiceError(Exception):
    """Base exception for allowlist service errors."""

    pass


@dataclass
class AllowlistProof:
    """
    Inclusion proof for one allowlisted address.

    Attributes:
        address: Address as supplied by the caller
        leaf: Leaf digest of the address
        leaf_index: Position of the leaf in the tree layout
        proof: Sibling digests, leaf to root
        root: Root digest the proof resolves to
        tree_size: Number of leaves in the tree
        algorithm: Hash function of the tree
        verified: Result of self-verification at generation time
    """

    address: str
    leaf: bytes
    leaf_index: int
    proof: tuple[bytes, ...]
    root: bytes
    tree_size: int
    algorithm: HashAlgorithm = HashAlgorithm.KECCAK256
    verified: bool = False

    def verify(self) -> bool:
        """Re-run the verifier over this proof."""
        return verify(self.leaf, self.proof, self.root, self.algorithm)

    def to_dict(self) -> dict[str, Any]:
        """Serialize proof to dictionary with hex digests."""
        return {
            "address": self.address,
            "leaf": to_hex(self.leaf),
            "leaf_index": self.leaf_index,
            "proof": [to_hex(sibling) for sibling in self.proof],
            "root": to_hex(self.root),
            "tree_size": self.tree_size,
            "algorithm": self.algorithm.value,
            "verified": self.verified,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AllowlistProof":
        """
        Deserialize proof from dictionary.

        Raises:
            InvalidDigest: If any digest field is not 0x + 64 hex
        """
        return cls(
            address=data["address"],
            leaf=from_hex(data["leaf"]),
            leaf_index=data["leaf_index"],
            proof=tuple(from_hex(sibling) for sibling in data["proof"]),
            root=from_hex(data["root"]),
            tree_size=data["tree_size"],
            algorithm=HashAlgorithm(data.get("algorithm", HashAlgorithm.KECCAK256.value)),
            verified=data.get("verified", False),
        )


def load_addresses(path: str | Path) -> list[str]:
    """
    Read an allowlist file.

    JSON files must hold an array of strings. Any other file is read as
    addresses separated by commas, whitespace or newlines,
    in any mix.

    Raises:
        AllowlistServiceError: If the file is unreadable or malformed
    """
    path = Path(path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise AllowlistServiceError(f"Cannot read allowlist {path}: {e}") from e

    if path.suffix.lower() == ".json":
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise AllowlistServiceError(f"Allowlist {path} is not valid JSON: {e}") from e
        if not isinstance(data, list) or not all(isinstance(a, str) for a in data):
            raise AllowlistServiceError(f"Allowlist {path} must be a JSON array of strings")
        entries = data
    else:
        entries = re.split(r"[,\s]+", content)

    addresses = [a.strip() for a in entries if a.strip()]
    logger.debug("Allowlist loaded", path=str(path), count=len(addresses))
    return addresses


def deduplicate_addresses(addresses: Iterable[str | bytes]) -> list[str | bytes]:
    """
    Drop repeated addresses, keeping the first occurrence.

    Addresses are compared in canonical form, so letter case is ignored.

    Raises:
        InvalidAddress: If any address is malformed
    """
    seen: set[bytes] = set()
    unique = []
    for address in addresses:
        canonical = canonicalize_address(address)
        if canonical in seen:
            continue
        seen.add(canonical)
        unique.append(address)
    return unique


class AllowlistService:
    """
    Allowlist tree service.

    Orchestrates:
    - Optional deduplication of the address list
    - Tree construction with pinned options
    - Proof generation with membership check and self-verification
    - Verification of externally supplied proofs
    """

    def __init__(
        self,
        options: TreeOptions | None = None,
        deduplicate: bool = False,
        metrics: AllowlistMetrics | None = None,
    ) -> None:
        """Initialize allowlist service."""
        self._options = options or TreeOptions()
        self._deduplicate = deduplicate
        self._metrics = metrics or get_allowlist_metrics()

    @property
    def options(self) -> TreeOptions:
        """Get the pinned tree options."""
        return self._options

    def build_tree(self, addresses: Sequence[str | bytes]) -> MerkleTree:
        """
        Build a Merkle tree from an address list.

        Raises:
            InvalidAddress: If any address is malformed
            EmptyInput: If the list is empty
            UnpairableLayer: If a layer cannot be paired under REJECT
        """
        if self._deduplicate:
            unique = deduplicate_addresses(addresses)
            if len(unique) != len(addresses):
                logger.info(
                    "Duplicate addresses dropped",
                    dropped=len(addresses) - len(unique),
                    remaining=len(unique),
                )
            addresses = unique

        start = time.perf_counter()
        try:
            tree = MerkleTree.from_addresses(addresses, self._options)
        except MerkleError as e:
            self._metrics.record_build_failure(type(e).__name__)
            logger.warning(
                "Merkle tree build failed",
                error=str(e),
                reason=type(e).__name__,
                address_count=len(addresses),
            )
            raise
        duration = time.perf_counter() - start

        self._metrics.record_merkle_build(duration, tree.leaf_count)
        logger.info(
            "Merkle tree built",
            root=tree.root_hex,
            leaf_count=tree.leaf_count,
            depth=tree.depth,
            algorithm=tree.algorithm.value,
            duration=round(duration, 6),
        )
        return tree

    def generate_root(self, addresses: Sequence[str | bytes]) -> str:
        """Build a tree and return its root as hex."""
        return self.build_tree(addresses).root_hex

    def generate_proof(
        self,
        addresses: Sequence[str | bytes],
        address: str,
    ) -> AllowlistProof:
        """
        Build a tree and prove membership of one address.

        Raises:
            InvalidAddress: If any address is malformed
            LeafNotFound: If the address is not in the list
        """
        tree = self.build_tree(addresses)
        return self.prove_address(tree, address)

    def prove_address(self, tree: MerkleTree, address: str) -> AllowlistProof:
        """
        Prove membership of one address in an already built tree.

        Raises:
            InvalidAddress: If the address is malformed
            LeafNotFound: If the address is not in the tree
        """
        leaf = hash_leaf(address, tree.algorithm)

        start = time.perf_counter()
        try:
            leaf_index = tree.index_of(leaf)
        except LeafNotFound:
            logger.info("Address not in allowlist", address=address, root=tree.root_hex)
            raise
        proof = tree.get_proof_by_index(leaf_index)
        self._metrics.record_proof(time.perf_counter() - start)

        verified = verify(leaf, proof, tree.root, tree.algorithm)
        if not verified:
            # Only reachable with a broken hash backend
            logger.error("Generated proof failed self-verification", address=address)

        return AllowlistProof(
            address=address,
            leaf=leaf,
            leaf_index=leaf_index,
            proof=proof,
            root=tree.root,
            tree_size=tree.leaf_count,
            algorithm=tree.algorithm,
            verified=verified,
        )

    def resolve_leaf(self, address: str | None = None, leaf: str | None = None) -> bytes:
        """
        Get the leaf digest for an address, or parse a hex leaf digest.

        The address takes precedence when both are given.

        Raises:
            InvalidAddress: If the address is malformed
            InvalidDigest: If the leaf is malformed, or neither is given
        """
        if address is not None:
            return hash_leaf(address, self._options.algorithm)
        if leaf is not None:
            return from_hex(leaf)
        raise InvalidDigest("Either address or leaf is required")

    def verify_proof(
        self,
        proof: Sequence[str],
        root: str,
        address: str | None = None,
        leaf: str | None = None,
    ) -> bool:
        """
        Verify a hex-encoded proof for an address or a leaf digest.

        Unparsable input is logged and reported as a failed verification.
        """
        try:
            leaf_bytes = self.resolve_leaf(address=address, leaf=leaf)
            root_bytes = from_hex(root)
            siblings = [from_hex(sibling) for sibling in proof]
        except (InvalidAddress, InvalidDigest) as e:
            logger.info("Proof rejected as malformed", error=str(e))
            self._metrics.record_verification(False)
            return False

        valid = verify(leaf_bytes, siblings, root_bytes, self._options.algorithm)
        self._metrics.record_verification(valid)
        logger.info(
            "Proof verified",
            valid=valid,
            leaf=to_hex(leaf_bytes),
            root=root,
            proof_length=len(siblings),
        )
        return valid
