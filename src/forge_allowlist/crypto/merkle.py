"""
Forge Allowlist - Merkle Tree Implementation

Provides deterministic Merkle tree construction over address leaves,
inclusion proof generation, and verification.

The implementation follows the sorted-pair convention used by EVM
verifiers:
- Each leaf is the hash of the 20 raw address bytes
- Each internal node is hash(min(left, right) ++ max(left, right))
- Proofs are plain sibling lists without left/right markers

The leaf layer is ordered by byte value before pairing, so the root is
the same for any permutation of the input list.

A layer with an odd number of nodes is rejected (UnpairableLayer) unless
the tree was built with OddLayerPolicy.PROMOTE, which carries the lone
node up unchanged.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from forge_allowlist.crypto.address import hash_leaf
from forge_allowlist.crypto.errors import EmptyInput, InvalidDigest, LeafNotFound, UnpairableLayer
from forge_allowlist.crypto.hashing import (
    DIGEST_SIZE,
    HashAlgorithm,
    hash_pair,
    to_hex,
)

Proof = tuple[bytes, ...]


class OddLayerPolicy(str, Enum):
    """What to do with the last node of an odd-sized layer."""

    REJECT = "reject"
    PROMOTE = "promote"


@dataclass(frozen=True)
class TreeOptions:
    """
    Parameters pinned on a tree instance.

    Attributes:
        algorithm: Hash function for leaves and internal nodes
        odd_layer_policy: Handling of odd-sized layers
        sort_leaves: Order the leaf layer by byte value before pairing
    """

    algorithm: HashAlgorithm = HashAlgorithm.KECCAK256
    odd_layer_policy: OddLayerPolicy = OddLayerPolicy.REJECT
    sort_leaves: bool = True


class MerkleTree:
    """
    Immutable Merkle tree over 32-byte leaf digests.

    Layers are stored as tuples from the leaf layer (0) up to the root
    layer. The tree holds no proofs; they are computed per query.

    Example:
        >>> tree = MerkleTree.from_addresses(["0x" + "11" * 20, "0x" + "22" * 20])
        >>> proof = tree.get_proof(hash_leaf("0x" + "22" * 20))
        >>> verify(hash_leaf("0x" + "22" * 20), proof, tree.root)
        True
    """

    def __init__(self, layers: tuple[tuple[bytes, ...], ...], options: TreeOptions) -> None:
        """
        Initialize Merkle tree (internal use).

        Use build(), from_leaves() or from_addresses() to construct trees.
        """
        self._layers = layers
        self._options = options
        self._index: dict[bytes, int] = {}
        for i, leaf in enumerate(layers[0]):
            self._index.setdefault(leaf, i)

    @classmethod
    def from_leaves(
        cls,
        leaves: Iterable[bytes],
        options: TreeOptions | None = None,
    ) -> "MerkleTree":
        """
        Construct a Merkle tree from leaf digests.

        Args:
            leaves: 32-byte leaf digests
            options: Pinned tree parameters (defaults to TreeOptions())

        Returns:
            Constructed MerkleTree

        Raises:
            EmptyInput: If leaves is empty
            InvalidDigest: If a leaf is not 32 bytes
            UnpairableLayer: If a non-root layer is odd under REJECT
        """
        options = options or TreeOptions()
        leaf_layer = [bytes(leaf) for leaf in leaves]

        if not leaf_layer:
            raise EmptyInput("Cannot create Merkle tree from empty leaves")

        for leaf in leaf_layer:
            if len(leaf) != DIGEST_SIZE:
                raise InvalidDigest(f"Leaf digest must be {DIGEST_SIZE} bytes, got {len(leaf)}")

        if options.sort_leaves:
            leaf_layer.sort()

        return cls(cls._build_layers(leaf_layer, options), options)

    @classmethod
    def from_addresses(
        cls,
        addresses: Iterable[str | bytes],
        options: TreeOptions | None = None,
    ) -> "MerkleTree":
        """
        Construct a Merkle tree from addresses.

        Raises:
            InvalidAddress: If any address is malformed
            EmptyInput: If addresses is empty
            UnpairableLayer: If a non-root layer is odd under REJECT
        """
        options = options or TreeOptions()
        return cls.from_leaves(
            (hash_leaf(address, options.algorithm) for address in addresses),
            options,
        )

    @staticmethod
    def _build_layers(
        leaf_layer: list[bytes],
        options: TreeOptions,
    ) -> tuple[tuple[bytes, ...], ...]:
        """Build layers bottom-up, one pass per level."""
        layers = [tuple(leaf_layer)]
        current_level = leaf_layer

        while len(current_level) > 1:
            if len(current_level) % 2 == 1 and options.odd_layer_policy == OddLayerPolicy.REJECT:
                raise UnpairableLayer(layer=len(layers) - 1, size=len(current_level))

            next_level = []
            for i in range(0, len(current_level) - 1, 2):
                next_level.append(
                    hash_pair(current_level[i], current_level[i + 1], options.algorithm)
                )

            if len(current_level) % 2 == 1:
                # Odd case: promote the last node
                next_level.append(current_level[-1])

            layers.append(tuple(next_level))
            current_level = next_level

        return tuple(layers)

    @property
    def options(self) -> TreeOptions:
        """Get the pinned tree parameters."""
        return self._options

    @property
    def algorithm(self) -> HashAlgorithm:
        """Get the hash algorithm."""
        return self._options.algorithm

    @property
    def root(self) -> bytes:
        """Get the root digest."""
        return self._layers[-1][0]

    @property
    def root_hex(self) -> str:
        """Get the root digest as 0x-prefixed hex."""
        return to_hex(self.root)

    @property
    def layers(self) -> tuple[tuple[bytes, ...], ...]:
        """Get all layers, leaves first."""
        return self._layers

    @property
    def leaves(self) -> tuple[bytes, ...]:
        """Get the leaf layer in tree order."""
        return self._layers[0]

    @property
    def leaf_count(self) -> int:
        """Get the number of leaves."""
        return len(self._layers[0])

    @property
    def depth(self) -> int:
        """Get the number of layers above the leaves."""
        return len(self._layers) - 1

    def __contains__(self, leaf: object) -> bool:
        return leaf in self._index

    def index_of(self, leaf: bytes) -> int:
        """
        Get the tree position of a leaf.

        Duplicate leaves resolve to their lowest position.

        Raises:
            LeafNotFound: If the leaf is not in the tree
        """
        try:
            return self._index[bytes(leaf)]
        except KeyError:
            raise LeafNotFound(f"Leaf {to_hex(bytes(leaf))} not found in tree") from None

    def get_leaf_hash(self, index: int) -> bytes:
        """
        Get a leaf digest by tree position.

        Raises:
            IndexError: If index out of bounds
        """
        if index < 0 or index >= self.leaf_count:
            raise IndexError(f"Leaf index {index} out of bounds")
        return self._layers[0][index]

    def get_proof_by_index(self, leaf_index: int) -> Proof:
        """
        Generate the sibling path for the leaf at a tree position.

        Raises:
            IndexError: If leaf_index out of bounds
        """
        if leaf_index < 0 or leaf_index >= self.leaf_count:
            raise IndexError(f"Leaf index {leaf_index} out of bounds")

        proof = []
        current_index = leaf_index

        for level in self._layers[:-1]:
            sibling_index = current_index ^ 1
            # A promoted node has no sibling at this level
            if sibling_index < len(level):
                proof.append(level[sibling_index])
            current_index //= 2

        return tuple(proof)

    def get_proof(self, leaf: bytes) -> Proof:
        """
        Generate the sibling path for a leaf digest.

        Raises:
            LeafNotFound: If the leaf is not in the tree
        """
        return self.get_proof_by_index(self.index_of(leaf))

    def to_dict(self) -> dict[str, Any]:
        """Serialize tree summary for display."""
        return {
            "root": self.root_hex,
            "algorithm": self.algorithm.value,
            "odd_layer_policy": self._options.odd_layer_policy.value,
            "sort_leaves": self._options.sort_leaves,
            "leaf_count": self.leaf_count,
            "depth": self.depth,
            "leaves": [to_hex(leaf) for leaf in self.leaves],
        }


def build(leaves: Iterable[bytes], options: TreeOptions | None = None) -> MerkleTree:
    """Build a tree from leaf digests. See MerkleTree.from_leaves."""
    return MerkleTree.from_leaves(leaves, options)


def prove(tree: MerkleTree, leaf: bytes) -> Proof:
    """Generate a proof for a leaf digest. See MerkleTree.get_proof."""
    return tree.get_proof(leaf)


def compute_root_from_proof(
    leaf: bytes,
    proof: Sequence[bytes],
    algorithm: HashAlgorithm = HashAlgorithm.KECCAK256,
) -> bytes:
    """
    Fold a proof into the root it implies.

    Args:
        leaf: Leaf digest
        proof: Sibling digests, leaf to root

    Returns:
        Computed root digest
    """
    current_hash = leaf
    for sibling in proof:
        current_hash = hash_pair(current_hash, sibling, algorithm)
    return current_hash


def verify(
    leaf: bytes,
    proof: Sequence[bytes],
    root: bytes,
    algorithm: HashAlgorithm = HashAlgorithm.KECCAK256,
) -> bool:
    """
    Verify a Merkle inclusion proof.

    Needs no tree: recomputes the root from the leaf and proof and compares
    it with the expected root. Malformed input of any kind yields False.

    Args:
        leaf: Leaf digest
        proof: Sibling digests, leaf to root
        root: Expected root digest
        algorithm: Hash function the tree was built with

    Returns:
        True if the proof reconstructs the root
    """
    if not _is_digest(leaf) or not _is_digest(root):
        return False
    if isinstance(proof, (bytes, str)):
        return False
    try:
        siblings = list(proof)
    except TypeError:
        return False
    if not all(_is_digest(sibling) for sibling in siblings):
        return False

    return compute_root_from_proof(bytes(leaf), [bytes(s) for s in siblings], algorithm) == bytes(root)


def _is_digest(value: object) -> bool:
    return isinstance(value, (bytes, bytearray)) and len(value) == DIGEST_SIZE
