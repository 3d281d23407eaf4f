"""
Forge Allowlist - Command Line Interface

Usage:
    forge-allowlist generate-merkle-root <file> [--json]
    forge-allowlist generate-merkle-proof <file> <wallet> [--json]
    forge-allowlist verify-merkle-proof <wallet> <root> [proof ...]

Allowlist files are JSON arrays of addresses, or text with addresses
separated by newlines, commas or spaces. Tree options default to the FORGE settings
(HASH_ALGORITHM, ODD_LAYER_POLICY, SORT_LEAVES, DEDUPLICATE_ADDRESSES).
"""

import argparse
import json
import sys
from collections.abc import Sequence

import structlog
from eth_utils import to_checksum_address

from forge_allowlist.core.config import settings
from forge_allowlist.core.logging import setup_logging
from forge_allowlist.crypto.errors import LeafNotFound, MerkleError
from forge_allowlist.crypto.hashing import HashAlgorithm
from forge_allowlist.crypto.merkle import OddLayerPolicy, TreeOptions
from forge_allowlist.services.allowlist_service import (
    AllowlistService,
    AllowlistServiceError,
    load_addresses,
)

logger = structlog.get_logger(__name__)

# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _service_from_args(ns: argparse.Namespace) -> AllowlistService:
    options = TreeOptions(
        algorithm=HashAlgorithm(ns.algorithm),
        odd_layer_policy=OddLayerPolicy(ns.odd_layer_policy),
        sort_leaves=ns.sort_leaves,
    )
    return AllowlistService(options=options, deduplicate=ns.dedupe)


def _split_proof(values: Sequence[str]) -> list[str]:
    """Accept proof elements as separate arguments or comma separated."""
    return [part.strip() for value in values for part in value.split(",") if part.strip()]


def cmd_generate_root(ns: argparse.Namespace) -> int:
    service = _service_from_args(ns)
    addresses = load_addresses(ns.file)
    tree = service.build_tree(addresses)

    if ns.json:
        print(json.dumps(tree.to_dict(), indent=2))
    else:
        print(f"Merkle root: {tree.root_hex}")
    return EXIT_SUCCESS


def cmd_generate_proof(ns: argparse.Namespace) -> int:
    service = _service_from_args(ns)
    addresses = load_addresses(ns.file)
    tree = service.build_tree(addresses)

    try:
        proof = service.prove_address(tree, ns.wallet)
    except LeafNotFound:
        print("Wallet not found", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    data = proof.to_dict()
    if ns.json:
        print(json.dumps(data, indent=2))
        return EXIT_SUCCESS

    print(f"verification: {str(proof.verified).lower()}")
    print(f"Wallet: {to_checksum_address(ns.wallet)}")
    print(f"Merkle root: {data['root']}")
    print(f"Merkle leaf: {data['leaf']}")
    print("Merkle proof:")
    print(json.dumps(data["proof"], indent=2))
    return EXIT_SUCCESS


def cmd_verify_proof(ns: argparse.Namespace) -> int:
    service = _service_from_args(ns)
    proof = _split_proof(ns.proof)

    if ns.leaf:
        ok = service.verify_proof(proof=proof, root=ns.root, leaf=ns.wallet)
    else:
        ok = service.verify_proof(proof=proof, root=ns.root, address=ns.wallet)

    print("valid" if ok else "invalid")
    return EXIT_SUCCESS if ok else EXIT_VERIFICATION_FAILED


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="forge-allowlist",
        description="Merkle allowlist roots and proofs for minting groups",
    )
    parser.add_argument(
        "--algorithm",
        choices=[a.value for a in HashAlgorithm],
        default=settings.HASH_ALGORITHM.value,
        help="Hash function for leaves and nodes",
    )
    parser.add_argument(
        "--odd-layer-policy",
        choices=[p.value for p in OddLayerPolicy],
        default=settings.ODD_LAYER_POLICY.value,
        help="Reject odd layers, or promote the lone node unchanged",
    )
    parser.add_argument(
        "--no-sort-leaves",
        dest="sort_leaves",
        action="store_false",
        default=settings.SORT_LEAVES,
        help="Keep leaves in input order instead of byte order",
    )
    parser.add_argument(
        "--dedupe",
        action="store_true",
        default=settings.DEDUPLICATE_ADDRESSES,
        help="Drop repeated addresses before building",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Log level",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    p_root = sub.add_parser("generate-merkle-root", help="Generate Merkle root from wallet addresses")
    p_root.add_argument("file", help="Path to allowlist file")
    p_root.add_argument("--json", action="store_true", help="Print tree summary as JSON")
    p_root.set_defaults(func=cmd_generate_root)

    p_proof = sub.add_parser("generate-merkle-proof", help="Generate Merkle proof for a wallet address")
    p_proof.add_argument("file", help="Path to allowlist file")
    p_proof.add_argument("wallet", help="Wallet address to generate proof for")
    p_proof.add_argument("--json", action="store_true", help="Print proof as JSON")
    p_proof.set_defaults(func=cmd_generate_proof)

    p_verify = sub.add_parser("verify-merkle-proof", help="Verify a Merkle proof against a root")
    p_verify.add_argument("wallet", help="Wallet address (or leaf digest with --leaf)")
    p_verify.add_argument("root", help="Published Merkle root")
    p_verify.add_argument("proof", nargs="*", help="Proof digests, separate or comma separated")
    p_verify.add_argument("--leaf", action="store_true", help="Treat wallet argument as a leaf digest")
    p_verify.set_defaults(func=cmd_verify_proof)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    ns = parser.parse_args(argv)
    setup_logging(ns.log_level)

    try:
        return ns.func(ns)
    except (AllowlistServiceError, MerkleError) as e:
        logger.error("Command failed", command=ns.command, error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
