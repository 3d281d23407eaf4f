"""
Forge Allowlist API - Allowlist Endpoints

Stateless endpoints over the Merkle engine:
- POST /root: Compute the Merkle root of an address list
- POST /proof: Generate an inclusion proof for one address
- POST /verify: Verify an inclusion proof against a root
"""

import structlog
from fastapi import APIRouter, HTTPException, Request, status
from pydantic import BaseModel, Field, model_validator
from starlette.concurrency import run_in_threadpool

from forge_allowlist.core.config import settings
from forge_allowlist.crypto.errors import LeafNotFound, MerkleError
from forge_allowlist.crypto.hashing import to_hex
from forge_allowlist.services.allowlist_service import AllowlistService

logger = structlog.get_logger(__name__)
router = APIRouter()


# Request/Response Models
class RootRequest(BaseModel):
    """Request to compute an allowlist root."""

    addresses: list[str] = Field(
        ...,
        description="0x-prefixed 20-byte addresses",
    )


class RootResponse(BaseModel):
    """Allowlist root."""

    root: str
    leaf_count: int
    depth: int
    algorithm: str


class ProofRequest(BaseModel):
    """Request to prove membership of an address."""

    addresses: list[str] = Field(
        ...,
        description="0x-prefixed 20-byte addresses",
    )
    address: str = Field(
        ...,
        description="Address to generate the proof for",
    )


class ProofResponse(BaseModel):
    """Inclusion proof for an address."""

    address: str
    leaf: str
    leaf_index: int
    proof: list[str]
    root: str
    tree_size: int
    algorithm: str
    verified: bool


class VerifyRequest(BaseModel):
    """Request to verify an inclusion proof."""

    address: str | None = Field(
        default=None,
        description="Address whose leaf is verified",
    )
    leaf: str | None = Field(
        default=None,
        description="Leaf digest (used when address is not given)",
    )
    proof: list[str] = Field(
        default_factory=list,
        description="Sibling digests, leaf to root",
    )
    root: str = Field(
        ...,
        description="Published Merkle root",
    )

    @model_validator(mode="after")
    def _require_leaf_source(self) -> "VerifyRequest":
        if self.address is None and self.leaf is None:
            raise ValueError("Either address or leaf is required")
        return self


class VerifyResponse(BaseModel):
    """Verification result."""

    verified: bool
    leaf: str | None = None
    root: str
    message: str


def _get_service(req: Request) -> AllowlistService:
    service = getattr(req.app.state, "allowlist_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Allowlist service not initialized",
        )
    return service


def _check_size(addresses: list[str]) -> None:
    if len(addresses) > settings.MAX_ALLOWLIST_SIZE:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Allowlist exceeds {settings.MAX_ALLOWLIST_SIZE} addresses",
        )


def _merkle_error_to_http(e: MerkleError) -> HTTPException:
    logger.warning("Allowlist request rejected", reason=type(e).__name__, error=str(e))
    if isinstance(e, LeafNotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{type(e).__name__}: {e}")


# Endpoints
@router.post(
    "/root",
    response_model=RootResponse,
    summary="Compute allowlist root",
    responses={
        400: {"description": "Invalid address, empty list or unpairable layer"},
        413: {"description": "Allowlist too large"},
    },
)
async def create_root(request: RootRequest, req: Request) -> RootResponse:
    """Build a Merkle tree over the addresses and return its root."""
    service = _get_service(req)
    _check_size(request.addresses)

    try:
        tree = await run_in_threadpool(service.build_tree, request.addresses)
    except MerkleError as e:
        raise _merkle_error_to_http(e) from e

    return RootResponse(
        root=tree.root_hex,
        leaf_count=tree.leaf_count,
        depth=tree.depth,
        algorithm=tree.algorithm.value,
    )


@router.post(
    "/proof",
    response_model=ProofResponse,
    summary="Generate inclusion proof",
    responses={
        400: {"description": "Invalid address, empty list or unpairable layer"},
        404: {"description": "Address not in allowlist"},
        413: {"description": "Allowlist too large"},
    },
)
async def create_proof(request: ProofRequest, req: Request) -> ProofResponse:
    """
    Generate an inclusion proof.

    Steps:
    1. Build a Merkle tree over the addresses
    2. Locate the address leaf
    3. Collect sibling digests and self-verify
    """
    service = _get_service(req)
    _check_size(request.addresses)

    try:
        proof = await run_in_threadpool(
            service.generate_proof,
            request.addresses,
            request.address,
        )
    except MerkleError as e:
        raise _merkle_error_to_http(e) from e

    return ProofResponse(**proof.to_dict())


@router.post(
    "/verify",
    response_model=VerifyResponse,
    summary="Verify inclusion proof",
    description="Verify that a leaf or address is committed under a root.",
)
async def verify_inclusion(request: VerifyRequest, req: Request) -> VerifyResponse:
    """Verify a proof. Malformed input yields verified=false, not an error."""
    service = _get_service(req)

    verified = service.verify_proof(
        proof=request.proof,
        root=request.root,
        address=request.address,
        leaf=request.leaf,
    )

    try:
        leaf = to_hex(service.resolve_leaf(address=request.address, leaf=request.leaf))
    except MerkleError:
        leaf = None

    return VerifyResponse(
        verified=verified,
        leaf=leaf,
        root=request.root,
        message="Verification successful" if verified else "Merkle proof verification failed",
    )
