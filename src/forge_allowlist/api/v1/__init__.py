"""
Forge Allowlist API v1

Endpoints:
- POST /allowlist/root - Compute Merkle root of an address list
- POST /allowlist/proof - Generate inclusion proof for an address
- POST /allowlist/verify - Verify inclusion proof against a root
"""

from fastapi import APIRouter

from forge_allowlist.api.v1.endpoints import allowlist

router = APIRouter()
router.include_router(allowlist.router, prefix="/allowlist", tags=["Allowlist"])
