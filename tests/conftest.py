"""
Pytest configuration and shared fixtures for allowlist tests.
"""

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from forge_allowlist.crypto.merkle import TreeOptions
from forge_allowlist.services.allowlist_service import AllowlistService


@pytest.fixture
def four_addresses() -> list[str]:
    """The 0x1111/0x2222/0x3333/0x4444 allowlist."""
    return ["0x" + "11" * 20, "0x" + "22" * 20, "0x" + "33" * 20, "0x" + "44" * 20]


@pytest.fixture
def outsider() -> str:
    """Address not present in four_addresses."""
    return "0x" + "55" * 20


@pytest.fixture
def allowlist_service() -> AllowlistService:
    """Create an allowlist service with default options."""
    return AllowlistService(options=TreeOptions())


@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """Create an API test client with the lifespan running."""
    from forge_allowlist.main import create_application

    with TestClient(create_application()) as test_client:
        yield test_client
