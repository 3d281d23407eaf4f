"""
Tests for settings loading.
"""

import pytest
from pydantic import ValidationError

from forge_allowlist.core.config import Settings
from forge_allowlist.crypto.hashing import HashAlgorithm
from forge_allowlist.crypto.merkle import OddLayerPolicy, TreeOptions


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default tree options are strict keccak256."""
        for name in ("HASH_ALGORITHM", "ODD_LAYER_POLICY", "SORT_LEAVES"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.tree_options == TreeOptions()

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test tree options are read from the environment."""
        monkeypatch.setenv("HASH_ALGORITHM", "sha256")
        monkeypatch.setenv("ODD_LAYER_POLICY", "promote")
        monkeypatch.setenv("SORT_LEAVES", "false")

        options = Settings(_env_file=None).tree_options

        assert options.algorithm == HashAlgorithm.SHA256
        assert options.odd_layer_policy == OddLayerPolicy.PROMOTE
        assert options.sort_leaves is False

    def test_invalid_algorithm(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test unknown hash algorithms are rejected."""
        monkeypatch.setenv("HASH_ALGORITHM", "md5")

        with pytest.raises(ValidationError):
            Settings(_env_file=None)
