"""
Tests for the allowlist command line interface.
"""

import json
from pathlib import Path

import pytest

from forge_allowlist.cli import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    main,
)
from forge_allowlist.crypto.merkle import MerkleTree, TreeOptions


@pytest.fixture
def wallets_file(tmp_path: Path, four_addresses: list[str]) -> Path:
    path = tmp_path / "wallets.json"
    path.write_text(json.dumps(four_addresses))
    return path


def _base_args() -> list[str]:
    # Pin options so tests do not depend on the environment
    return ["--algorithm", "keccak256", "--odd-layer-policy", "reject"]


class TestGenerateRoot:
    """Tests for generate-merkle-root."""

    def test_prints_root(
        self,
        wallets_file: Path,
        four_addresses: list[str],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test root output matches the engine."""
        code = main(_base_args() + ["generate-merkle-root", str(wallets_file)])

        assert code == EXIT_SUCCESS
        expected = MerkleTree.from_addresses(four_addresses, TreeOptions()).root_hex
        assert capsys.readouterr().out.strip() == f"Merkle root: {expected}"

    def test_json_output(self, wallets_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test JSON tree summary."""
        code = main(_base_args() + ["generate-merkle-root", str(wallets_file), "--json"])

        assert code == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["leaf_count"] == 4
        assert data["algorithm"] == "keccak256"

    def test_unpairable(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test odd lists fail with a runtime error."""
        path = tmp_path / "wallets.txt"
        path.write_text("\n".join("0x" + f"{b:02x}" * 20 for b in (1, 2, 3)))

        code = main(_base_args() + ["generate-merkle-root", str(path)])

        assert code == EXIT_RUNTIME_ERROR
        assert "cannot be paired" in capsys.readouterr().err

    def test_promote_policy(self, tmp_path: Path) -> None:
        """Test odd lists build when promotion is requested."""
        path = tmp_path / "wallets.txt"
        path.write_text("\n".join("0x" + f"{b:02x}" * 20 for b in (1, 2, 3)))

        code = main(["--odd-layer-policy", "promote", "generate-merkle-root", str(path)])

        assert code == EXIT_SUCCESS

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test missing allowlist file."""
        code = main(_base_args() + ["generate-merkle-root", str(tmp_path / "nope.json")])

        assert code == EXIT_RUNTIME_ERROR


class TestGenerateProof:
    """Tests for generate-merkle-proof."""

    def test_prints_proof(self, wallets_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test proof output for a member."""
        code = main(_base_args() + ["generate-merkle-proof", str(wallets_file), "0x" + "22" * 20])

        assert code == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "verification: true" in out
        assert "Merkle root: 0x" in out
        assert "Merkle leaf: 0x" in out

    def test_json_output(self, wallets_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test JSON proof output."""
        code = main(_base_args() + ["generate-merkle-proof", str(wallets_file), "0x" + "33" * 20, "--json"])

        assert code == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert len(data["proof"]) == 2
        assert data["verified"] is True

    def test_wallet_not_found(
        self,
        wallets_file: Path,
        outsider: str,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test non-member wallet."""
        code = main(_base_args() + ["generate-merkle-proof", str(wallets_file), outsider])

        assert code == EXIT_RUNTIME_ERROR
        assert "Wallet not found" in capsys.readouterr().err


class TestVerifyProof:
    """Tests for verify-merkle-proof."""

    def _proof(self, wallets_file: Path, wallet: str, capsys: pytest.CaptureFixture[str]) -> dict:
        main(_base_args() + ["generate-merkle-proof", str(wallets_file), wallet, "--json"])
        return json.loads(capsys.readouterr().out)

    def test_valid(self, wallets_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a generated proof verifies."""
        wallet = "0x" + "44" * 20
        data = self._proof(wallets_file, wallet, capsys)

        code = main(_base_args() + ["verify-merkle-proof", wallet, data["root"], *data["proof"]])

        assert code == EXIT_SUCCESS
        assert capsys.readouterr().out.strip() == "valid"

    def test_comma_separated_proof(self, wallets_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test proof elements given as one comma separated argument."""
        wallet = "0x" + "11" * 20
        data = self._proof(wallets_file, wallet, capsys)

        code = main(_base_args() + ["verify-merkle-proof", wallet, data["root"], ",".join(data["proof"])])

        assert code == EXIT_SUCCESS

    def test_leaf_flag(self, wallets_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test verification by leaf digest."""
        data = self._proof(wallets_file, "0x" + "11" * 20, capsys)

        code = main(_base_args() + ["verify-merkle-proof", "--leaf", data["leaf"], data["root"], *data["proof"]])

        assert code == EXIT_SUCCESS

    def test_invalid(
        self,
        wallets_file: Path,
        outsider: str,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Test a non-member fails verification."""
        data = self._proof(wallets_file, "0x" + "11" * 20, capsys)

        code = main(_base_args() + ["verify-merkle-proof", outsider, data["root"], *data["proof"]])

        assert code == EXIT_VERIFICATION_FAILED
        assert capsys.readouterr().out.strip() == "invalid"


class TestLogLevel:
    """Tests for the --log-level option."""

    def test_case_insensitive(self, wallets_file: Path) -> None:
        """Test lowercase level names are accepted."""
        code = main(["--log-level", "debug"] + _base_args() + ["generate-merkle-root", str(wallets_file)])

        assert code == EXIT_SUCCESS

    def test_unknown_level_rejected(self, wallets_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test unknown level names are a usage error, not a crash."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--log-level", "verbose"] + _base_args() + ["generate-merkle-root", str(wallets_file)])

        assert exc_info.value.code == 2
        assert "invalid choice" in capsys.readouterr().err
