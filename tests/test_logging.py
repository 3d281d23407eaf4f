"""
Tests for logging configuration.
"""

import json
import logging
from collections.abc import Generator

import pytest
import structlog

from forge_allowlist.core.logging import resolve_level, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger() -> Generator[None, None, None]:
    """Put the root logger back the way pytest left it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


class TestResolveLevel:
    """Tests for level name resolution."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            (" Warning ", logging.WARNING),
            (logging.ERROR, logging.ERROR),
        ],
    )
    def test_known_levels(self, name: str | int, expected: int) -> None:
        """Test names resolve in any case."""
        assert resolve_level(name) == expected

    def test_unknown_level(self) -> None:
        """Test unknown names raise instead of failing on attribute lookup."""
        with pytest.raises(ValueError, match="Unknown log level"):
            resolve_level("verbose")


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_json_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test JSON events go to stderr with logger name and level."""
        setup_logging("INFO", json_output=True)
        structlog.get_logger("forge_allowlist.test").info("Merkle tree built", leaf_count=4)

        captured = capsys.readouterr()
        assert captured.out == ""
        event = json.loads(captured.err.strip().splitlines()[-1])
        assert event["event"] == "Merkle tree built"
        assert event["level"] == "info"
        assert event["logger"] == "forge_allowlist.test"
        assert event["leaf_count"] == 4

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test events below the configured level are dropped."""
        setup_logging("error", json_output=True)
        structlog.get_logger("forge_allowlist.test").warning("Allowlist request rejected")

        assert "Allowlist request rejected" not in capsys.readouterr().err
        assert logging.getLogger().level == logging.ERROR

    def test_repeat_calls_replace_handler(self) -> None:
        """Test configuring twice leaves a single root handler."""
        setup_logging("INFO", json_output=False)
        setup_logging("DEBUG", json_output=False)

        assert len(logging.getLogger().handlers) == 1
        assert logging.getLogger().level == logging.DEBUG
