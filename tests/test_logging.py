"""Tests for pr_release.logging (ReleaseLogging, level/format from config)."""

import logging

from pr_release.config import LoggingConfig
from pr_release.logging import (
    DEFAULT_FORMAT,
    DEFAULT_LEVEL,
    LEVELS,
    ReleaseLogging,
    _resolve_level,
)


class TestConstants:
    """Module constants and level mapping."""

    def test_levels_has_four_standard_levels(self) -> None:
        """LEVELS maps DEBUG, INFO, WARNING, ERROR to logging constants."""
        assert LEVELS == {
            "DEBUG": logging.DEBUG,
            "INFO": logging.INFO,
            "WARNING": logging.WARNING,
            "ERROR": logging.ERROR,
        }

    def test_default_level_is_info(self) -> None:
        assert DEFAULT_LEVEL == "INFO"


class TestResolveLevel:
    """_resolve_level maps level names to logging constants."""

    def test_case_and_whitespace(self) -> None:
        """Level is uppercased and stripped before lookup."""
        assert _resolve_level("debug") == logging.DEBUG
        assert _resolve_level("  WARNING\t") == logging.WARNING

    def test_unknown_level_returns_info(self) -> None:
        """Unknown level name falls back to INFO."""
        assert _resolve_level("TRACE") == logging.INFO


class TestReleaseLogging:
    """ReleaseLogging applies config to the root logger."""

    def test_setup_applies_level(self) -> None:
        """setup() sets the root level from config."""
        ReleaseLogging(LoggingConfig(level="ERROR", format=DEFAULT_FORMAT)).setup()
        assert logging.getLogger().level == logging.ERROR

    def test_verbose_forces_debug(self) -> None:
        """--verbose overrides the configured level."""
        rl = ReleaseLogging(LoggingConfig(level="ERROR"), verbose=True)
        assert rl.level == logging.DEBUG

    def test_get_logger(self) -> None:
        """get_logger returns the named logger."""
        rl = ReleaseLogging(LoggingConfig())
        assert rl.get_logger("pr_release.test").name == "pr_release.test"
