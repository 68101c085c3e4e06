"""
Tests for innotool.logging module.
"""

from __future__ import annotations

import io

import pytest

from innotool.logging import (
    DefaultLogger,
    SilentLogger,
    get_global_logger,
    get_logger,
    set_global_logger,
)

pytestmark = pytest.mark.unit


class TestDefaultLogger:
    """Tests for console output levels."""

    def test_quiet_by_default(self, capsys):
        """Test only steps are shown without -v or -d."""
        logger = DefaultLogger()

        logger.step(2, 15, "Restoring...")
        logger.verbose("DOTNET", "dotnet restore")
        logger.debug("TOOL", "output line")

        assert capsys.readouterr().out == "[2/15] Restoring...\n"

    def test_verbose(self, capsys):
        """Test -v shows verbose lines but not debug lines."""
        logger = DefaultLogger(verbose=True)

        logger.verbose("FILES", "File added: App.exe")
        logger.debug("TOOL", "hidden")

        assert capsys.readouterr().out == "[FILES] File added: App.exe\n"

    def test_debug_implies_verbose(self, capsys):
        """Test -d shows both verbose and debug lines."""
        logger = DefaultLogger(debug=True)

        logger.verbose("BUILD", "a")
        logger.debug("TOOL", "b")

        assert capsys.readouterr().out == "[BUILD] a\n[TOOL] b\n"

    def test_warnings_and_errors_to_stderr(self, capsys):
        """Test problems are always shown, on stderr."""
        logger = DefaultLogger()

        logger.warning("CODE", "No runtime reference for .NET 5")
        logger.error("SIGN", "sign failed")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == (
            "[CODE] WARNING: No runtime reference for .NET 5\n"
            "[SIGN] ERROR: sign failed\n"
        )

    def test_custom_error_stream(self):
        """Test warnings can be sent to a given stream."""
        stream = io.StringIO()

        DefaultLogger(err=stream).warning("CONFIG", "unknown key 'x' ignored")

        assert stream.getvalue() == "[CONFIG] WARNING: unknown key 'x' ignored\n"


class TestGlobalLogger:
    """Tests for the process-wide logger."""

    def test_set_and_get(self):
        """Test set_global_logger replaces the instance."""
        logger = get_logger(verbose=True)

        set_global_logger(logger)

        assert get_global_logger() is logger

    def test_silent_logger_prints_nothing(self, capsys):
        """Test SilentLogger discards every level."""
        logger = SilentLogger()

        logger.step(1, 1, "x")
        logger.verbose("A", "x")
        logger.debug("A", "x")
        logger.warning("A", "x")
        logger.error("A", "x")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert captured.err == ""
