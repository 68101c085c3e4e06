"""
Tests for innotool.script.variables module.

Tests placeholder resolution including:
- Known runtime majors
- Download URL override
- Unknown majors (warning vs. strict)
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from innotool.exceptions import ConfigError
from innotool.policy import RuntimeSettings
from innotool.script.variables import VariableResolver, resolve_variables

pytestmark = pytest.mark.unit


class TestVariableResolver:
    """Tests for VariableResolver."""

    def test_resolves_all_placeholders(self):
        """Test version, name and URL are filled in for a known major."""
        line = "'{RuntimeVersion}' '{RuntimeInstallerName}' '{RuntimeDownloadUrl}'"

        result = resolve_variables(8, line)

        assert "8.0.23" in result
        assert "windowsdesktop-runtime-8.0.23-win-x64.exe" in result
        assert (
            "https://builds.dotnet.microsoft.com/dotnet/WindowsDesktop/8.0.23/"
            "windowsdesktop-runtime-8.0.23-win-x64.exe"
        ) in result
        assert "{Runtime" not in result

    def test_line_without_placeholders_unchanged(self):
        """Test ordinary lines pass through untouched."""
        line = "Result := ExpandConstant('{tmp}');"

        assert resolve_variables(8, line) == line

    def test_download_url_override(self):
        """Test a configured URL replaces the official one."""
        runtime = RuntimeSettings(download_url="https://mirror.example.com/rt.exe")

        result = VariableResolver(runtime).resolve(8, "{RuntimeDownloadUrl}")

        assert result == "https://mirror.example.com/rt.exe"

    def test_unknown_major_resolves_empty_and_warns_once(self):
        """Test unknown majors give empty text and a single warning."""
        logger = MagicMock()
        resolver = VariableResolver(logger=logger)

        first = resolver.resolve(5, "x{RuntimeVersion}y")
        second = resolver.resolve(5, "{RuntimeInstallerName}")

        assert first == "xy"
        assert second == ""
        assert logger.warning.call_count == 1

    def test_unknown_major_strict_raises(self):
        """Test strict mode turns the unknown major into ConfigError."""
        resolver = VariableResolver(strict=True)

        with pytest.raises(ConfigError, match=".NET 5"):
            resolver.resolve(5, "{RuntimeVersion}")

    def test_placeholders_listed(self):
        """Test the enumerated placeholder tokens."""
        assert VariableResolver().placeholders == [
            "{RuntimeDownloadUrl}",
            "{RuntimeVersion}",
            "{RuntimeInstallerName}",
        ]

    def test_resolve_lines(self):
        """Test list form resolves each line."""
        lines = VariableResolver().resolve_lines(10, ["{RuntimeVersion}", "plain"])

        assert lines == ["10.0.2", "plain"]
