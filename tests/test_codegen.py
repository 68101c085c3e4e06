"""
Tests for innotool.script.catalog and innotool.script.codegen modules.

Tests generated [Run] and [Code] content including:
- Catalog structure (marker, signature, balanced blocks)
- Generation per build level
- Idempotence
- Author-owned routines left alone
- Cleanup when the build level drops
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from innotool.policy import BuildLevel
from innotool.script import sections
from innotool.script.blocks import find_block_end
from innotool.script.catalog import (
    CODE_MODULES,
    is_marker,
    marker_line,
    modules_for,
)
from innotool.script.codegen import (
    remove_generated_modules,
    runtime_run_entry,
    sync_generated_code,
    update_script_file,
)
from innotool.script.document import ScriptDocument

pytestmark = pytest.mark.unit

INSTALLER_8 = "windowsdesktop-runtime-8.0.23-win-x64.exe"


def _count(doc: ScriptDocument, text: str) -> int:
    return sum(1 for line in doc if line.strip() == text)


class TestCatalog:
    """Tests for the code module catalog."""

    def test_every_module_has_marker_and_signature(self):
        """Test line 0 is the marker naming the module, line 1 the signature."""
        for module in CODE_MODULES:
            assert module.lines[0] == marker_line(module.name)
            assert is_marker(module.lines[0])
            assert module.name in module.signature

    def test_every_module_is_one_balanced_block(self):
        """Test each module's block closes on its last line."""
        for module in CODE_MODULES:
            doc = ScriptDocument(module.lines)
            assert find_block_end(doc, 0) == len(doc) - 1, module.name

    def test_modules_for_levels(self):
        """Test which modules each build level requires."""
        assert modules_for(BuildLevel.MINIMUM) == []
        included = [m.name for m in modules_for(BuildLevel.NET_INSTALL_INCLUDED)]
        download = [m.name for m in modules_for(BuildLevel.NET_INSTALL_DOWNLOAD)]

        assert "PrepareToInstall" not in included
        assert "NeedsDotNet" in included
        assert download[-1] == "PrepareToInstall"

    def test_helpers_declared_before_use(self):
        """Test catalog order puts callees first."""
        names = [m.name for m in CODE_MODULES]

        assert names.index("RunAndCaptureOutput") < names.index(
            "IsDotnetRuntimeInstalled"
        )
        assert names.index("IsDotnetRuntimeInstalled") < names.index("NeedsDotNet")
        assert names.index("NeedsDotNet") < names.index("PrepareToInstall")

    def test_is_marker(self):
        """Test marker recognition tolerates spacing and case."""
        assert is_marker("{ innotool:auto-generated Foo }")
        assert is_marker("  {INNOTOOL:AUTO-GENERATED Foo}")
        assert not is_marker("{ my own comment }")


class TestSyncGeneratedCode:
    """Tests for sync_generated_code."""

    def test_included_generates_run_step_and_modules(self, sample_script_lines):
        """Test NET_INSTALL_INCLUDED adds [Run], [Code] and four modules."""
        doc = ScriptDocument(sample_script_lines)

        sync_generated_code(doc, 8, BuildLevel.NET_INSTALL_INCLUDED)

        run_start = sections.find_section_start(doc, "Run")
        code_start = sections.find_section_start(doc, "Code")
        assert run_start is not None and code_start is not None
        assert run_start < code_start
        assert doc[run_start + 1] == runtime_run_entry(INSTALLER_8)
        assert sum(1 for line in doc if is_marker(line)) == 4
        assert _count(doc, "function NeedsDotNet: Boolean;") == 1
        assert any("8.0.23" in line for line in doc)
        assert not any("{RuntimeVersion}" in line for line in doc)

    def test_download_adds_prepare_to_install(self, sample_script_lines):
        """Test NET_INSTALL_DOWNLOAD adds the download routine with a resolved URL."""
        doc = ScriptDocument(sample_script_lines)

        sync_generated_code(doc, 8, BuildLevel.NET_INSTALL_DOWNLOAD)

        assert sum(1 for line in doc if is_marker(line)) == 5
        download_lines = [line for line in doc if "DownloadTemporaryFile" in line]
        assert len(download_lines) == 1
        assert INSTALLER_8 in download_lines[0]
        assert "https://builds.dotnet.microsoft.com/" in download_lines[0]

    def test_idempotent(self, sample_script_lines):
        """Test a second sync leaves the document unchanged."""
        doc = ScriptDocument(sample_script_lines)
        sync_generated_code(doc, 8, BuildLevel.NET_INSTALL_DOWNLOAD)
        first = doc.lines

        sync_generated_code(doc, 8, BuildLevel.NET_INSTALL_DOWNLOAD)

        assert doc.lines == first

    def test_existing_run_section_used(self):
        """Test the run step goes to the top of an existing [Run]."""
        doc = ScriptDocument(
            ["[Setup]", "[Run]", 'Filename: "{app}\\Sample.exe"', "[Code]"]
        )

        sync_generated_code(doc, 8, BuildLevel.NET_INSTALL_INCLUDED)

        assert doc[2] == runtime_run_entry(INSTALLER_8)
        assert doc[3] == 'Filename: "{app}\\Sample.exe"'
        assert _count(doc, "[Run]") == 1
        assert _count(doc, "[Code]") == 1

    def test_author_routine_respected(self):
        """Test an unmarked routine with a catalog signature is kept as written."""
        doc = ScriptDocument(
            [
                "[Code]",
                "function NeedsDotNet: Boolean;",
                "begin",
                "  Result := False;",
                "end;",
            ]
        )

        sync_generated_code(doc, 8, BuildLevel.NET_INSTALL_INCLUDED)

        assert _count(doc, "function NeedsDotNet: Boolean;") == 1
        assert "  Result := False;" in doc.lines
        assert not any(is_marker(line) and "NeedsDotNet" in line for line in doc)

        # The author routine also survives a drop to a lower build level.
        sync_generated_code(doc, 8, BuildLevel.MINIMUM)
        assert _count(doc, "function NeedsDotNet: Boolean;") == 1
        assert _count(doc, "[Code]") == 1

    def test_level_drop_cleans_up(self, sample_script_lines):
        """Test dropping to MINIMUM removes generated code and the empty [Code]."""
        doc = ScriptDocument(sample_script_lines)
        sync_generated_code(doc, 8, BuildLevel.NET_INSTALL_DOWNLOAD)

        sync_generated_code(doc, 8, BuildLevel.MINIMUM)

        assert not any(is_marker(line) for line in doc)
        assert not any("windowsdesktop-runtime-" in line for line in doc)
        assert sections.find_section_start(doc, "Code") is None
        assert doc.lines[: len(sample_script_lines)] == sample_script_lines

    def test_none_level_keeps_non_empty_code(self):
        """Test a [Code] section with author content is not removed."""
        doc = ScriptDocument(["[Code]", "procedure Mine;", "begin", "end;"])

        sync_generated_code(doc, 0, BuildLevel.NONE)

        assert doc.lines == ["[Code]", "procedure Mine;", "begin", "end;"]

    def test_unknown_major_warns(self, sample_script_lines):
        """Test an unknown major still generates, with empty runtime values."""
        logger = MagicMock()
        doc = ScriptDocument(sample_script_lines)

        sync_generated_code(doc, 5, BuildLevel.NET_INSTALL_INCLUDED, logger=logger)

        assert logger.warning.called
        assert _count(doc, "function NeedsDotNet: Boolean;") == 1

    def test_unknown_major_is_stable(self):
        """Test repeated syncs for an unknown major add no unnamed run steps."""
        doc = ScriptDocument(["[Setup]", "AppName=X", "[Files]", ""])

        sync_generated_code(doc, 11, BuildLevel.NET_INSTALL_INCLUDED)
        first = doc.lines
        sync_generated_code(doc, 11, BuildLevel.NET_INSTALL_INCLUDED)
        sync_generated_code(doc, 11, BuildLevel.NET_INSTALL_INCLUDED)

        assert doc.lines == first
        assert not any('{tmp}\\"' in line for line in doc)
        assert _count(doc, "function NeedsDotNet: Boolean;") == 1

    def test_unnamed_run_step_removed(self):
        """Test a run step left without an installer name is cleaned up."""
        doc = ScriptDocument(
            ["[Setup]", "AppName=X", "[Run]", runtime_run_entry(""), "[Files]", ""]
        )

        sync_generated_code(doc, 8, BuildLevel.NET_INSTALL_INCLUDED)

        assert not any('{tmp}\\"' in line for line in doc)
        assert _count(doc, runtime_run_entry(INSTALLER_8)) == 1


class TestRemoveGeneratedModules:
    """Tests for remove_generated_modules."""

    def test_removes_every_copy(self):
        """Test duplicated generated modules are all removed."""
        module = CODE_MODULES[1]
        doc = ScriptDocument(["[Code]", *module.lines, "", *module.lines, ""])

        removed = remove_generated_modules(doc)

        assert removed == 2
        assert doc.lines == ["[Code]"]

    def test_unterminated_block_left_alone(self):
        """Test a marker whose block never closes is reported and skipped."""
        logger = MagicMock()
        module = CODE_MODULES[1]
        lines = ["[Code]", module.lines[0], module.lines[1], "begin", "  X;"]
        doc = ScriptDocument(lines)

        removed = remove_generated_modules(doc, logger=logger)

        assert removed == 0
        assert doc.lines == lines
        assert logger.warning.called


class TestUpdateScriptFile:
    """Tests for update_script_file."""

    def test_updates_files_and_code(self, sample_script: Path, publish_folder: Path):
        """Test [Files] and generated code are written in one save."""
        changed = update_script_file(
            sample_script, 8, BuildLevel.NET_INSTALL_DOWNLOAD, publish_folder
        )

        text = sample_script.read_text(encoding="utf-8")
        assert changed is True
        assert "Sample.exe" in text
        assert "old.dll" not in text
        assert "function PrepareToInstall" in text
        assert b"\r\n" in sample_script.read_bytes()

    def test_second_run_reports_no_change(
        self, sample_script: Path, publish_folder: Path
    ):
        """Test an unchanged script is not rewritten."""
        update_script_file(sample_script, 8, BuildLevel.MINIMUM, publish_folder)
        before = sample_script.read_bytes()

        changed = update_script_file(
            sample_script, 8, BuildLevel.MINIMUM, publish_folder
        )

        assert changed is False
        assert sample_script.read_bytes() == before

    def test_included_copies_runtime_payload(
        self, sample_script: Path, publish_folder: Path, tmp_test_dir: Path
    ):
        """Test the runtime installer is copied in and listed for {tmp}."""
        cached = tmp_test_dir / "cache" / INSTALLER_8
        cached.parent.mkdir()
        cached.write_bytes(b"MZ")

        with patch(
            "innotool.io.download.ensure_runtime_installer", return_value=cached
        ):
            update_script_file(
                sample_script, 8, BuildLevel.NET_INSTALL_INCLUDED, publish_folder
            )

        text = sample_script.read_text(encoding="utf-8")
        assert (publish_folder / INSTALLER_8).exists()
        assert f'{INSTALLER_8}"; DestDir: "{{tmp}}"; Flags: deleteafterinstall' in text

    def test_missing_script_raises(self, tmp_test_dir: Path, publish_folder: Path):
        """Test a missing script is a ConfigError."""
        from innotool.exceptions import ConfigError

        with pytest.raises(ConfigError, match="not found"):
            update_script_file(
                tmp_test_dir / "missing.iss", 8, BuildLevel.MINIMUM, publish_folder
            )
