"""
Pytest configuration and shared fixtures for innotool tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from innotool.logging import SilentLogger, set_global_logger

SAMPLE_SCRIPT = [
    "#define MyAppName \"Sample\"",
    "#define MyAppVersion \"1.0.0\"",
    "",
    "[Setup]",
    "AppName={#MyAppName}",
    "AppVersion={#MyAppVersion}",
    "SignedUninstaller=yes",
    "",
    "[Files]",
    'Source: "{#SourcePath}\\old.dll"; DestDir: "{app}"; Flags: ignoreversion',
    "",
    "[Icons]",
    'Name: "{group}\\Sample"; Filename: "{app}\\Sample.exe"',
]


@pytest.fixture(autouse=True)
def silent_global_logger():
    """Reset the global logger so one test's CLI setup cannot leak output."""
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def sample_script_lines() -> list[str]:
    """Lines of a small Inno Setup script with [Setup], [Files] and [Icons]."""
    return list(SAMPLE_SCRIPT)


@pytest.fixture
def sample_script(tmp_test_dir: Path, sample_script_lines: list[str]) -> Path:
    """Write the sample script with CRLF line endings and return its path."""
    path = tmp_test_dir / "Setup" / "Sample.iss"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes("\r\n".join(sample_script_lines).encode("utf-8"))
    return path


@pytest.fixture
def publish_folder(tmp_test_dir: Path) -> Path:
    """Publish folder with packaged and ignored files."""
    folder = tmp_test_dir / "publish"
    folder.mkdir()
    for name in ("Sample.exe", "Sample.dll", "appsettings.json", "Sample.pdb"):
        (folder / name).write_text("x")
    (folder / "runtimes").mkdir()
    return folder


@pytest.fixture
def sample_settings_data() -> dict[str, Any]:
    """
    Provide sample settings data.

    Returns a root action with shared values and two child actions.
    """
    return {
        "working_path": "C:/Source/Sample",
        "cert_filename": "certs/signing.pfx",
        "cert_password": "secret",
        "options": ["SetVersion:false"],
        "actions": [
            {
                "name": "Stamp version",
                "action_type": "set_version",
                "csharp_project_filename": "Sample/Sample.csproj",
                "inno_script_filename": "Setup/Sample.iss",
            },
            {
                "name": "Publish",
                "action_type": "compile_and_publish",
                "project_build_level": "NETInstallIncluded",
                "net_major_version": 8,
                "csharp_project_filename": "Sample/Sample.csproj",
                "exe_filename": "Sample/bin/publish/Sample.exe",
                "setup_filename": "Setup/Output/SampleSetup.exe",
                "inno_script_filename": "Setup/Sample.iss",
            },
        ],
    }


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("build.yaml", {"key": "value"})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create
