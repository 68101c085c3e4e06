"""
Tests for innotool.io.download module.

Tests download functionality including:
- Basic downloads
- Redirects
- Content-Disposition headers
- Checksum validation
- Atomic writes
- Runtime installer cache
"""

from __future__ import annotations

import hashlib
from pathlib import Path

import pytest
import requests_mock

from innotool.exceptions import ConfigError, NetworkError
from innotool.io.download import download_file, ensure_runtime_installer
from innotool.policy import RuntimeSettings

pytestmark = pytest.mark.unit


def _sha256(data: bytes) -> str:
    """Helper to compute SHA-256 hash."""
    return hashlib.sha256(data).hexdigest()


def test_download_success(tmp_test_dir: Path) -> None:
    """Test basic successful download."""
    url = "https://example.com/file.bin"
    data = b"hello world"

    with requests_mock.Mocker() as m:
        m.get(url, content=data, headers={"Content-Length": str(len(data))})
        path, digest = download_file(url, tmp_test_dir)

    assert path == tmp_test_dir / "file.bin"
    assert path.read_bytes() == data
    assert digest == _sha256(data)


def test_follows_redirect_and_uses_final_url_name(tmp_test_dir: Path) -> None:
    """Test that redirects are followed and final URL name is used."""
    start = "https://example.com/start"
    final = "https://cdn.example.com/payload.exe"

    with requests_mock.Mocker() as m:
        m.get(start, status_code=302, headers={"Location": final})
        m.get(final, content=b"abc", headers={"Content-Length": "3"})
        path, _ = download_file(start, tmp_test_dir)

    assert path.name == "payload.exe"
    assert path.read_bytes() == b"abc"


def test_content_disposition_filename(tmp_test_dir: Path) -> None:
    """Test that Content-Disposition header overrides URL filename."""
    url = "https://example.com/dl"

    with requests_mock.Mocker() as m:
        m.get(
            url,
            content=b"abc",
            headers={"Content-Disposition": 'attachment; filename="thing.exe"'},
        )
        path, _ = download_file(url, tmp_test_dir)

    assert path.name == "thing.exe"


def test_explicit_filename_wins(tmp_test_dir: Path) -> None:
    """Test that the filename argument overrides every other source."""
    url = "https://example.com/dl"

    with requests_mock.Mocker() as m:
        m.get(
            url,
            content=b"abc",
            headers={"Content-Disposition": 'attachment; filename="thing.exe"'},
        )
        path, _ = download_file(url, tmp_test_dir, filename="chosen.exe")

    assert path.name == "chosen.exe"


def test_checksum_mismatch_raises_and_cleans_file(tmp_test_dir: Path) -> None:
    """Test that checksum mismatches raise error and clean up file."""
    url = "https://example.com/file.bin"

    with requests_mock.Mocker() as m:
        m.get(url, content=b"wrong")

        with pytest.raises(NetworkError, match="sha256 mismatch"):
            download_file(url, tmp_test_dir, expected_sha256="00" * 32)

    assert not (tmp_test_dir / "file.bin").exists()


def test_checksum_validation_success(tmp_test_dir: Path) -> None:
    """Test that correct checksum validation passes."""
    url = "https://example.com/file.bin"
    data = b"correct content"

    with requests_mock.Mocker() as m:
        m.get(url, content=data)
        path, digest = download_file(
            url, tmp_test_dir, expected_sha256=_sha256(data).upper()
        )

    assert path.exists()
    assert digest == _sha256(data)


def test_http_error_raises_network_error(tmp_test_dir: Path) -> None:
    """Test that a 404 is wrapped in NetworkError and leaves nothing behind."""
    url = "https://example.com/missing.exe"

    with requests_mock.Mocker() as m:
        m.get(url, status_code=404)

        with pytest.raises(NetworkError, match="download failed"):
            download_file(url, tmp_test_dir)

    assert list(tmp_test_dir.iterdir()) == []


def test_writes_atomically_no_part_leftovers(tmp_test_dir: Path) -> None:
    """Test that atomic writes don't leave .part files behind."""
    url = "https://example.com/file.bin"

    with requests_mock.Mocker() as m:
        m.get(url, content=b"x" * 10)
        path, _ = download_file(url, tmp_test_dir)

    assert list(tmp_test_dir.glob("*.part")) == []
    assert path.exists()


def test_creates_destination_folder(tmp_test_dir: Path) -> None:
    """Test that destination folder is created if it doesn't exist."""
    url = "https://example.com/file.bin"
    nested_dir = tmp_test_dir / "nested" / "path"

    with requests_mock.Mocker() as m:
        m.get(url, content=b"test")
        path, _ = download_file(url, nested_dir)

    assert path.parent == nested_dir


class TestEnsureRuntimeInstaller:
    """Tests for the runtime installer cache."""

    def test_cached_installer_reused(self, tmp_test_dir: Path):
        """Test no request is made when the installer is already cached."""
        runtime = RuntimeSettings(resource_dir=tmp_test_dir)
        name = runtime.installer(8).installer_name
        (tmp_test_dir / name).write_bytes(b"MZ")

        with requests_mock.Mocker() as m:
            path = ensure_runtime_installer(8, runtime)

            assert m.call_count == 0

        assert path == tmp_test_dir / name

    def test_downloads_under_installer_name(self, tmp_test_dir: Path):
        """Test a missing installer is fetched from the official URL."""
        runtime = RuntimeSettings(resource_dir=tmp_test_dir / "runtime")
        ref = runtime.installer(8)

        with requests_mock.Mocker() as m:
            m.get(ref.download_url, content=b"MZ payload")
            path = ensure_runtime_installer(8, runtime)

        assert path == tmp_test_dir / "runtime" / ref.installer_name
        assert path.read_bytes() == b"MZ payload"

    def test_download_url_override(self, tmp_test_dir: Path):
        """Test a configured download URL replaces the official one."""
        url = "https://mirror.example.com/runtime.exe"
        runtime = RuntimeSettings(download_url=url, resource_dir=tmp_test_dir)

        with requests_mock.Mocker() as m:
            m.get(url, content=b"MZ")
            path = ensure_runtime_installer(9, runtime)

        assert path.name == runtime.installer(9).installer_name

    def test_unknown_major_raises(self, tmp_test_dir: Path):
        """Test a major without a reference is a ConfigError."""
        runtime = RuntimeSettings(resource_dir=tmp_test_dir)

        with pytest.raises(ConfigError, match=".NET 5"):
            ensure_runtime_installer(5, runtime)
