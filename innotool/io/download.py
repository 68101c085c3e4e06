"""
Runtime installer download for innotool.

Setups built at NET_INSTALL_INCLUDED ship the .NET Desktop Runtime
installer inside the setup, so the installer has to sit in the publish
folder before [Files] is rebuilt. Installers are cached in the runtime
resource directory and fetched from the official download location (or a
configured mirror) the first time a major version is packaged.

Downloads go through a requests.Session that retries 429 and 5xx responses
with exponential backoff (urllib3 Retry). The body is streamed to
<name>.part, hashed on the way, and renamed into place only when complete,
so a broken transfer never leaves a truncated installer in the cache.

Example:
    ```python
    from innotool.io import ensure_runtime_installer
    from innotool.policy import RuntimeSettings

    path = ensure_runtime_installer(8, RuntimeSettings())
    print(path.name)  # windowsdesktop-runtime-8.0.23-win-x64.exe
    ```

All HTTP failures are raised as NetworkError, chained to the requests
exception. Timeouts apply per request, not to the whole transfer.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
import time
from urllib.parse import urlparse

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from innotool import __version__
from innotool.exceptions import ConfigError, NetworkError
from innotool.logging import get_global_logger
from innotool.policy.runtime import RuntimeSettings

# Stream size per chunk (1 MiB).
DEFAULT_CHUNK = 1024 * 1024


def _filename_from_cd(content_disposition: str) -> str | None:
    """
    Extract a filename from a Content-Disposition header if present.

    Example header:
      'attachment; filename="setup.exe"'
    """
    if not content_disposition:
        return None
    parts = [s.strip() for s in content_disposition.split(";")]
    for part in parts:
        if part.lower().startswith("filename="):
            value = part.split("=", 1)[1].strip().strip('"')
            return value or None
    return None


def _filename_from_url(url: str) -> str:
    name = Path(urlparse(url).path).name
    return name or "download.bin"


def make_session() -> requests.Session:
    """
    Create a requests.Session with retry/backoff defaults.

    - Retries on common transient status codes.
    - Applies exponential backoff.
    - Sets a User-Agent identifying innotool.
    """
    s = requests.Session()
    retries = Retry(
        total=5,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    s.headers.update(
        {
            "User-Agent": f"innotool/{__version__}",
            "Accept-Encoding": "identity",
        }
    )
    s.mount("http://", HTTPAdapter(max_retries=retries))
    s.mount("https://", HTTPAdapter(max_retries=retries))
    return s


def download_file(
    url: str,
    destination_folder: Path,
    *,
    filename: str | None = None,
    expected_sha256: str | None = None,
    timeout: int = 60,
) -> tuple[Path, str]:
    """Download a URL into destination_folder.

    Follows redirects and retries transient failures. Writes to
    <filename>.part then renames to <filename> on success.

    Args:
        url: Source URL.
        destination_folder: Folder to save into (created if missing).
        filename: Target filename. Defaults to the Content-Disposition name,
            then the last URL path segment.
        expected_sha256: Optional known SHA-256 (hex). A mismatch removes the
            file and raises NetworkError.
        timeout: Per-request timeout (seconds).

    Returns:
        A tuple (file_path, sha256_hex).

    Raises:
        NetworkError: For non-2xx responses (after retries), connection
            failures, or checksum mismatch.
    """
    logger = get_global_logger()

    destination_folder = Path(destination_folder)
    destination_folder.mkdir(parents=True, exist_ok=True)

    logger.verbose("HTTP", f"GET {url}")

    with make_session() as session:
        try:
            resp = session.get(url, stream=True, allow_redirects=True, timeout=timeout)
            resp.raise_for_status()
        except requests.RequestException as err:
            raise NetworkError(f"download failed for {url}: {err}") from err

        logger.verbose("HTTP", f"Response: {resp.status_code} {resp.reason}")

        cd_name = _filename_from_cd(resp.headers.get("Content-Disposition", ""))
        name = filename or cd_name or _filename_from_url(resp.url)
        target = destination_folder / name
        tmp = target.with_suffix(target.suffix + ".part")
        logger.debug("FILE", f"Downloading to: {tmp}")

        sha = hashlib.sha256()
        started_at = time.time()
        try:
            with tmp.open("wb") as f:
                for chunk in resp.iter_content(chunk_size=DEFAULT_CHUNK):
                    if not chunk:
                        continue
                    f.write(chunk)
                    sha.update(chunk)
        except requests.RequestException as err:
            tmp.unlink(missing_ok=True)
            raise NetworkError(f"download interrupted for {url}: {err}") from err
        finally:
            resp.close()

    digest = sha.hexdigest()
    tmp.replace(target)

    if expected_sha256 and digest.lower() != expected_sha256.lower():
        target.unlink(missing_ok=True)
        raise NetworkError(
            f"sha256 mismatch for {target.name}: got {digest}, "
            f"expected {expected_sha256}"
        )

    elapsed = time.time() - started_at
    logger.verbose("FILE", f"Download complete: {target} ({digest}) in {elapsed:.1f}s")
    return target, digest


def ensure_runtime_installer(major_version: int, runtime: RuntimeSettings) -> Path:
    """Return the cached runtime installer for major_version, downloading it if missing.

    Raises:
        ConfigError: If major_version has no runtime reference.
        NetworkError: If the download fails.
    """
    logger = get_global_logger()

    ref = runtime.installer(major_version)
    if ref is None:
        raise ConfigError(f"No runtime installer reference for .NET {major_version}")

    cached = Path(runtime.resource_dir) / ref.installer_name
    if cached.exists():
        logger.verbose("FILE", f"Using cached runtime installer: {cached}")
        return cached

    logger.verbose(
        "FILE", f"Runtime installer not cached, downloading {ref.installer_name}"
    )
    path, _ = download_file(
        runtime.download_url_for(major_version),
        Path(runtime.resource_dir),
        filename=ref.installer_name,
    )
    return path
