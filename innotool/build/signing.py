# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Authenticode signing with SignTool.

Each target goes through three SignTool runs: sign, timestamp, verify. The
signing certificate is chosen by what the action provides:

1. A PFX file and its password.
2. Otherwise a SHA-1 certificate thumbprint from the certificate store.
3. Otherwise SignTool's automatic best-certificate selection.

Every run must print its success line ("Successfully signed:",
"Successfully timestamped:", "Successfully verified:") or the target is
considered unsigned and PackagingError is raised. SignTool gets a short
pause after each run so timestamp servers are not hit back to back.

Example:
    ```python
    from innotool.build.signing import SigningSettings, sign_and_verify

    settings = SigningSettings(
        sign_tool=Path(r"C:/Program Files (x86)/Windows Kits/10/bin/x64/signtool.exe"),
        sha_thumbprint="0123456789ABCDEF0123456789ABCDEF01234567",
    )
    sign_and_verify(Path("bin/MyApp.exe"), settings)
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import time

from innotool.build.tools import output_matches, run_tool
from innotool.exceptions import PackagingError
from innotool.logging import get_global_logger

DEFAULT_TIMESTAMP_URL = "http://timestamp.digicert.com"
AUTO_SIGN_TIMESTAMP_URL = "http://timestamp.globalsign.com/?signature=sha2"

SIGNED = r"Successfully signed:"
TIMESTAMPED = r"Successfully timestamped:"
VERIFIED = r"Successfully verified:"

SETTLE_SECONDS = 1.0


@dataclass(frozen=True)
class SigningSettings:
    """How to sign.

    Attributes:
        sign_tool: Path to signtool.exe.
        cert_filename: PFX certificate file. Used together with cert_password.
        cert_password: PFX password.
        sha_thumbprint: SHA-1 thumbprint of a certificate in the store.
        timestamp_url: RFC 3161 timestamp server.
    """

    sign_tool: Path
    cert_filename: str = ""
    cert_password: str = ""
    sha_thumbprint: str = ""
    timestamp_url: str = DEFAULT_TIMESTAMP_URL

    @property
    def mode(self) -> str:
        """Signing mode: pfx, thumbprint or auto."""
        if self.cert_filename and self.cert_password:
            return "pfx"
        if self.sha_thumbprint:
            return "thumbprint"
        return "auto"


def sign_arguments(target: Path, settings: SigningSettings) -> list[str]:
    mode = settings.mode
    if mode == "pfx":
        return [
            "sign",
            "/f",
            settings.cert_filename,
            "/p",
            settings.cert_password,
            "/fd",
            "sha256",
            "/a",
            str(target),
        ]
    if mode == "thumbprint":
        return [
            "sign",
            "/v",
            "/sha1",
            settings.sha_thumbprint,
            "/fd",
            "sha256",
            "/a",
            str(target),
        ]
    return [
        "sign",
        "/fd",
        "sha256",
        "/tr",
        AUTO_SIGN_TIMESTAMP_URL,
        "/td",
        "sha256",
        "/a",
        str(target),
    ]


def _run_step(
    settings: SigningSettings, args: list[str], success: str, step: str
) -> None:
    lines = run_tool(settings.sign_tool, args)
    time.sleep(SETTLE_SECONDS)
    if not output_matches(lines, success):
        raise PackagingError(f"SignTool {step} failed for {args[-1]}", lines)


def sign_and_verify(target: Path, settings: SigningSettings) -> None:
    """Sign, timestamp and verify target.

    Raises:
        PackagingError: If SignTool or the target is missing, or any of the
            three steps does not report success.
    """
    logger = get_global_logger()
    target = Path(target)

    if not Path(settings.sign_tool).exists():
        raise PackagingError(
            f"SignTool not found: {settings.sign_tool}. "
            "Set SIGNTOOLPATH or sign_tool_filename in the settings file."
        )
    if not target.exists():
        raise PackagingError(f"File to sign not found: {target}")

    logger.verbose("SIGN", f"Signing {target.name} ({settings.mode})")
    _run_step(settings, sign_arguments(target, settings), SIGNED, "sign")
    _run_step(
        settings,
        ["timestamp", "/tr", settings.timestamp_url, "/td", "SHA256", str(target)],
        TIMESTAMPED,
        "timestamp",
    )
    _run_step(settings, ["verify", "/pa", str(target)], VERIFIED, "verify")
    logger.verbose("SIGN", f"[OK] Signed and verified: {target.name}")
