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

"""Timestamp versions and stamp them into project files.

Versions are derived from the local clock so every build gets a new,
monotonically increasing three-part number that fits the 16-bit limits of
Windows file versions:

    yy . (month + 20)(day, 2 digits) . (hour + 30)(minute, 2 digits)

For example, 2026-10-19 14:05 gives 26.3019.4405.

Supported targets:

- C# project (.csproj): <Version> and <VersionPrefix> values are replaced;
  when neither exists a <VersionPrefix> is added to the first
  <PropertyGroup>.
- Inno Setup script: either "#define <Variable> ..." lines or the
  "AppVersion=" directive.
- Windows Application Packaging manifest (.appxmanifest): the Identity
  Version attribute, which needs a fourth ".0" part.

Example:
    ```python
    from pathlib import Path
    from innotool.versioning import generate_version, stamp_csproj

    version = generate_version()
    stamp_csproj(Path("MyApp/MyApp.csproj"), version)
    ```
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
import re

from innotool.exceptions import ConfigError
from innotool.logging import get_global_logger
from innotool.results import VersionResult
from innotool.script.document import ScriptDocument

_CSPROJ_VERSION = re.compile(r"<Version>.*?</Version>", re.DOTALL)
_CSPROJ_VERSION_PREFIX = re.compile(r"<VersionPrefix>.*?</VersionPrefix>", re.DOTALL)
_CSPROJ_PROPERTY_GROUP_END = re.compile(
    r"(<PropertyGroup(?:\s[^>]*)?>.*?)(\s*)(</PropertyGroup>)", re.DOTALL
)
_APP_VERSION_DIRECTIVE = re.compile(r"^(AppVersion\s*=\s*).*$", re.IGNORECASE)
_WAP_IDENTITY_VERSION = re.compile(
    r'(<Identity\b[^>]*?\bVersion\s*=\s*)"[^"]*"', re.DOTALL
)


def generate_version(now: datetime | None = None) -> str:
    """Return the timestamp version for now (default: the current local time)."""
    now = now or datetime.now()
    return (
        f"{now.year % 100:02d}."
        f"{now.month + 20}{now.day:02d}."
        f"{now.hour + 30:02d}{now.minute:02d}"
    )


def _read_text(path: Path) -> str:
    if not path.exists():
        raise ConfigError(f"File not found: {path}")
    return path.read_text(encoding="utf-8-sig")


def stamp_csproj(path: Path, version: str) -> None:
    """Stamp version into a C# project file.

    Raises:
        ConfigError: If the file is missing or has no <PropertyGroup> to
            receive a new <VersionPrefix>.
    """
    path = Path(path)
    content = _read_text(path)

    if _CSPROJ_VERSION.search(content) or _CSPROJ_VERSION_PREFIX.search(content):
        content = _CSPROJ_VERSION.sub(f"<Version>{version}</Version>", content)
        content = _CSPROJ_VERSION_PREFIX.sub(
            f"<VersionPrefix>{version}</VersionPrefix>", content
        )
    else:
        content, count = _CSPROJ_PROPERTY_GROUP_END.subn(
            lambda m: f"{m.group(1)}{m.group(2)}"
            f"  <VersionPrefix>{version}</VersionPrefix>\r\n  {m.group(3)}",
            content,
            count=1,
        )
        if not count:
            raise ConfigError(f"No <PropertyGroup> found in project file: {path}")

    path.write_text(content, encoding="utf-8", newline="")


def _define_pattern(variable: str) -> re.Pattern[str]:
    return re.compile(
        r"^(\s*#define\s+" + re.escape(variable) + r"\b\s*).*$", re.IGNORECASE
    )


def stamp_script_lines(doc: ScriptDocument, version: str, variable: str = "") -> int:
    """Stamp version into a loaded Inno Setup script.

    With variable set, every "#define <variable> ..." line becomes
    '#define <variable> "<version>"'. Otherwise every "AppVersion=..." line
    becomes 'AppVersion="<version>"'. The text before the value is kept.

    Returns:
        Number of lines changed.
    """
    pattern = _define_pattern(variable) if variable else _APP_VERSION_DIRECTIVE
    changed = 0
    for index, line in enumerate(doc.lines):
        stamped = pattern.sub(lambda m: f'{m.group(1)}"{version}"', line)
        if stamped != line:
            doc.set(index, stamped)
            changed += 1
    return changed


def stamp_script_file(path: Path, version: str, variable: str = "") -> int:
    """File form of stamp_script_lines(). Saves only when a line changed."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Setup script not found: {path}")
    doc = ScriptDocument.load(path)
    changed = stamp_script_lines(doc, version, variable)
    if changed:
        doc.save(path)
    return changed


def stamp_wap_manifest(path: Path, version: str) -> None:
    """Stamp version (plus a ".0" revision) into an .appxmanifest Identity."""
    path = Path(path)
    content = _read_text(path)
    content = _WAP_IDENTITY_VERSION.sub(
        lambda m: f'{m.group(1)}"{version}.0"', content, count=1
    )
    path.write_text(content, encoding="utf-8", newline="")


def set_version(
    *,
    csproj: Path | None = None,
    script: Path | None = None,
    variable: str = "",
    wap_manifest: Path | None = None,
    version_file: Path | None = None,
    version: str | None = None,
) -> VersionResult:
    """Generate a version and stamp it into every given target.

    Args:
        csproj: C# project file to stamp.
        script: Inno Setup script to stamp.
        variable: #define name holding the version in script. Empty to use
            the AppVersion directive.
        wap_manifest: Windows Application Packaging manifest to stamp.
        version_file: Optional text file that receives the bare version.
        version: Explicit version. Defaults to generate_version().

    Returns:
        VersionResult with the version and the files written.
    """
    logger = get_global_logger()
    version = version or generate_version()
    logger.verbose("VERSION", f"Version: {version}")

    stamped: list[Path] = []
    if version_file:
        Path(version_file).write_text(version, encoding="utf-8")
        stamped.append(Path(version_file))
    if csproj:
        logger.verbose("VERSION", f"Processing C# project: {csproj}")
        stamp_csproj(Path(csproj), version)
        stamped.append(Path(csproj))
    if script:
        logger.verbose("VERSION", f"Processing Inno Setup script: {script}")
        if stamp_script_file(Path(script), version, variable):
            stamped.append(Path(script))
        else:
            logger.warning("VERSION", f"No version line found in {script}")
    if wap_manifest:
        logger.verbose("VERSION", f"Processing application package: {wap_manifest}")
        stamp_wap_manifest(Path(wap_manifest), version)
        stamped.append(Path(wap_manifest))

    return VersionResult(version=version, stamped_files=tuple(stamped))
