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

"""Windows Desktop runtime installer references.

Maps a .NET major version to the concrete runtime installer that setups
should carry or download. The table is immutable; callers that need other
versions build their own RuntimeInstallerReferences and pass it through
RuntimeSettings.

Example:
    ```python
    from innotool.policy import DEFAULT_RUNTIME_REFERENCES

    ref = DEFAULT_RUNTIME_REFERENCES.get(10)
    print(ref.installer_name)  # windowsdesktop-runtime-10.0.2-win-x64.exe
    print(ref.download_url)
    ```
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

RUNTIME_DOWNLOAD_BASE = "https://builds.dotnet.microsoft.com/dotnet/WindowsDesktop"
RUNTIME_INSTALLER_FAMILY = "windowsdesktop-runtime-"


@dataclass(frozen=True)
class RuntimeInstaller:
    """One runtime installer reference.

    Attributes:
        major_version: .NET major version (e.g., 8).
        runtime_version: Full runtime version (e.g., "8.0.23").
        installer_name: Installer filename.
    """

    major_version: int
    runtime_version: str
    installer_name: str

    @property
    def download_url(self) -> str:
        """Official download location for this installer."""
        return f"{RUNTIME_DOWNLOAD_BASE}/{self.runtime_version}/{self.installer_name}"


def _desktop_runtime(major_version: int, runtime_version: str) -> RuntimeInstaller:
    return RuntimeInstaller(
        major_version=major_version,
        runtime_version=runtime_version,
        installer_name=f"{RUNTIME_INSTALLER_FAMILY}{runtime_version}-win-x64.exe",
    )


class RuntimeInstallerReferences:
    """Read-only lookup of runtime installers by major version.

    Lookups for unknown majors return None (or "" for the name and version
    helpers) rather than raising.
    """

    def __init__(self, installers: Iterable[RuntimeInstaller]) -> None:
        self._by_major = {item.major_version: item for item in installers}

    def __iter__(self) -> Iterator[RuntimeInstaller]:
        return iter(sorted(self._by_major.values(), key=lambda i: i.major_version))

    def __len__(self) -> int:
        return len(self._by_major)

    def __contains__(self, major_version: object) -> bool:
        return major_version in self._by_major

    def get(self, major_version: int) -> RuntimeInstaller | None:
        return self._by_major.get(major_version)

    def installer_name(self, major_version: int) -> str:
        ref = self.get(major_version)
        return ref.installer_name if ref else ""

    def installer_version(self, major_version: int) -> str:
        ref = self.get(major_version)
        return ref.runtime_version if ref else ""

    def majors(self) -> list[int]:
        return sorted(self._by_major)


DEFAULT_RUNTIME_REFERENCES = RuntimeInstallerReferences(
    [
        _desktop_runtime(6, "6.0.36"),
        _desktop_runtime(7, "7.0.20"),
        _desktop_runtime(8, "8.0.23"),
        _desktop_runtime(9, "9.0.12"),
        _desktop_runtime(10, "10.0.2"),
    ]
)


@dataclass(frozen=True)
class RuntimeSettings:
    """Runtime distribution context passed explicitly into script editing.

    Attributes:
        references: Runtime installer lookup table.
        installer_family: Filename prefix shared by all runtime installers.
            Used to recognize installer payloads in [Files] and the install
            step in [Run].
        download_url: Optional override for {RuntimeDownloadUrl}. When empty,
            each reference's official URL is used.
        resource_dir: Local directory holding cached installer payloads.
    """

    references: RuntimeInstallerReferences = DEFAULT_RUNTIME_REFERENCES
    installer_family: str = RUNTIME_INSTALLER_FAMILY
    download_url: str = ""
    resource_dir: Path = field(default_factory=lambda: Path("cache/runtime"))

    def installer(self, major_version: int) -> RuntimeInstaller | None:
        return self.references.get(major_version)

    def download_url_for(self, major_version: int) -> str:
        """Configured override, else the reference's official URL, else ""."""
        if self.download_url:
            return self.download_url
        ref = self.installer(major_version)
        return ref.download_url if ref else ""


DEFAULT_RUNTIME_SETTINGS = RuntimeSettings()
