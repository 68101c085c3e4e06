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

"""dotnet restore and MSBuild publish for C# projects.

The project file should declare <RuntimeIdentifiers>win-x64</RuntimeIdentifiers>
in a <PropertyGroup>; publish always targets win-x64 Release.
"""

from __future__ import annotations

from pathlib import Path
import shutil

from innotool.build.tools import output_matches, run_tool
from innotool.exceptions import PackagingError
from innotool.logging import get_global_logger
from innotool.policy.build_level import BuildLevel

DOTNET_EXE = "dotnet"
MSBUILD_EXE = "MSBuild.exe"

RESTORE_SUCCESS = r"\s+Restored\s+|up-to-date for restore"
PUBLISH_SUCCESS = r"(?s:Build succeeded\.\s+\d+ Warning\(s\)\s+0 Error\(s\))"


def delete_bin_and_obj(csproj: Path) -> list[Path]:
    """Remove the bin and obj folders next to the project file.

    Returns:
        The folders that were removed.
    """
    logger = get_global_logger()
    project_dir = Path(csproj).parent
    removed: list[Path] = []
    if not project_dir.is_dir():
        return removed

    logger.verbose("DOTNET", "Removing previous bin and obj folders...")
    for name in ("bin", "obj"):
        folder = project_dir / name
        if folder.is_dir():
            shutil.rmtree(folder)
            removed.append(folder)
    return removed


def publish_arguments(csproj: Path, build_level: BuildLevel) -> list[str]:
    stand_alone = "true" if build_level == BuildLevel.STAND_ALONE else "false"
    return [
        str(csproj),
        "/t:Publish",
        "/p:Configuration=Release",
        "/p:RuntimeIdentifier=win-x64",
        f"/p:SelfContained={stand_alone}",
        f"/p:PublishSingleFile={stand_alone}",
        f"/p:PublishTrimmed={stand_alone}",
    ]


def restore_project(csproj: Path, dotnet: str | Path = DOTNET_EXE) -> None:
    """Run "dotnet restore" in the project folder.

    Raises:
        PackagingError: If the restore output does not report success.
    """
    logger = get_global_logger()
    logger.verbose("DOTNET", f"Restoring packages for {Path(csproj).name}")
    lines = run_tool(dotnet, ["restore"], cwd=Path(csproj).parent)
    if not output_matches(lines, RESTORE_SUCCESS):
        raise PackagingError(f"dotnet restore failed for {csproj}", lines)


def publish_project(
    csproj: Path, build_level: BuildLevel, msbuild: str | Path = MSBUILD_EXE
) -> None:
    """Publish the project in Release for win-x64.

    STAND_ALONE builds are self-contained, single-file and trimmed; every
    other level produces a framework-dependent publish.

    Raises:
        PackagingError: If the build output does not report zero errors.
    """
    logger = get_global_logger()
    logger.verbose("DOTNET", f"Publishing {Path(csproj).name} ({build_level.name})")
    lines = run_tool(msbuild, publish_arguments(csproj, build_level))
    if not output_matches(lines, PUBLISH_SUCCESS):
        raise PackagingError(f"MSBuild publish failed for {csproj}", lines)
