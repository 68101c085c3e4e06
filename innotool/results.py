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

"""Return types of the innotool action functions.

Each action returns a frozen dataclass describing what it did, and
run_actions reports one ActionOutcome per action. Domain types such as
ActionSettings, BuildLevel and RuntimeInstaller live next to the code that
owns them.

Example:
    ```python
    from innotool.build import set_package_files

    result = set_package_files(action)
    if result.changed:
        print(f"Updated {result.script_path}")
    ```
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class VersionResult:
    """Result from stamping a generated version.

    Attributes:
        version: The version that was written.
        stamped_files: Files that received the version.
    """

    version: str
    stamped_files: tuple[Path, ...]


@dataclass(frozen=True)
class SyncResult:
    """Result from synchronizing a setup script with a publish folder.

    Attributes:
        script_path: Path to the setup script.
        build_level: Name of the build level used.
        changed: Whether the script on disk was rewritten.
    """

    script_path: Path
    build_level: str
    changed: bool


@dataclass(frozen=True)
class PublishResult:
    """Result from compiling, packaging and signing a project.

    Attributes:
        name: Action name.
        version: Version stamped into the project, or "" if not stamped.
        executable_path: Signed application executable.
        uninstaller_path: Signed uninstaller (.e32) embedded into the setup.
        setup_path: Signed setup executable.
        status: Always "success" for a completed pipeline.
    """

    name: str
    version: str
    executable_path: Path
    uninstaller_path: Path
    setup_path: Path
    status: str


@dataclass(frozen=True)
class ActionOutcome:
    """Outcome of one action in a settings file.

    Attributes:
        name: Action name.
        action: Action type name (e.g., "compile_and_publish").
        status: "success", "failed" or "skipped".
        message: Error or skip reason. Empty on success.
    """

    name: str
    action: str
    status: str
    message: str = ""


@dataclass(frozen=True)
class ValidationResult:
    """Result from validating a settings file.

    Attributes:
        status: Validation status ("valid" or "invalid").
        errors: List of error messages (empty if valid).
        warnings: List of warning messages.
        action_count: Number of resolved actions.
        config_path: String path to the validated settings file.
    """

    status: str
    errors: list[str]
    warnings: list[str]
    action_count: int
    config_path: str
