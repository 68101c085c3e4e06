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

"""Settings validation module.

This module checks a settings file without running any external tool,
touching the network or writing files. It is meant for quick feedback while
editing settings and as a CI gate.

Validation Checks:

- File exists and parses (YAML or JSON)
- Action types and build levels are known
- Each active action carries the fields its type needs
- NET install build levels name a .NET major version
- The .NET major version has a known runtime installer

Example:
    Validate a settings file and handle results:
        ```python
        from pathlib import Path
        from innotool.validation import validate_config

        result = validate_config(Path("build.yaml"))
        if result.status == "valid":
            print(f"Settings are valid with {result.action_count} action(s)")
        else:
            for error in result.errors:
                print(f"Error: {error}")
        ```
"""

from __future__ import annotations

from pathlib import Path

from innotool.config.loader import (
    ActionSettings,
    ActionType,
    load_settings_file,
    resolve_actions,
)
from innotool.exceptions import ConfigError
from innotool.logging import get_global_logger
from innotool.policy.build_level import BuildLevel
from innotool.policy.runtime import DEFAULT_RUNTIME_REFERENCES
from innotool.results import ValidationResult

__all__ = ["validate_config", "REQUIRED_FIELDS"]

REQUIRED_FIELDS: dict[ActionType, tuple[str, ...]] = {
    ActionType.COMPILE_AND_PUBLISH: (
        "csharp_project_filename",
        "exe_filename",
        "setup_filename",
        "inno_script_filename",
        "inno_setup_compiler_filename",
    ),
    ActionType.SET_PACKAGE_FILES: ("input_foldername", "output_filename"),
    ActionType.SET_VERSION: (),
}


def _check_action(action: ActionSettings) -> tuple[list[str], list[str]]:
    errors: list[str] = []
    warnings: list[str] = []
    where = action.display_name

    for field in REQUIRED_FIELDS.get(action.action_type, ()):
        if not getattr(action, field):
            errors.append(f"{where}: Missing required field: {field}")

    if action.action_type is ActionType.SET_VERSION and not (
        action.csharp_project_filename
        or action.inno_script_filename
        or action.wap_manifest_filename
    ):
        errors.append(
            f"{where}: set_version needs csharp_project_filename, "
            "inno_script_filename or wap_manifest_filename"
        )

    if action.action_type is ActionType.COMPILE_AND_PUBLISH:
        level = action.project_build_level
        major = action.net_major_version
        if level >= BuildLevel.NET_INSTALL_INCLUDED and major == 0:
            errors.append(
                f"{where}: project_build_level {level.name} requires net_major_version"
            )
        elif major and major not in DEFAULT_RUNTIME_REFERENCES and not (
            action.runtime_download_url
        ):
            warnings.append(
                f"{where}: no runtime installer reference for .NET {major}; "
                "runtime placeholders will be left empty"
            )
        if not (action.cert_filename or action.sha_thumbprint):
            warnings.append(
                f"{where}: no certificate configured, SignTool will pick one "
                "automatically"
            )
    return errors, warnings


def validate_config(
    config_path: Path, working_path: Path | None = None, verbose: bool = False
) -> ValidationResult:
    """Validate a settings file without building anything.

    This function checks:

    1. The file can be parsed
    2. The action tree resolves (known action types and build levels)
    3. Each active action has the fields its type requires
    4. NET install build levels carry a .NET major version

    Does NOT:

    - Check that configured paths exist
    - Run dotnet, MSBuild, SignTool or ISCC
    - Download runtime installers

    Args:
        config_path: Path to the settings file.
        working_path: Working path used when the file sets none.
        verbose: If True, print validation progress.

    Returns:
        ValidationResult with status "valid" or "invalid", the collected
        errors and warnings, and the number of resolved actions.
    """
    logger = get_global_logger()
    config_path = Path(config_path)
    errors: list[str] = []
    warnings: list[str] = []

    if verbose:
        print(f"Validating settings: {config_path}")

    try:
        tree = load_settings_file(config_path)
        actions = resolve_actions(tree, working_path=working_path, warnings=warnings)
    except ConfigError as err:
        errors.append(str(err))
        return ValidationResult(
            status="invalid",
            errors=errors,
            warnings=warnings,
            action_count=0,
            config_path=str(config_path),
        )

    if verbose:
        print(f"  [OK] Found {len(actions)} action(s)")
    if not actions:
        warnings.append("No runnable actions (every action_type is 'none')")

    for action in actions:
        if not action.active:
            logger.verbose(
                "VALIDATE", f"Skipping inactive action: {action.display_name}"
            )
            continue
        action_errors, action_warnings = _check_action(action)
        errors.extend(action_errors)
        warnings.extend(action_warnings)
        if verbose and not action_errors:
            print(f"  [OK] {action.display_name} ({action.action_type.value})")

    status = "valid" if len(errors) == 0 else "invalid"
    if verbose:
        if status == "valid":
            print("  [OK] Settings are valid!")
        else:
            print(f"  [ERROR] Settings have {len(errors)} error(s)")

    return ValidationResult(
        status=status,
        errors=errors,
        warnings=warnings,
        action_count=len(actions),
        config_path=str(config_path),
    )
