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

"""
Action execution for innotool.

This module runs resolved actions from a settings file. The main entry
point, compile_and_publish(), takes a C# project all the way to a signed
Inno Setup installer:

1. Validate project, executable, setup, certificate, script and compiler paths
2. Load the setup script
3. Stamp a new version (when the action has the SetVersion:true option)
4. Delete bin and obj folders
5. dotnet restore
6. MSBuild publish for the project build level
7. Sign the published executable
8. Rebuild [Files] from the publish folder
9. Rebuild the generated [Run] step and [Code] routines
10. Save the setup script
11. Delete stale .e32 uninstallers
12. Compile once to produce the uninstaller
13. Sign the uninstaller
14. Compile the setup
15. Sign the setup

The pipeline stops at the first failing step by raising. Artifacts written
by earlier steps stay where they are.

Example:
    ```python
    from pathlib import Path
    from innotool.build import run_actions
    from innotool.config import load_effective_actions

    outcomes = run_actions(load_effective_actions(Path("build.yaml")))
    for outcome in outcomes:
        print(outcome.name, outcome.status)
    ```
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from innotool.build import dotnet, innosetup
from innotool.build.signing import (
    DEFAULT_TIMESTAMP_URL,
    SigningSettings,
    sign_and_verify,
)
from innotool.config.loader import ActionSettings, ActionType
from innotool.exceptions import ConfigError, InnoToolError, PackagingError
from innotool.logging import get_global_logger
from innotool.policy.build_level import BuildLevel
from innotool.policy.runtime import RuntimeSettings
from innotool.results import ActionOutcome, PublishResult, SyncResult, VersionResult
from innotool.script.codegen import sync_generated_code
from innotool.script.document import ScriptDocument
from innotool.script.manifest import sync_files, sync_package_files
from innotool.versioning import stamp as versioning

PUBLISH_STEPS = 15

# Tool output lines shown with -v when a step fails.
FAILED_OUTPUT_TAIL = 20


def _absolute_path(relative: str, working_path: str) -> str:
    """Combine a settings path with the working path.

    Fully qualified values (drive letter, UNC or rooted POSIX paths) are used
    as-is. Leading separators on relative values are dropped before joining.
    """
    if not relative:
        return working_path
    if not working_path:
        return relative
    if ":" in relative or relative.startswith(("\\\\", "//")):
        return relative
    if Path(relative).is_absolute():
        return relative
    return str(Path(working_path) / relative.lstrip("\\/"))


def _validate_path(
    label: str,
    relative: str,
    working_path: str,
    *,
    can_create: bool = False,
    required: bool = True,
) -> Path | None:
    """Resolve a settings path and check that it exists.

    Args:
        label: Settings field name, used in error messages.
        relative: Value from the settings file.
        working_path: Base for relative values.
        can_create: Accept a path that does not exist yet (build outputs).
        required: Raise when no value is configured.

    Returns:
        The absolute path, or None when the value is empty and not required.

    Raises:
        ConfigError: If a required value is missing, or the path does not
            exist and can_create is False.
    """
    if not relative:
        if required:
            raise ConfigError(f"{label}: no filename was specified")
        return None
    path = Path(_absolute_path(relative, working_path)).absolute()
    if not can_create and not path.exists():
        raise ConfigError(f"{label}: path or file not found: {path}")
    return path


def runtime_settings_for(action: ActionSettings) -> RuntimeSettings:
    """RuntimeSettings carrying the action's download URL and payload cache."""
    defaults = RuntimeSettings()
    resource_dir = defaults.resource_dir
    if action.runtime_resource_dir:
        resource_dir = Path(
            _absolute_path(action.runtime_resource_dir, action.working_path)
        )
    return RuntimeSettings(
        download_url=action.runtime_download_url,
        resource_dir=resource_dir,
    )


def signing_settings_for(action: ActionSettings) -> SigningSettings:
    cert = ""
    if action.cert_filename:
        cert = str(
            _validate_path(
                "cert_filename",
                action.cert_filename,
                action.working_path,
                required=False,
            )
        )
    return SigningSettings(
        sign_tool=Path(action.sign_tool_filename),
        cert_filename=cert,
        cert_password=action.cert_password,
        sha_thumbprint=action.sha_thumbprint,
        timestamp_url=action.cert_timestamp_url or DEFAULT_TIMESTAMP_URL,
    )


def compile_and_publish(action: ActionSettings) -> PublishResult:
    """Build, package and sign one project.

    Args:
        action: Resolved compile_and_publish action.

    Returns:
        PublishResult with the signed executable, uninstaller and setup.

    Raises:
        ConfigError: If a required path is missing, or a NET install build
            level is used without net_major_version.
        PackagingError: If any external tool step fails.
    """
    logger = get_global_logger()
    level = action.project_build_level
    total = PUBLISH_STEPS

    if level >= BuildLevel.NET_INSTALL_INCLUDED and action.net_major_version == 0:
        raise ConfigError(
            f"{action.display_name}: project_build_level {level.name} needs the "
            ".NET major version in 'net_major_version'. Publish cancelled."
        )

    logger.step(1, total, "Validating paths...")
    wp = action.working_path
    csproj = _validate_path(
        "csharp_project_filename", action.csharp_project_filename, wp
    )
    exe = _validate_path("exe_filename", action.exe_filename, wp, can_create=True)
    setup = _validate_path("setup_filename", action.setup_filename, wp, can_create=True)
    script_path = _validate_path(
        "inno_script_filename", action.inno_script_filename, wp
    )
    compiler = _validate_path(
        "inno_setup_compiler_filename", action.inno_setup_compiler_filename, wp
    )
    signing = signing_settings_for(action)
    runtime = runtime_settings_for(action)

    logger.step(2, total, "Loading setup script...")
    script = ScriptDocument.load(script_path)

    version = ""
    if action.option_enabled("SetVersion"):
        logger.step(3, total, "Stamping version...")
        version = versioning.generate_version()
        versioning.stamp_csproj(csproj, version)
        versioning.stamp_script_lines(script, version, action.inno_version_variable)
        logger.verbose("VERSION", f"Version: {version}")
    else:
        logger.step(3, total, "Keeping current version")

    logger.step(4, total, "Removing bin and obj folders...")
    dotnet.delete_bin_and_obj(csproj)

    logger.step(5, total, "Restoring packages...")
    dotnet.restore_project(csproj)

    logger.step(6, total, f"Publishing ({level.name})...")
    dotnet.publish_project(csproj, level)

    logger.step(7, total, "Signing executable...")
    sign_and_verify(exe, signing)

    logger.step(8, total, "Updating [Files]...")
    sync_files(script, action.net_major_version, level, exe.parent, runtime)

    logger.step(9, total, "Updating generated code...")
    sync_generated_code(script, action.net_major_version, level, runtime)

    logger.step(10, total, "Saving setup script...")
    script.save(script_path)

    logger.step(11, total, "Removing old uninstallers...")
    innosetup.delete_e32_files(script_path)

    logger.step(12, total, "Creating uninstaller...")
    uninstaller = innosetup.create_signed_uninstaller(compiler, script_path)

    logger.step(13, total, "Signing uninstaller...")
    sign_and_verify(uninstaller, signing)

    logger.step(14, total, "Compiling setup...")
    innosetup.compile_setup(compiler, script_path)

    logger.step(15, total, "Signing setup...")
    sign_and_verify(setup, signing)

    logger.verbose("BUILD", f"[OK] Setup file created: {setup.name}")
    return PublishResult(
        name=action.display_name,
        version=version,
        executable_path=exe,
        uninstaller_path=uninstaller,
        setup_path=setup,
        status="success",
    )


def set_package_files(action: ActionSettings) -> SyncResult:
    """Rebuild [Files] of output_filename from input_foldername.

    Raises:
        ConfigError: If either path is missing.
    """
    wp = action.working_path
    input_folder = _validate_path("input_foldername", action.input_foldername, wp)
    script_path = _validate_path("output_filename", action.output_filename, wp)
    changed = sync_package_files(input_folder, script_path)
    return SyncResult(
        script_path=script_path, build_level=BuildLevel.NONE.name, changed=changed
    )


def set_version(action: ActionSettings) -> VersionResult:
    """Stamp a new version into the configured project files.

    Raises:
        ConfigError: If no project, script or manifest is configured, or a
            configured file does not exist.
    """
    wp = action.working_path
    csproj = _validate_path(
        "csharp_project_filename", action.csharp_project_filename, wp, required=False
    )
    script = _validate_path(
        "inno_script_filename", action.inno_script_filename, wp, required=False
    )
    wap = _validate_path(
        "wap_manifest_filename", action.wap_manifest_filename, wp, required=False
    )
    if csproj is None and script is None and wap is None:
        raise ConfigError(
            f"{action.display_name}: set_version needs csharp_project_filename, "
            "inno_script_filename or wap_manifest_filename"
        )
    version_file = _validate_path(
        "version_filename", action.version_filename, wp, can_create=True, required=False
    )
    return versioning.set_version(
        csproj=csproj,
        script=script,
        variable=action.inno_version_variable,
        wap_manifest=wap,
        version_file=version_file,
    )


def run_action(
    action: ActionSettings,
) -> PublishResult | SyncResult | VersionResult | None:
    """Dispatch one active action by type."""
    if action.action_type is ActionType.COMPILE_AND_PUBLISH:
        return compile_and_publish(action)
    if action.action_type is ActionType.SET_PACKAGE_FILES:
        return set_package_files(action)
    if action.action_type is ActionType.SET_VERSION:
        return set_version(action)
    return None


def run_actions(actions: Iterable[ActionSettings]) -> list[ActionOutcome]:
    """Run actions in order, skipping inactive ones.

    A failing action is logged and recorded; the remaining actions still run.

    Returns:
        One ActionOutcome per action.
    """
    logger = get_global_logger()
    outcomes: list[ActionOutcome] = []
    for action in actions:
        kind = action.action_type.value
        logger.verbose("BUILD", f"Command: {kind} ({action.display_name})")
        if not action.active:
            logger.verbose("BUILD", "  Skipping step...")
            outcomes.append(
                ActionOutcome(action.display_name, kind, "skipped", "inactive")
            )
            continue
        try:
            run_action(action)
        except InnoToolError as err:
            logger.error("BUILD", f"{action.display_name}: {err}")
            if isinstance(err, PackagingError):
                for line in err.output[-FAILED_OUTPUT_TAIL:]:
                    logger.verbose("TOOL", f"  {line}")
            outcomes.append(
                ActionOutcome(action.display_name, kind, "failed", str(err))
            )
            continue
        outcomes.append(ActionOutcome(action.display_name, kind, "success"))
    return outcomes
