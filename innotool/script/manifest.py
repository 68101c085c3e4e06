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

"""Regenerate the [Files] section from a publish folder.

The [Files] section is owned by innotool: its body is replaced on every
sync with one entry per eligible file found directly in the publish folder.
Runtime installer payloads are extracted to {tmp} and deleted after setup;
everything else with an accepted extension is installed to {app}.

Sync is idempotent. The return value reports whether the section body
actually changed, so a second sync against an unchanged folder returns
False.

Example:
    ```python
    from pathlib import Path
    from innotool.policy import BuildLevel
    from innotool.script import ScriptDocument
    from innotool.script.manifest import sync_files

    doc = ScriptDocument.load(Path("setup.iss"))
    if sync_files(doc, 8, BuildLevel.MINIMUM, Path("bin/Release/publish")):
        doc.save(Path("setup.iss"))
    ```
"""

from __future__ import annotations

from pathlib import Path
import shutil

from innotool.exceptions import ConfigError, NetworkError
from innotool.logging import Logger, get_global_logger
from innotool.policy.build_level import BuildLevel
from innotool.policy.runtime import DEFAULT_RUNTIME_SETTINGS, RuntimeSettings
from innotool.script import sections
from innotool.script.document import ScriptDocument

FILES_SECTION = "Files"

ACCEPTED_EXTENSIONS = frozenset(
    {".bat", ".bmp", ".cmd", ".dll", ".exe", ".ico", ".png", ".json"}
)


def runtime_payload_entry(filename: str) -> str:
    return (
        f'Source: "{{#SourcePath}}\\{filename}"; DestDir: "{{tmp}}"; '
        "Flags: deleteafterinstall"
    )


def application_entry(filename: str) -> str:
    return (
        f'Source: "{{#SourcePath}}\\{filename}"; DestDir: "{{app}}"; '
        "Flags: ignoreversion"
    )


def _family_key(filename: str) -> str:
    return filename.split("-", 1)[0].lower()


def file_entry(filename: str, installer_family: str) -> str | None:
    """Return the [Files] entry for filename, or None if it is not packaged."""
    family = _family_key(installer_family)
    if family and _family_key(filename) == family:
        return runtime_payload_entry(filename)
    if Path(filename).suffix.lower() in ACCEPTED_EXTENSIONS:
        return application_entry(filename)
    return None


def _copy_runtime_payload(
    major_version: int, runtime: RuntimeSettings, input_folder: Path, logger: Logger
) -> None:
    """Copy the runtime installer into the publish folder. Failures are logged only."""
    from innotool.io.download import ensure_runtime_installer

    try:
        source = ensure_runtime_installer(major_version, runtime)
        shutil.copy2(source, input_folder / source.name)
        logger.verbose("FILES", f"Copied runtime installer: {source.name}")
    except (ConfigError, NetworkError, OSError) as err:
        logger.error(
            "FILES", f"Could not copy runtime installer to publish folder: {err}"
        )


def sync_files(
    doc: ScriptDocument,
    major_version: int,
    build_level: BuildLevel,
    input_folder: Path,
    runtime: RuntimeSettings | None = None,
    logger: Logger | None = None,
) -> bool:
    """Rewrite the [Files] section from the files in input_folder.

    The change report compares the whole section body before and after the
    rebuild, not whether any line was removed or added along the way. The
    body is always cleared and rebuilt, so a rebuild that reproduces the
    same entries reports no change and the caller skips the save.

    Args:
        doc: Script to edit in place.
        major_version: .NET major version being packaged.
        build_level: Project build level. At NET_INSTALL_INCLUDED the runtime
            installer is copied into input_folder first.
        input_folder: Publish folder. Only its direct children are listed.
        runtime: Runtime context. Defaults to the built-in references.
        logger: Logger to report to. Defaults to the global logger.

    Returns:
        True if the [Files] body differs from its content before the call.
        False when nothing changed, the folder is missing, or the script has
        no [Files] section.
    """
    runtime = runtime or DEFAULT_RUNTIME_SETTINGS
    logger = logger or get_global_logger()
    input_folder = Path(input_folder)

    if not input_folder.is_dir():
        logger.error("FILES", f"Specified input folder not found: {input_folder}")
        return False

    if build_level == BuildLevel.NET_INSTALL_INCLUDED:
        _copy_runtime_payload(major_version, runtime, input_folder, logger)

    before = sections.section_body(doc, FILES_SECTION)
    if before is None:
        logger.error("FILES", "Could not find [Files] section in the setup script")
        return False

    sections.clear_section(doc, FILES_SECTION)
    index = sections.find_section_start(doc, FILES_SECTION) + 1
    doc.insert(index, "")
    index += 1

    files = sorted(
        (p for p in input_folder.iterdir() if p.is_file()),
        key=lambda p: p.name.lower(),
    )
    for path in files:
        entry = file_entry(path.name, runtime.installer_family)
        if entry is None:
            logger.debug("FILES", f"Skipped: {path.name}")
            continue
        doc.insert(index, entry)
        index += 1
        logger.verbose("FILES", f"File added: {path.name}")

    changed = sections.section_body(doc, FILES_SECTION) != before
    logger.verbose("FILES", "[Files] updated" if changed else "[Files] unchanged")
    return changed


def sync_package_files(input_folder: Path, script_path: Path) -> bool:
    """Rewrite [Files] of a script on disk, saving only when it changed."""
    logger = get_global_logger()
    script_path = Path(script_path)
    if not script_path.exists():
        raise ConfigError(f"Setup script not found: {script_path}")

    doc = ScriptDocument.load(script_path)
    changed = sync_files(doc, 0, BuildLevel.NONE, input_folder)
    if changed:
        doc.save(script_path)
        logger.verbose("FILES", f"Setup script updated: {script_path}")
    return changed
