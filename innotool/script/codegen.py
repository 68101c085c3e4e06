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

"""Keep generated [Run] and [Code] content in step with the build level.

sync_generated_code() works in four phases:

1. **Cleanup**: every catalog module previously generated by innotool (its
   signature preceded by the auto-generated marker) is removed together with
   the blank lines that follow it. Signatures without the marker belong to the
   script author and stay.
2. **Run-step cleanup**: every [Run] line that launches a runtime installer
   from {tmp} is removed, including one left without an installer name.
3. **Policy gate**: below NET_INSTALL_INCLUDED, an empty [Code] section is
   removed and nothing is generated.
4. **Regeneration**: the runtime install step is inserted at the top of
   [Run] (created before [Code] if needed; skipped with a warning when the
   major has no known installer) and each required module missing
   from the script is inserted at the top of [Code], in catalog order, with
   placeholders resolved.

Running the sync twice with the same inputs yields the same document.

Example:
    ```python
    from pathlib import Path
    from innotool.policy import BuildLevel
    from innotool.script import ScriptDocument
    from innotool.script.codegen import sync_generated_code

    doc = ScriptDocument.load(Path("setup.iss"))
    sync_generated_code(doc, 8, BuildLevel.NET_INSTALL_INCLUDED)
    doc.save(Path("setup.iss"))
    ```
"""

from __future__ import annotations

from pathlib import Path
import re

from innotool.exceptions import ConfigError
from innotool.logging import Logger, get_global_logger
from innotool.policy.build_level import BuildLevel
from innotool.policy.runtime import DEFAULT_RUNTIME_SETTINGS, RuntimeSettings
from innotool.script import sections
from innotool.script.blocks import find_block_end
from innotool.script.catalog import CODE_MODULES, CodeModule, is_marker
from innotool.script.document import ScriptDocument
from innotool.script.manifest import sync_files
from innotool.script.variables import VariableResolver

RUN_SECTION = "Run"
CODE_SECTION = "Code"

RUNTIME_INSTALL_PARAMETERS = "/install /quiet /norestart"
RUNTIME_INSTALL_CHECK = "NeedsDotNet"


def runtime_run_entry(installer_name: str) -> str:
    return (
        f'Filename: "{{tmp}}\\{installer_name}"; '
        f'Parameters: "{RUNTIME_INSTALL_PARAMETERS}"; '
        f"Check: {RUNTIME_INSTALL_CHECK}"
    )


def runtime_run_pattern(installer_family: str) -> re.Pattern[str]:
    """Match [Run] lines that launch a runtime installer out of {tmp}."""
    return re.compile(
        r'^\s*Filename:\s*"\{tmp\}\\' + re.escape(installer_family), re.IGNORECASE
    )


def _find_generated(doc: ScriptDocument, module: CodeModule, start: int) -> int | None:
    """Index of the next marker line directly above module's signature."""
    index = doc.index_of(module.matches_signature, max(start, 1))
    while index is not None:
        if is_marker(doc[index - 1]):
            return index - 1
        index = doc.index_of(module.matches_signature, index + 1)
    return None


def remove_generated_modules(
    doc: ScriptDocument,
    catalog: tuple[CodeModule, ...] = CODE_MODULES,
    logger: Logger | None = None,
) -> int:
    """Remove every generated copy of each catalog module.

    Returns:
        Number of module blocks removed.
    """
    logger = logger or get_global_logger()
    removed = 0
    for module in catalog:
        cursor = 0
        while True:
            marker = _find_generated(doc, module, cursor)
            if marker is None:
                break
            end = find_block_end(doc, marker)
            if end is None:
                logger.warning(
                    "CODE",
                    f"Unterminated generated block for {module.name} "
                    f"at line {marker + 1}",
                )
                cursor = marker + 2
                continue
            doc.remove_range(marker, end)
            while marker < len(doc) and not doc[marker].strip():
                doc.remove(marker)
            removed += 1
            cursor = marker
            logger.debug("CODE", f"Removed generated module: {module.name}")
    return removed


def remove_runtime_run_steps(doc: ScriptDocument, installer_family: str) -> None:
    """Remove runtime install steps, including ones with no installer name."""
    pattern = runtime_run_pattern(installer_family)
    unnamed = runtime_run_entry("").lower()
    doc.remove_where(
        lambda line: bool(pattern.match(line)) or line.strip().lower() == unnamed
    )


def sync_generated_code(
    doc: ScriptDocument,
    major_version: int,
    build_level: BuildLevel,
    runtime: RuntimeSettings | None = None,
    catalog: tuple[CodeModule, ...] = CODE_MODULES,
    resolver: VariableResolver | None = None,
    logger: Logger | None = None,
) -> None:
    """Bring generated [Run] and [Code] content in line with build_level.

    Args:
        doc: Script to edit in place.
        major_version: .NET major version being packaged.
        build_level: Project build level.
        runtime: Runtime context. Defaults to the built-in references.
        catalog: Code modules to manage, in declaration order.
        resolver: Placeholder resolver. Defaults to a non-strict resolver
            over runtime.
        logger: Logger to report to. Defaults to the global logger.
    """
    runtime = runtime or DEFAULT_RUNTIME_SETTINGS
    logger = logger or get_global_logger()
    resolver = resolver or VariableResolver(runtime, logger=logger)

    removed = remove_generated_modules(doc, catalog, logger)
    if removed:
        logger.verbose("CODE", f"Removed {removed} generated code module(s)")
    remove_runtime_run_steps(doc, runtime.installer_family)

    if build_level < BuildLevel.NET_INSTALL_INCLUDED:
        has_code = sections.find_section_start(doc, CODE_SECTION) is not None
        if has_code and sections.is_section_empty(doc, CODE_SECTION):
            sections.remove_section(doc, CODE_SECTION)
            logger.verbose("CODE", "Removed empty [Code] section")
        return

    installer_name = runtime.references.installer_name(major_version)
    if installer_name:
        run_start = sections.find_section_start(doc, RUN_SECTION)
        if run_start is None:
            run_start = sections.insert_section_before(doc, RUN_SECTION, CODE_SECTION)
        doc.insert(run_start + 1, runtime_run_entry(installer_name))
        logger.verbose("CODE", f"Runtime install step: {installer_name}")
    else:
        logger.warning(
            "CODE",
            f"No runtime installer for .NET {major_version}; "
            "runtime install step not added",
        )

    index = sections.ensure_section(doc, CODE_SECTION) + 1
    for module in catalog:
        if module.build_level > build_level:
            continue
        if doc.contains(module.matches_signature):
            logger.verbose("CODE", f"Keeping existing {module.name}")
            continue
        lines = resolver.resolve_lines(major_version, list(module.lines))
        doc.insert_many(index, lines)
        index += len(lines)
        doc.insert(index, "")
        index += 1
        logger.verbose("CODE", f"Inserted {module.name}")


def update_script_file(
    script_path: Path,
    major_version: int,
    build_level: BuildLevel,
    input_folder: Path,
    runtime: RuntimeSettings | None = None,
) -> bool:
    """Sync [Files], [Run] and [Code] of a script on disk.

    Returns:
        True if the saved script differs from the one that was loaded.

    Raises:
        ConfigError: If the script does not exist.
    """
    script_path = Path(script_path)
    if not script_path.exists():
        raise ConfigError(f"Setup script not found: {script_path}")

    doc = ScriptDocument.load(script_path)
    original = doc.lines
    sync_files(doc, major_version, build_level, input_folder, runtime)
    sync_generated_code(doc, major_version, build_level, runtime)
    if doc.lines == original:
        return False
    doc.save(script_path)
    return True
