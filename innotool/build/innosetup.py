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

"""Inno Setup compiler (ISCC) runs.

A signed setup takes two compiler passes. The first pass, with a script
that sets SignedUninstaller=yes, leaves the uninstaller as an .e32 file
next to the script; that file is signed, then the second pass builds the
final setup around it.
"""

from __future__ import annotations

from pathlib import Path

from innotool.build.tools import output_matches, run_tool
from innotool.exceptions import PackagingError
from innotool.logging import get_global_logger

COMPILE_SUCCESS = r"Successful compile \("


def _e32_files(folder: Path) -> list[Path]:
    return sorted(
        p for p in folder.iterdir() if p.is_file() and p.suffix.lower() == ".e32"
    )


def delete_e32_files(script: Path) -> int:
    """Delete .e32 files beside the script. Returns how many were removed.

    Raises:
        PackagingError: If the script folder does not exist.
    """
    folder = Path(script).parent
    if not folder.is_dir():
        raise PackagingError(f"Inno Setup folder not found: {folder}")
    files = _e32_files(folder)
    for path in files:
        path.unlink()
    return len(files)


def create_signed_uninstaller(compiler: Path, script: Path) -> Path:
    """Compile the script once and return the uninstaller it left behind.

    Raises:
        PackagingError: If no .e32 file was produced.
    """
    logger = get_global_logger()
    folder = Path(script).parent
    if not folder.is_dir():
        raise PackagingError(f"Inno Setup folder not found: {folder}")

    logger.verbose("INNO", "Compiling to produce the uninstaller...")
    lines = run_tool(compiler, [str(script)])
    files = _e32_files(folder)
    if not files:
        raise PackagingError(
            "Uninstaller file was not created (no .e32 output)", lines
        )
    logger.verbose("INNO", f"Uninstaller: {files[0].name}")
    return files[0]


def compile_setup(compiler: Path, script: Path) -> None:
    """Compile the final setup.

    Raises:
        PackagingError: If ISCC does not report a successful compile.
    """
    logger = get_global_logger()
    logger.verbose("INNO", f"Compiling setup: {Path(script).name}")
    lines = run_tool(compiler, [str(script)])
    if not output_matches(lines, COMPILE_SUCCESS):
        raise PackagingError(f"Inno Setup compile failed for {script}", lines)
