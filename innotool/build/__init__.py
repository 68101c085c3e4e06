"""
Build pipeline for innotool.

This package drives the external tools (dotnet, MSBuild, SignTool and the
Inno Setup compiler) and runs resolved settings actions.

Public API:

compile_and_publish : function
    Publish, sign and package one C# project with Inno Setup.
set_package_files : function
    Rebuild the [Files] section of a script from a folder.
set_version : function
    Stamp a new version into project files.
run_actions : function
    Run a list of resolved actions, skipping inactive ones.

Example:
    from pathlib import Path
    from innotool.build import run_actions
    from innotool.config import load_effective_actions

    outcomes = run_actions(load_effective_actions(Path("build.yaml")))
    print([o.status for o in outcomes])
"""

from .manager import (
    compile_and_publish,
    run_action,
    run_actions,
    set_package_files,
    set_version,
)

__all__ = [
    "compile_and_publish",
    "run_action",
    "run_actions",
    "set_package_files",
    "set_version",
]
