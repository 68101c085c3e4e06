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

"""Inno Setup script editing for innotool.

This package edits .iss scripts as plain lines. It understands just enough
structure to keep installer content in sync with build output: bracketed
sections, begin/end nesting inside [Code], and innotool's own generated
blocks. Every other line is preserved as-is.

Modules:

document : module
    ScriptDocument, the mutable line list every editor works on.
sections : module
    Find, create, empty-check and remove bracketed sections.
blocks : module
    Find where a Pascal begin/end block closes.
variables : module
    Runtime placeholder substitution for generated code.
catalog : module
    Generated Pascal routines and their minimum build levels.
manifest : module
    Rebuild [Files] from a publish folder.
codegen : module
    Rebuild the runtime install step and generated [Code] routines.

Example:
    ```python
    from pathlib import Path
    from innotool.policy import BuildLevel
    from innotool.script import ScriptDocument, sync_files, sync_generated_code

    doc = ScriptDocument.load(Path("setup.iss"))
    sync_files(doc, 8, BuildLevel.NET_INSTALL_INCLUDED, Path("publish"))
    sync_generated_code(doc, 8, BuildLevel.NET_INSTALL_INCLUDED)
    doc.save(Path("setup.iss"))
    ```
"""

from .blocks import find_block_end
from .catalog import CODE_MODULES, CodeModule
from .codegen import sync_generated_code, update_script_file
from .document import ScriptDocument
from .manifest import sync_files, sync_package_files
from .variables import VariableResolver, resolve_variables

__all__ = [
    "CODE_MODULES",
    "CodeModule",
    "ScriptDocument",
    "VariableResolver",
    "find_block_end",
    "resolve_variables",
    "sync_files",
    "sync_generated_code",
    "sync_package_files",
    "update_script_file",
]
