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

"""Build-level policy and .NET runtime references for innotool.

Modules:

build_level : module
    Ordered BuildLevel enum controlling publish mode and runtime handling.
runtime : module
    Immutable runtime installer table and the RuntimeSettings context.
"""

from .build_level import BuildLevel
from .runtime import (
    DEFAULT_RUNTIME_REFERENCES,
    DEFAULT_RUNTIME_SETTINGS,
    RUNTIME_INSTALLER_FAMILY,
    RuntimeInstaller,
    RuntimeInstallerReferences,
    RuntimeSettings,
)

__all__ = [
    "BuildLevel",
    "DEFAULT_RUNTIME_REFERENCES",
    "DEFAULT_RUNTIME_SETTINGS",
    "RUNTIME_INSTALLER_FAMILY",
    "RuntimeInstaller",
    "RuntimeInstallerReferences",
    "RuntimeSettings",
]
