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

"""Settings loading for innotool.

This module loads a YAML (or legacy JSON) settings file describing a tree of
build actions and resolves it into flat, immutable ActionSettings records:
children before parents, unset values inherited from ancestors, options
unioned, and environment strings expanded in path fields.

Public API:

- load_effective_actions: Load and resolve a settings file
- load_settings_file: Read the raw root mapping
- resolve_actions: Resolve an already-loaded tree
- ActionSettings, ActionType: Resolved action types

Example:
    Basic usage:

        from pathlib import Path
        from innotool.config import load_effective_actions

        actions = load_effective_actions(Path("build.yaml"))
        print(actions[0].action_type)
"""

from .loader import (
    ActionSettings,
    ActionType,
    expand_environment_strings,
    load_effective_actions,
    load_settings_file,
    resolve_actions,
)

__all__ = [
    "ActionSettings",
    "ActionType",
    "expand_environment_strings",
    "load_effective_actions",
    "load_settings_file",
    "resolve_actions",
]
