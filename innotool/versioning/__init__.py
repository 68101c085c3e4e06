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

"""Version generation and stamping for innotool.

Public API:

generate_version : function
    Timestamp version for the current (or given) local time.
set_version : function
    Generate a version and stamp it into project, script and manifest files.
stamp_csproj, stamp_script_file, stamp_script_lines, stamp_wap_manifest : function
    Single-target stamping helpers.
"""

from .stamp import (
    generate_version,
    set_version,
    stamp_csproj,
    stamp_script_file,
    stamp_script_lines,
    stamp_wap_manifest,
)

__all__ = [
    "generate_version",
    "set_version",
    "stamp_csproj",
    "stamp_script_file",
    "stamp_script_lines",
    "stamp_wap_manifest",
]
