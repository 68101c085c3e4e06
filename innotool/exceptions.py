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

"""Exception hierarchy for innotool.

Every error innotool raises on purpose derives from InnoToolError:

- ConfigError: the settings or the files they point at are wrong (bad
  YAML, unknown action type or build level, missing project, script or
  publish folder, missing .NET major version).
- NetworkError: a runtime installer could not be downloaded.
- PackagingError: an external step failed (dotnet, MSBuild, SignTool or
  the Inno Setup compiler) or the tool itself is missing. When the tool
  ran, its captured output is kept on the exception.

The action runner catches InnoToolError per action, so one broken action
does not stop the rest of a settings file. Other exceptions are bugs and
propagate.

Example:
    ```python
    from innotool.exceptions import ConfigError, PackagingError

    try:
        compile_and_publish(action)
    except ConfigError as err:
        print(f"Fix the settings file: {err}")
    except PackagingError as err:
        print(f"Build step failed: {err}")
        print("\\n".join(err.output[-10:]))
    ```
"""

from __future__ import annotations

from collections.abc import Iterable

__all__ = [
    "InnoToolError",
    "ConfigError",
    "NetworkError",
    "PackagingError",
]


class InnoToolError(Exception):
    """Base class for innotool errors."""


class ConfigError(InnoToolError):
    """Settings are invalid or a configured path does not exist."""


class NetworkError(InnoToolError):
    """A download failed: HTTP error, connection problem or checksum mismatch."""


class PackagingError(InnoToolError):
    """An external build, signing or compile step failed.

    Attributes:
        output: Lines the tool printed (stdout, then stderr). Empty when the
            tool could not be started.
    """

    def __init__(self, message: str, output: Iterable[str] = ()) -> None:
        super().__init__(message)
        self.output: tuple[str, ...] = tuple(output)
