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

"""Placeholder substitution for generated installer code.

Generated code modules may reference runtime details through a fixed set of
placeholders. Each one is looked up for the .NET major version being
packaged:

- {RuntimeDownloadUrl}: configured download URL override, else the official
  URL of the runtime installer
- {RuntimeVersion}: full runtime version (e.g., "8.0.23")
- {RuntimeInstallerName}: runtime installer filename

All placeholders are substituted in a single pass over the enumerated list,
each applied to the output of the previous one.

When the major version has no runtime reference, placeholders resolve to
empty strings and a warning is logged. With strict=True a ConfigError is
raised instead.

Example:
    ```python
    from innotool.script.variables import VariableResolver

    resolver = VariableResolver()
    resolver.resolve(8, "DownloadTemporaryFile('{RuntimeDownloadUrl}', ...")
    ```
"""

from __future__ import annotations

from collections.abc import Callable

from innotool.exceptions import ConfigError
from innotool.logging import Logger, get_global_logger
from innotool.policy.runtime import DEFAULT_RUNTIME_SETTINGS, RuntimeSettings

PLACEHOLDER_DOWNLOAD_URL = "{RuntimeDownloadUrl}"
PLACEHOLDER_RUNTIME_VERSION = "{RuntimeVersion}"
PLACEHOLDER_INSTALLER_NAME = "{RuntimeInstallerName}"


class VariableResolver:
    """Resolve runtime placeholders for one RuntimeSettings context."""

    def __init__(
        self,
        runtime: RuntimeSettings | None = None,
        *,
        strict: bool = False,
        logger: Logger | None = None,
    ) -> None:
        self.runtime = runtime or DEFAULT_RUNTIME_SETTINGS
        self.strict = strict
        self._logger = logger
        self._warned: set[int] = set()
        self._placeholders: list[tuple[str, Callable[[int], str]]] = [
            (PLACEHOLDER_DOWNLOAD_URL, self.runtime.download_url_for),
            (PLACEHOLDER_RUNTIME_VERSION, self.runtime.references.installer_version),
            (PLACEHOLDER_INSTALLER_NAME, self.runtime.references.installer_name),
        ]

    @property
    def placeholders(self) -> list[str]:
        return [token for token, _ in self._placeholders]

    def resolve(self, major_version: int, line: str) -> str:
        """Return line with every known placeholder substituted.

        Raises:
            ConfigError: In strict mode, if a placeholder is present and the
                major version has no runtime reference.
        """
        if not line or "{" not in line:
            return line
        if not any(token in line for token, _ in self._placeholders):
            return line

        if major_version not in self.runtime.references:
            self._report_unknown(major_version)

        result = line
        for token, lookup in self._placeholders:
            if token in result:
                result = result.replace(token, lookup(major_version))
        return result

    def resolve_lines(self, major_version: int, lines: list[str]) -> list[str]:
        return [self.resolve(major_version, line) for line in lines]

    def _report_unknown(self, major_version: int) -> None:
        message = (
            f"No runtime installer reference for .NET {major_version}; "
            f"known versions: {self.runtime.references.majors()}"
        )
        if self.strict:
            raise ConfigError(message)
        if major_version not in self._warned:
            self._warned.add(major_version)
            logger = self._logger or get_global_logger()
            logger.warning("CODE", f"{message}. Placeholders resolve to empty text.")


def resolve_variables(
    major_version: int, line: str, runtime: RuntimeSettings | None = None
) -> str:
    """Resolve placeholders in one line with a non-strict resolver."""
    return VariableResolver(runtime).resolve(major_version, line)
