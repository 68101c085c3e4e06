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

"""Project build levels.

A build level decides how a .NET application is published and how its
installer deals with the .NET runtime. Levels are totally ordered so policy
checks can use plain comparisons:

    NONE < MINIMUM < STAND_ALONE < NET_INSTALL_INCLUDED < NET_INSTALL_DOWNLOAD

Example:
    ```python
    from innotool.policy import BuildLevel

    level = BuildLevel.parse("NETInstallIncluded")
    if level >= BuildLevel.NET_INSTALL_INCLUDED:
        print("installer carries the .NET runtime")
    ```
"""

from __future__ import annotations

from enum import IntEnum

from innotool.exceptions import ConfigError


class BuildLevel(IntEnum):
    """Ordered build levels.

    Attributes:
        NONE: Not specified. No runtime handling.
        MINIMUM: Framework-dependent publish. .NET must already be installed.
        STAND_ALONE: Self-contained, single-file, trimmed publish.
        NET_INSTALL_INCLUDED: Framework-dependent publish with the runtime
            installer shipped inside the setup.
        NET_INSTALL_DOWNLOAD: Framework-dependent publish with the runtime
            installer downloaded by the setup when needed.
    """

    NONE = 0
    MINIMUM = 1
    STAND_ALONE = 2
    NET_INSTALL_INCLUDED = 3
    NET_INSTALL_DOWNLOAD = 4

    @classmethod
    def parse(cls, value: str | int | BuildLevel | None) -> BuildLevel:
        """Parse a build level from settings text.

        Accepts the enum name in any case, with or without separators, so
        "NETInstallIncluded", "net_install_included" and
        "net-install-included" all resolve to NET_INSTALL_INCLUDED. Empty
        values resolve to NONE.

        Raises:
            ConfigError: If the value names no known level.
        """
        if isinstance(value, BuildLevel):
            return value
        if value is None:
            return cls.NONE
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError as err:
                raise ConfigError(f"Unknown build level: {value}") from err

        key = value.strip().replace("_", "").replace("-", "").replace(" ", "")
        if not key:
            return cls.NONE
        for member in cls:
            if member.name.replace("_", "").lower() == key.lower():
                return member
        raise ConfigError(f"Unknown build level: {value!r}")
