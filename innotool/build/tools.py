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

"""External tool execution for innotool.

Every collaborator (dotnet, MSBuild, SignTool, ISCC) is treated the same
way: run it to completion, capture its console output, and decide success
by matching a pattern against that output. Exit codes are logged but not
trusted on their own, since several of these tools report failures on
stdout with a zero exit code and vice versa.

Example:
    ```python
    from innotool.build.tools import output_matches, run_tool

    lines = run_tool("dotnet", ["restore"], cwd=Path("MyApp"))
    if not output_matches(lines, r"\\s+Restored\\s+"):
        print("restore failed")
    ```
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
import re
import subprocess

from innotool.exceptions import PackagingError
from innotool.logging import get_global_logger


def run_tool(
    executable: str | Path,
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
) -> list[str]:
    """Run an external tool and return its output lines (stdout, then stderr).

    Args:
        executable: Tool path or a name resolved through PATH.
        args: Arguments, one list item per argument.
        cwd: Working directory for the process.
        timeout: Seconds before the process is killed. None waits forever.

    Returns:
        Captured output lines with trailing whitespace removed.

    Raises:
        PackagingError: If the tool cannot be started or times out.
    """
    logger = get_global_logger()
    cmd = [str(executable), *[str(a) for a in args]]
    logger.verbose("TOOL", f"Running: {' '.join(cmd)}")

    try:
        result = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
        )
    except FileNotFoundError as err:
        raise PackagingError(f"Tool not found: {executable}") from err
    except subprocess.TimeoutExpired as err:
        raise PackagingError(
            f"{Path(str(executable)).name} timed out after {err.timeout}s"
        ) from err
    except OSError as err:
        raise PackagingError(f"Could not run {executable}: {err}") from err

    lines = [line.rstrip() for line in (result.stdout or "").splitlines()]
    lines += [line.rstrip() for line in (result.stderr or "").splitlines()]
    for line in lines:
        logger.debug("TOOL", f"  {line}")
    logger.debug("TOOL", f"Exit code: {result.returncode}")
    return lines


def output_matches(lines: Sequence[str], pattern: str | re.Pattern[str]) -> bool:
    """True if pattern matches anywhere in the CRLF-joined output."""
    return re.search(pattern, "\r\n".join(lines)) is not None
