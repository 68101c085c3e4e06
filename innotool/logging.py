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

"""Console output for innotool.

Library modules report progress through a Logger instead of printing, so the
script editors stay quiet when used as a library and the CLI decides how
much a build shows.

Levels:

- step: pipeline progress ("[3/15] Publishing..."), always shown.
- warning / error: recoverable problems and failed operations, always
  shown, written to stderr so they stand out from the result blocks.
- verbose: what each step is doing. Shown with -v.
- debug: external tool command lines and output. Shown with -d.

Prefixes name the area a message comes from:

    CONFIG    settings loading and resolution
    VALIDATE  offline settings checks
    SCRIPT    script load/save
    FILES     [Files] rebuild and runtime payload copy
    CODE      generated [Run] and [Code] content
    VERSION   version stamping
    TOOL      any external process
    DOTNET    restore and publish
    SIGN      SignTool
    INNO      Inno Setup compiler
    BUILD     action runner
    HTTP      download requests
    FILE      download cache

Example:
    ```python
    from innotool.logging import get_global_logger, get_logger, set_global_logger

    set_global_logger(get_logger(verbose=True))

    logger = get_global_logger()
    logger.step(8, 15, "Updating [Files]...")
    logger.verbose("FILES", "File added: MyApp.exe")
    logger.warning("CODE", "No runtime reference for .NET 5")
    ```

Functions that edit a script also accept a logger argument, which wins over
the global one.
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO


class Logger(Protocol):
    """What innotool needs from a logger."""

    def step(self, step: int, total: int, message: str) -> None:
        """Report pipeline progress (step is 1-based)."""
        ...

    def verbose(self, prefix: str, message: str) -> None: ...

    def debug(self, prefix: str, message: str) -> None: ...

    def warning(self, prefix: str, message: str) -> None: ...

    def error(self, prefix: str, message: str) -> None: ...


class DefaultLogger:
    """Console logger used by the CLI.

    Steps, verbose and debug lines go to stdout; warnings and errors go to
    stderr and are never filtered.
    """

    def __init__(
        self,
        verbose: bool = False,
        debug: bool = False,
        err: TextIO | None = None,
    ) -> None:
        """
        Args:
            verbose: Show verbose lines.
            debug: Show debug lines. Implies verbose.
            err: Stream for warnings and errors. Defaults to sys.stderr at
                the time of each call.
        """
        self._verbose = verbose or debug
        self._debug = debug
        self._err = err

    def _stderr(self) -> TextIO:
        return self._err if self._err is not None else sys.stderr

    def step(self, step: int, total: int, message: str) -> None:
        print(f"[{step}/{total}] {message}")

    def verbose(self, prefix: str, message: str) -> None:
        if self._verbose:
            print(f"[{prefix}] {message}")

    def debug(self, prefix: str, message: str) -> None:
        if self._debug:
            print(f"[{prefix}] {message}")

    def warning(self, prefix: str, message: str) -> None:
        print(f"[{prefix}] WARNING: {message}", file=self._stderr())

    def error(self, prefix: str, message: str) -> None:
        print(f"[{prefix}] ERROR: {message}", file=self._stderr())


class SilentLogger:
    """Logger that discards everything. The global default."""

    def step(self, step: int, total: int, message: str) -> None:
        pass

    def verbose(self, prefix: str, message: str) -> None:
        pass

    def debug(self, prefix: str, message: str) -> None:
        pass

    def warning(self, prefix: str, message: str) -> None:
        pass

    def error(self, prefix: str, message: str) -> None:
        pass


_global_logger: Logger = SilentLogger()


def get_logger(verbose: bool = False, debug: bool = False) -> Logger:
    """Return a console logger for the given -v/-d flags."""
    return DefaultLogger(verbose=verbose, debug=debug)


def get_global_logger() -> Logger:
    """Return the process-wide logger (silent until the CLI sets one)."""
    return _global_logger


def set_global_logger(logger: Logger) -> None:
    """Replace the process-wide logger.

    Each CLI command calls this once before doing any work:

        ```python
        set_global_logger(get_logger(verbose=args.verbose, debug=args.debug))
        ```
    """
    global _global_logger
    _global_logger = logger
