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

"""Line-oriented Inno Setup script document.

ScriptDocument is the mutable substrate every script editor works on: an
ordered, 0-indexed list of text lines. Mutating methods return None and
never hand out cached positions; every lookup recomputes from the current
content, so callers must re-query indices after each edit.

Scripts are read splitting on CRLF, LF or CR and written back joined with
CRLF, without adding a trailing separator. A script that is not valid UTF-8
is read as Windows-1252, the encoding of ANSI scripts, and saved back in
the encoding it was read with. A UTF-8 BOM is kept on save.

Example:
    ```python
    from pathlib import Path
    from innotool.script import ScriptDocument

    doc = ScriptDocument.load(Path("setup.iss"))
    index = doc.index_of(lambda line: line.strip().lower() == "[files]")
    if index is not None:
        doc.insert(index + 1, "")
    doc.save(Path("setup.iss"))
    ```
"""

from __future__ import annotations

import codecs
from collections.abc import Callable, Iterable, Iterator
from pathlib import Path
import re

LINE_SEPARATOR = "\r\n"

DEFAULT_ENCODING = "utf-8"
BOM_ENCODING = "utf-8-sig"
ANSI_ENCODING = "cp1252"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


class ScriptDocument:
    """Ordered, mutable sequence of script lines."""

    def __init__(
        self, lines: Iterable[str] | None = None, encoding: str = DEFAULT_ENCODING
    ) -> None:
        self._lines: list[str] = list(lines) if lines is not None else []
        self.encoding = encoding

    @classmethod
    def from_text(cls, text: str) -> ScriptDocument:
        """Split text into lines on any line-break convention.

        A single trailing line break does not produce an extra empty line.
        """
        if not text:
            return cls()
        lines = _LINE_BREAK.split(text)
        if lines and lines[-1] == "":
            lines.pop()
        return cls(lines)

    @classmethod
    def load(cls, path: Path) -> ScriptDocument:
        """Read a script, remembering its encoding for save().

        UTF-8 is tried first. Bytes that are not valid UTF-8 are decoded as
        Windows-1252; the few bytes undefined there become U+FFFD.
        """
        data = Path(path).read_bytes()
        encoding = DEFAULT_ENCODING
        if data.startswith(codecs.BOM_UTF8):
            data = data[len(codecs.BOM_UTF8) :]
            encoding = BOM_ENCODING
        try:
            text = data.decode(DEFAULT_ENCODING)
        except UnicodeDecodeError:
            encoding = ANSI_ENCODING
            text = data.decode(encoding, errors="replace")
        doc = cls.from_text(text)
        doc.encoding = encoding
        return doc

    def to_text(self) -> str:
        return LINE_SEPARATOR.join(self._lines)

    def save(self, path: Path) -> None:
        Path(path).write_bytes(self.to_text().encode(self.encoding, errors="replace"))

    # Read access

    def __len__(self) -> int:
        return len(self._lines)

    def __getitem__(self, index: int) -> str:
        return self._lines[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self._lines)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ScriptDocument):
            return self._lines == other._lines
        return NotImplemented

    def __repr__(self) -> str:
        return f"ScriptDocument({len(self._lines)} lines)"

    @property
    def lines(self) -> list[str]:
        """Snapshot copy of the current lines."""
        return list(self._lines)

    def index_of(
        self, predicate: Callable[[str], bool], start: int = 0
    ) -> int | None:
        """Return the first index at or after start whose line satisfies predicate."""
        for index in range(max(start, 0), len(self._lines)):
            if predicate(self._lines[index]):
                return index
        return None

    def contains(self, predicate: Callable[[str], bool]) -> bool:
        return self.index_of(predicate) is not None

    # Mutation

    def insert(self, index: int, line: str) -> None:
        """Insert line before index. index == len(doc) appends."""
        if index < 0 or index > len(self._lines):
            raise IndexError(f"insert index out of range: {index}")
        self._lines.insert(index, line)

    def insert_many(self, index: int, lines: Iterable[str]) -> None:
        if index < 0 or index > len(self._lines):
            raise IndexError(f"insert index out of range: {index}")
        self._lines[index:index] = list(lines)

    def append(self, line: str) -> None:
        self._lines.append(line)

    def set(self, index: int, line: str) -> None:
        self._lines[index] = line

    def remove(self, index: int) -> None:
        del self._lines[index]

    def remove_range(self, start: int, end: int) -> None:
        """Remove lines start through end, inclusive."""
        if end < start:
            return
        del self._lines[start : end + 1]

    def remove_where(self, predicate: Callable[[str], bool]) -> None:
        self._lines = [line for line in self._lines if not predicate(line)]
