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

"""Section lookup and editing for Inno Setup scripts.

A section starts at a line that, trimmed, equals "[<name>]" ignoring case,
and runs until the line before the next bracketed header or the end of the
document. The unnamed section "" is the prelude before the first header
(typically #define lines).

Every lookup returns None when the section is absent; nothing in this module
raises for a missing section. Indices are computed fresh on every call and
are invalid after any mutation of the document.

Example:
    ```python
    from innotool.script import ScriptDocument, sections

    doc = ScriptDocument(["[Setup]", "AppName=Demo", "[Files]", ""])
    sections.find_section_start(doc, "files")     # 2
    sections.find_section_end(doc, "Setup")       # 1
    sections.is_section_empty(doc, "Files")       # True
    sections.insert_section_before(doc, "Run", "Files")
    ```
"""

from __future__ import annotations

import re

from innotool.script.document import ScriptDocument

_SECTION_HEADER = re.compile(r"^\[[^\]]+\]")


def is_section_header(line: str) -> bool:
    """True if the trimmed line opens a bracketed section."""
    return bool(_SECTION_HEADER.match(line.strip()))


def _is_header_for(line: str, name: str) -> bool:
    return line.strip().lower() == f"[{name.strip()}]".lower()


def find_section_start(doc: ScriptDocument, name: str) -> int | None:
    """Return the index of the section header, or None if absent.

    The unnamed section "" starts at index 0 of any non-empty document.
    """
    if not name.strip():
        return 0 if len(doc) else None
    return doc.index_of(lambda line: _is_header_for(line, name))


def find_section_end(doc: ScriptDocument, name: str) -> int | None:
    """Return the index of the last line belonging to the section.

    That is the line just before the next header, or the last line of the
    document when no header follows. For a section consisting of only its
    header, the end equals the start. For the unnamed section, returns the
    index before the first header, or None when the document starts with a
    header.
    """
    if not name.strip():
        if not len(doc):
            return None
        first_header = doc.index_of(is_section_header)
        if first_header is None:
            return len(doc) - 1
        return first_header - 1 if first_header > 0 else None

    start = find_section_start(doc, name)
    if start is None:
        return None
    next_header = doc.index_of(is_section_header, start + 1)
    if next_header is None:
        return len(doc) - 1
    return next_header - 1


def section_body(doc: ScriptDocument, name: str) -> list[str] | None:
    """Snapshot of the lines between the header and the section end."""
    start = find_section_start(doc, name)
    end = find_section_end(doc, name)
    if start is None or end is None:
        return None
    if not name.strip():
        return [doc[i] for i in range(start, end + 1)]
    return [doc[i] for i in range(start + 1, end + 1)]


def ensure_section(doc: ScriptDocument, name: str) -> int:
    """Return the header index, appending "[name]" at the end if missing."""
    start = find_section_start(doc, name)
    if start is not None:
        return start
    doc.append(f"[{name}]")
    return len(doc) - 1


def insert_section_before(doc: ScriptDocument, new_name: str, before_name: str) -> int:
    """Insert "[new_name]" immediately before the before_name header.

    Falls back to appending at the end of the document when before_name is
    absent. Returns the index of the new header.
    """
    before = find_section_start(doc, before_name) if before_name.strip() else None
    if before is None:
        doc.append(f"[{new_name}]")
        return len(doc) - 1
    doc.insert(before, f"[{new_name}]")
    return before


def is_section_empty(doc: ScriptDocument, name: str) -> bool:
    """True when every body line is blank. A missing section counts as empty."""
    body = section_body(doc, name)
    if body is None:
        return True
    return all(not line.strip() for line in body)


def clear_section(doc: ScriptDocument, name: str) -> None:
    """Remove the body of a section, keeping its header."""
    start = find_section_start(doc, name)
    end = find_section_end(doc, name)
    if start is None or end is None or not name.strip():
        return
    doc.remove_range(start + 1, end)


def remove_section(doc: ScriptDocument, name: str) -> None:
    """Remove the header and body up to the next header or end of document."""
    start = find_section_start(doc, name)
    end = find_section_end(doc, name)
    if start is None or end is None or not name.strip():
        return
    doc.remove_range(start, end)
