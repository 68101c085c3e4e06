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

"""Locate the end of a Pascal block inside an Inno Setup [Code] section.

A block starts at a given line (usually a generated-code marker or a
function signature) and ends on the line where the begin/end nesting count
returns to zero after having been positive at least once. Counting is per
line: a line containing an opening keyword (begin, try, case) counts once up,
a line containing "end" counts once down, and down-counts never go below
zero. A line holding both counts up first, then down.

Keywords are only recognized in code text. Pascal comments ({...}, (*...*),
// ...) and string literals are blanked out before matching, and multi-line
brace comments are tracked across lines.

Example:
    ```python
    from innotool.script import ScriptDocument
    from innotool.script.blocks import find_block_end

    doc = ScriptDocument([
        "function F: Boolean;",
        "begin",
        "  if A then begin",
        "    B;",
        "  end;",
        "end;",
    ])
    find_block_end(doc, 1)  # 5
    ```
"""

from __future__ import annotations

import re

from innotool.script.document import ScriptDocument

_BLOCK_OPEN = re.compile(r"\b(begin|try|case)\b", re.IGNORECASE)
_BLOCK_CLOSE = re.compile(r"\bend\b", re.IGNORECASE)


def strip_comments_and_strings(
    line: str, open_comment: str | None = None
) -> tuple[str, str | None]:
    """Return the code text of a line and the comment still open at its end.

    Args:
        line: Raw script line.
        open_comment: Terminator of a comment left open by a previous line
            ("}" or "*)"), or None.

    Returns:
        A tuple (code_text, open_comment). Comment and string contents are
        replaced by a single space so keywords on either side stay separate.
    """
    out: list[str] = []
    i = 0
    n = len(line)
    while i < n:
        if open_comment is not None:
            close = line.find(open_comment, i)
            if close < 0:
                return "".join(out), open_comment
            i = close + len(open_comment)
            open_comment = None
            out.append(" ")
            continue

        ch = line[i]
        if ch == "'":
            # Pascal escapes a quote by doubling it, which reads as two
            # adjacent literals here.
            close = line.find("'", i + 1)
            out.append(" ")
            if close < 0:
                return "".join(out), None
            i = close + 1
        elif ch == "{":
            open_comment = "}"
            i += 1
        elif line.startswith("(*", i):
            open_comment = "*)"
            i += 2
        elif line.startswith("//", i):
            break
        else:
            out.append(ch)
            i += 1
    return "".join(out), open_comment


def find_block_end(doc: ScriptDocument, start: int) -> int | None:
    """Return the index of the line that closes the block opened at or after start.

    Returns None when start is out of range or the document ends before the
    block is closed.
    """
    if start < 0 or start >= len(doc):
        return None

    used = False
    depth = 0
    open_comment: str | None = None
    for index in range(start, len(doc)):
        code, open_comment = strip_comments_and_strings(doc[index], open_comment)
        if _BLOCK_OPEN.search(code):
            used = True
            depth += 1
        if _BLOCK_CLOSE.search(code) and depth > 0:
            depth -= 1
        if used and depth == 0:
            return index
    return None
