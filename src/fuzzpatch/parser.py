from __future__ import annotations

import re
from typing import List, Optional

from .models import DiffLine, Hunk, LineKind, ParsedDiff


OLD_FILE_PREFIX = "--- "
NEW_FILE_PREFIX = "+++ "
HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")

# Headers plus at least one hunk line
MIN_DIFF_LINES = 3


def _strip_path_prefix(path: str, prefix: str) -> str:
    if path.startswith(prefix):
        return path[len(prefix) :]
    return path


def _classify(line: str) -> DiffLine:
    if line.startswith("+"):
        return DiffLine(LineKind.ADD, line[1:])
    if line.startswith("-"):
        return DiffLine(LineKind.REMOVE, line[1:])
    # Models frequently drop the leading space on context lines; keep those verbatim.
    if line.startswith(" "):
        return DiffLine(LineKind.CONTEXT, line[1:])
    return DiffLine(LineKind.CONTEXT, line)


def parse_diff(diff_text: str) -> Optional[ParsedDiff]:
    """
    Parse unified-diff text into a ParsedDiff:

    --- a/path
    +++ b/path
    @@ -old_start[,old_count] +new_start[,new_count] @@
     context line
    -removed line
    +added line

    Returns None when the text is too short or no "+++" destination header
    was found. Never raises for malformed input.
    """
    lines = diff_text.split("\n")
    if len(lines) < MIN_DIFF_LINES:
        return None

    file_name = ""
    old_file_name: Optional[str] = None
    hunks: List[Hunk] = []
    current: Optional[Hunk] = None

    for line in lines:
        if line.startswith(OLD_FILE_PREFIX):
            old_file_name = _strip_path_prefix(line[len(OLD_FILE_PREFIX) :].strip(), "a/")
            continue

        if line.startswith(NEW_FILE_PREFIX):
            file_name = _strip_path_prefix(line[len(NEW_FILE_PREFIX) :].strip(), "b/")
            continue

        m = HUNK_HEADER_RE.match(line)
        if m:
            if current is not None:
                hunks.append(current)
            current = Hunk(
                old_start=int(m.group(1)),
                old_count=int(m.group(2)) if m.group(2) is not None else 1,
                new_start=int(m.group(3)),
                new_count=int(m.group(4)) if m.group(4) is not None else 1,
            )
            continue

        if current is not None:
            current.lines.append(_classify(line))

    if current is not None:
        hunks.append(current)

    if not file_name:
        return None

    return ParsedDiff(file_name=file_name, hunks=hunks, old_file_name=old_file_name)
