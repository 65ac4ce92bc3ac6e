from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class DiffError(ValueError):
    """Any problem detected while handling a diff outside of parsing."""


class LineKind(str, Enum):
    CONTEXT = "context"
    ADD = "add"
    REMOVE = "remove"


class BlockStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


CONTEXT_PREFIX = " "
ADD_PREFIX = "+"
REMOVE_PREFIX = "-"

_PREFIXES = {
    LineKind.CONTEXT: CONTEXT_PREFIX,
    LineKind.ADD: ADD_PREFIX,
    LineKind.REMOVE: REMOVE_PREFIX,
}


@dataclass(frozen=True)
class DiffLine:
    kind: LineKind
    content: str


@dataclass
class Hunk:
    # old_start/new_start are 1-based hints only; model output often miscounts.
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: List[DiffLine] = field(default_factory=list)

    def _contents(self, *kinds: LineKind) -> List[str]:
        return [ln.content for ln in self.lines if ln.kind in kinds]

    @property
    def hint_index(self) -> int:
        return self.old_start - 1

    @property
    def old_pattern(self) -> List[str]:
        return self._contents(LineKind.CONTEXT, LineKind.REMOVE)

    @property
    def new_content(self) -> List[str]:
        return self._contents(LineKind.CONTEXT, LineKind.ADD)

    @property
    def context_lines(self) -> List[str]:
        return self._contents(LineKind.CONTEXT)

    @property
    def remove_lines(self) -> List[str]:
        return self._contents(LineKind.REMOVE)

    @property
    def add_lines(self) -> List[str]:
        return self._contents(LineKind.ADD)

    @property
    def additions(self) -> int:
        return sum(1 for ln in self.lines if ln.kind == LineKind.ADD)

    @property
    def deletions(self) -> int:
        return sum(1 for ln in self.lines if ln.kind == LineKind.REMOVE)

    @property
    def header(self) -> str:
        return (
            f"@@ -{self.old_start},{self.old_count} "
            f"+{self.new_start},{self.new_count} @@"
        )


@dataclass
class ParsedDiff:
    file_name: str
    hunks: List[Hunk] = field(default_factory=list)
    # Path from the "---" header. Display only, the "+++" side is the target.
    old_file_name: Optional[str] = None

    @property
    def additions(self) -> int:
        return sum(h.additions for h in self.hunks)

    @property
    def deletions(self) -> int:
        return sum(h.deletions for h in self.hunks)


@dataclass
class DiffBlock:
    id: str
    raw_diff: str
    file_name: str
    parsed: Optional[ParsedDiff] = None
    status: BlockStatus = BlockStatus.PENDING

    @property
    def is_parsed(self) -> bool:
        return self.parsed is not None

    @property
    def additions(self) -> int:
        return self.parsed.additions if self.parsed else 0

    @property
    def deletions(self) -> int:
        return self.parsed.deletions if self.parsed else 0


@dataclass(frozen=True)
class MatchSpan:
    """
    Where a hunk lands in a line buffer: replace `delete_count` lines starting
    at `start` with `replacement`. `strategy` names the locator that found it.
    """

    start: int
    delete_count: int
    replacement: List[str]
    strategy: str


class HunkApplyError(DiffError):
    """
    Raised when no locator strategy could place a hunk.

    `partial_lines` holds the buffer as it was when the failure happened; hunks
    processed before the failing one are already spliced into it.
    """

    def __init__(
        self,
        hunk: Hunk,
        sought_line: Optional[str],
        partial_lines: Optional[List[str]] = None,
    ) -> None:
        self.hunk = hunk
        self.sought_line = sought_line
        self.partial_lines = list(partial_lines or [])
        super().__init__(
            "Could not find where to apply changes.\n"
            f'Looking for: "{sought_line or "(empty lines)"}"\n'
            "The file structure may have changed significantly."
        )


def render_hunk(hunk: Hunk) -> str:
    """Render a hunk back into unified-diff text (header plus prefixed lines)."""
    out: List[str] = [hunk.header]
    for ln in hunk.lines:
        out.append(f"{_PREFIXES[ln.kind]}{ln.content}")
    return "\n".join(out)
