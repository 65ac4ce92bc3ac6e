from __future__ import annotations

from typing import List, Optional

from .locate import locate_hunk
from .logger import logger
from .models import Hunk, HunkApplyError, MatchSpan, ParsedDiff
from .settings import LocatorSettings


def splice(lines: List[str], span: MatchSpan) -> None:
    lines[span.start : span.start + span.delete_count] = span.replacement


def apply_hunk(
    lines: List[str],
    hunk: Hunk,
    settings: Optional[LocatorSettings] = None,
) -> MatchSpan:
    """
    Locate `hunk` in `lines` and splice it in place.
    Raises HunkApplyError when no strategy places it.
    """
    span = locate_hunk(lines, hunk, settings)
    if span is None:
        sought = next((ln for ln in hunk.old_pattern if ln.strip() != ""), None)
        logger.info(
            "Hunk could not be placed",
            header=hunk.header,
            sought=sought,
            buffer_lines=len(lines),
        )
        raise HunkApplyError(hunk, sought, partial_lines=lines)

    if span.strategy == "position":
        logger.warning(
            "Hunk placed by line number only",
            header=hunk.header,
            start=span.start,
            deleted=span.delete_count,
        )
    else:
        logger.debug(
            "Hunk located",
            header=hunk.header,
            strategy=span.strategy,
            start=span.start,
            deleted=span.delete_count,
            inserted=len(span.replacement),
        )
    splice(lines, span)
    return span


def apply_hunks(
    lines: List[str],
    diff: ParsedDiff,
    settings: Optional[LocatorSettings] = None,
) -> List[MatchSpan]:
    """
    Apply every hunk of `diff` to the caller-owned `lines`, bottom-most hunk
    first so that splicing never shifts the hint of a hunk still to come.

    Not transactional: if a hunk fails, hunks already processed stay applied
    to `lines` and the HunkApplyError propagates.
    """
    ordered = sorted(diff.hunks, key=lambda h: h.old_start, reverse=True)
    return [apply_hunk(lines, hunk, settings) for hunk in ordered]


def apply_diff(
    original: str,
    diff: ParsedDiff,
    settings: Optional[LocatorSettings] = None,
) -> str:
    """
    Apply a parsed diff to `original` and return the new text.

    Hunks are relocated fuzzily, so re-applying a diff to its own output is
    not guaranteed to be a no-op or to fail: a pure addition, for example,
    is inserted again.
    """
    lines = original.split("\n")
    apply_hunks(lines, diff, settings)
    return "\n".join(lines)
