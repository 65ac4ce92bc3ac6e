"""
Locating a hunk inside a line buffer.

Model-generated hunks routinely carry wrong line numbers and "old" lines that
were paraphrased, so placement is a cascade of strategies that trade precision
for robustness:

1. exact      - the whole old pattern (context + removed lines) matches
2. anchor     - the first non-blank context line is found; the hunk start is
                derived from its offset in the old pattern
3. similar    - the first removed line is found by relaxed comparison
4. insertion  - pure additions go after the last non-blank context line
5. position   - blind splice at the hinted line number

Each strategy is a pure function (lines, hunk, settings) -> MatchSpan | None.
Nothing here mutates the buffer.
"""

from __future__ import annotations

import re
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .models import Hunk, MatchSpan
from .settings import LocatorSettings


# A title convention: "<timestamp> - <title>"
TITLE_SEPARATOR = " - "
TIME_OF_DAY_RE = re.compile(r"^(\d{1,2}:\d{2}(?:am|pm)?)", re.IGNORECASE)

Strategy = Callable[[Sequence[str], Hunk, LocatorSettings], Optional[MatchSpan]]


def _first_non_blank(lines: Sequence[str]) -> Optional[str]:
    return next((ln for ln in lines if ln.strip() != ""), None)


def _last_non_blank(lines: Sequence[str]) -> Optional[str]:
    return _first_non_blank(list(reversed(lines)))


def _title_prefix(line: str) -> Optional[str]:
    idx = line.find(TITLE_SEPARATOR)
    if idx > 0:
        return line[:idx].strip()
    return None


def _time_of_day(line: str) -> Optional[str]:
    m = TIME_OF_DAY_RE.match(line)
    return m.group(1).lower() if m else None


def _probe_order(hint: int, radius: int) -> Iterator[Tuple[int, int]]:
    # (before, after) pairs walking outward from the hint
    for offset in range(1, radius + 1):
        yield hint - offset, hint + offset


# ---------------------------------------------------------------------------
# Comparisons
# ---------------------------------------------------------------------------


def matches_at(lines: Sequence[str], pattern: Sequence[str], pos: int) -> bool:
    """Trimmed line-by-line comparison; a blank pattern line matches anything."""
    if pos < 0 or pos + len(pattern) > len(lines):
        return False
    for offset, expected in enumerate(pattern):
        want = expected.strip()
        if want == "":
            continue
        if want != lines[pos + offset].strip():
            return False
    return True


def lines_are_similar(a: str, b: str) -> bool:
    """Relaxed equality of two trimmed lines: same time-of-day token, or one prefixes the other."""
    if a == b:
        return True
    ta, tb = _time_of_day(a), _time_of_day(b)
    if ta is not None and ta == tb:
        return True
    return a.startswith(b) or b.startswith(a)


def _resembles_sought(file_line: str, sought: str, prefix: Optional[str], min_len: int) -> bool:
    if file_line == sought:
        return True
    # File has "11:48am", the diff expected "11:48am - Title"
    if prefix and file_line == prefix:
        return True
    ts, tf = _time_of_day(sought), _time_of_day(file_line)
    if ts is not None and ts == tf:
        return True
    if file_line.startswith(sought):
        return True
    return sought.startswith(file_line) and len(file_line) > min_len


# ---------------------------------------------------------------------------
# Searches
# ---------------------------------------------------------------------------


def find_pattern(
    lines: Sequence[str], pattern: Sequence[str], hint: int, radius: int = 50
) -> Optional[int]:
    """
    Start index of `pattern` in `lines`: the hint first, then alternately
    before/after it out to `radius`, then a full scan.
    An empty pattern resolves to the hint, clamped to the buffer end.
    """
    n, m = len(lines), len(pattern)
    if m == 0:
        pos = min(hint, n)
        return pos if pos >= 0 else None

    if matches_at(lines, pattern, hint):
        return hint

    for before, after in _probe_order(hint, radius):
        if before >= 0 and matches_at(lines, pattern, before):
            return before
        if after <= n - m and matches_at(lines, pattern, after):
            return after

    for pos in range(0, n - m + 1):
        if matches_at(lines, pattern, pos):
            return pos
    return None


def find_line(
    lines: Sequence[str], sought: str, hint: int, radius: int = 100
) -> Optional[int]:
    """Index of a line equal to `sought` after trimming, near the hint only."""
    want = sought.strip()
    if not want:
        return None
    n = len(lines)

    if 0 <= hint < n and lines[hint].strip() == want:
        return hint

    for before, after in _probe_order(hint, radius):
        if 0 <= before < n and lines[before].strip() == want:
            return before
        if 0 <= after < n and lines[after].strip() == want:
            return after
    return None


def find_similar_line(
    lines: Sequence[str],
    sought: str,
    hint: int,
    radius: int = 100,
    min_prefix_len: int = 3,
) -> Optional[int]:
    """Like find_line, but tolerant of missing titles, shared timestamps and truncation."""
    want = sought.strip()
    if not want:
        return None
    prefix = _title_prefix(want)
    n = len(lines)

    candidates: List[int] = [hint]
    for before, after in _probe_order(hint, radius):
        candidates.extend((before, after))

    for idx in candidates:
        if 0 <= idx < n and _resembles_sought(lines[idx].strip(), want, prefix, min_prefix_len):
            return idx
    return None


# ---------------------------------------------------------------------------
# Span sizing
# ---------------------------------------------------------------------------


def count_matching_lines(lines: Sequence[str], pattern: Sequence[str], start: int) -> int:
    """
    How many leading pattern lines are present from `start`. Blank pattern
    lines match anything; "<prefix> - <title>" matches a bare "<prefix>".
    Never less than 1.
    """
    count = 0
    for offset, expected in enumerate(pattern):
        if start + offset >= len(lines):
            break
        want = expected.strip()
        have = lines[start + offset].strip()
        if want == "" or want == have:
            count += 1
            continue
        if TITLE_SEPARATOR not in have and _title_prefix(want) is not None:
            if have == want[: want.find(TITLE_SEPARATOR)]:
                count += 1
                continue
        break
    return max(count, 1)


def count_lines_to_remove(lines: Sequence[str], start: int, pattern: Sequence[str]) -> int:
    """
    How many buffer lines from `start` still look like the old block. The
    first line always counts; after that the walk stops at the first line
    that is not similar.
    """
    count = 0
    for offset, expected in enumerate(pattern):
        if start + offset >= len(lines):
            break
        want = expected.strip()
        have = lines[start + offset].strip()
        if want == "" and have == "":
            count += 1
        elif lines_are_similar(want, have):
            count += 1
        elif offset > 0:
            break
        else:
            count += 1
    return count


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def locate_exact(lines: Sequence[str], hunk: Hunk, settings: LocatorSettings) -> Optional[MatchSpan]:
    pattern = hunk.old_pattern
    idx = find_pattern(lines, pattern, hunk.hint_index, settings.exact_search_radius)
    if idx is None:
        return None
    return MatchSpan(idx, len(pattern), hunk.new_content, "exact")


def locate_by_anchor(lines: Sequence[str], hunk: Hunk, settings: LocatorSettings) -> Optional[MatchSpan]:
    anchor = _first_non_blank(hunk.context_lines)
    if anchor is None:
        return None
    idx = find_line(lines, anchor, hunk.hint_index, settings.anchor_search_radius)
    if idx is None:
        prefix = _title_prefix(anchor.strip())
        if prefix:
            idx = find_line(lines, prefix, hunk.hint_index, settings.anchor_search_radius)
    if idx is None:
        return None

    pattern = hunk.old_pattern
    anchor_offset = next(i for i, ln in enumerate(pattern) if ln.strip() == anchor.strip())
    start = idx - anchor_offset
    if start < 0:
        return None
    return MatchSpan(start, count_matching_lines(lines, pattern, start), hunk.new_content, "anchor")


def locate_by_removed_line(lines: Sequence[str], hunk: Hunk, settings: LocatorSettings) -> Optional[MatchSpan]:
    first_removed = _first_non_blank(hunk.remove_lines)
    if first_removed is None:
        return None
    idx = find_similar_line(
        lines,
        first_removed,
        hunk.hint_index,
        settings.similar_search_radius,
        settings.similar_min_prefix_len,
    )
    if idx is None:
        return None
    return MatchSpan(idx, count_lines_to_remove(lines, idx, hunk.old_pattern), hunk.new_content, "similar")


def locate_insertion(lines: Sequence[str], hunk: Hunk, settings: LocatorSettings) -> Optional[MatchSpan]:
    if hunk.remove_lines or not hunk.add_lines:
        return None
    last_context = _last_non_blank(hunk.context_lines)
    if last_context is None:
        return None
    idx = find_line(lines, last_context, hunk.hint_index, settings.anchor_search_radius)
    if idx is None:
        return None
    return MatchSpan(idx + 1, 0, hunk.add_lines, "insertion")


def locate_by_position(lines: Sequence[str], hunk: Hunk, settings: LocatorSettings) -> Optional[MatchSpan]:
    hint = hunk.hint_index
    if hint < 0 or hint > len(lines):
        return None
    delete_count = min(len(hunk.remove_lines), len(lines) - hint)
    return MatchSpan(hint, delete_count, hunk.new_content, "position")


STRATEGIES: Tuple[Strategy, ...] = (
    locate_exact,
    locate_by_anchor,
    locate_by_removed_line,
    locate_insertion,
    locate_by_position,
)


def locate_hunk(
    lines: Sequence[str],
    hunk: Hunk,
    settings: Optional[LocatorSettings] = None,
) -> Optional[MatchSpan]:
    """First span produced by the strategy cascade, or None when every strategy fails."""
    settings = settings or LocatorSettings()
    for strategy in STRATEGIES:
        span = strategy(lines, hunk, settings)
        if span is not None:
            return span
    return None
