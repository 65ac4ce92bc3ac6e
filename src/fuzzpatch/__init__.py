from .models import (
    BlockStatus,
    DiffBlock,
    DiffError,
    DiffLine,
    Hunk,
    HunkApplyError,
    LineKind,
    MatchSpan,
    ParsedDiff,
    render_hunk,
)
from .parser import parse_diff
from .extract import (
    DiffBlockExtractor,
    SequentialIdFactory,
    contains_diff_blocks,
    extract_diff_blocks,
    get_diff_marker,
    strip_diff_blocks,
)
from .locate import locate_hunk
from .apply import apply_diff, apply_hunk, apply_hunks
from .settings import ExtractorSettings, LocatorSettings, Settings, load_settings

__all__ = [
    "BlockStatus",
    "DiffBlock",
    "DiffError",
    "DiffLine",
    "Hunk",
    "HunkApplyError",
    "LineKind",
    "MatchSpan",
    "ParsedDiff",
    "render_hunk",
    "parse_diff",
    "DiffBlockExtractor",
    "SequentialIdFactory",
    "contains_diff_blocks",
    "extract_diff_blocks",
    "get_diff_marker",
    "strip_diff_blocks",
    "locate_hunk",
    "apply_diff",
    "apply_hunk",
    "apply_hunks",
    "ExtractorSettings",
    "LocatorSettings",
    "Settings",
    "load_settings",
]
