"""
Helpers for model responses that carry diffs for several known files at once.
All functions are pure; reading and writing the files is left to the caller.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .extract import contains_diff_blocks, extract_diff_blocks, strip_diff_blocks
from .models import DiffBlock


QUESTION_PATTERNS = (
    re.compile(r"\?\s*$", re.MULTILINE),
    re.compile(r"could you clarify", re.IGNORECASE),
    re.compile(r"what is the", re.IGNORECASE),
    re.compile(r"who are the", re.IGNORECASE),
    re.compile(r"can you tell me", re.IGNORECASE),
    re.compile(r"I need to understand", re.IGNORECASE),
    re.compile(r"before I can generate", re.IGNORECASE),
    re.compile(r"please provide", re.IGNORECASE),
    re.compile(r"could you describe", re.IGNORECASE),
)

# Prose shorter than this around the diffs is not worth surfacing as questions.
MIN_QUESTION_CHARS = 50


@dataclass
class BatchDiffResult:
    diffs: Dict[str, DiffBlock] = field(default_factory=dict)
    missing_files: List[str] = field(default_factory=list)
    has_questions: bool = False
    question_content: Optional[str] = None

    @property
    def has_all_files(self) -> bool:
        return not self.missing_files


@dataclass
class FileDiffStats:
    name: str
    additions: int
    deletions: int


@dataclass
class BatchDiffSummary:
    files: List[FileDiffStats] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def total_additions(self) -> int:
        return sum(f.additions for f in self.files)

    @property
    def total_deletions(self) -> int:
        return sum(f.deletions for f in self.files)


def contains_batch_diff_response(
    content: str, expected_files: Sequence[str], min_files: int = 2
) -> bool:
    mentioned = sum(1 for name in expected_files if name in content)
    return mentioned >= min_files and contains_diff_blocks(content)


def contains_clarifying_questions(content: str) -> bool:
    if contains_diff_blocks(content):
        return False
    return any(p.search(content) for p in QUESTION_PATTERNS)


def parse_batch_diff_response(
    content: str, expected_files: Sequence[str]
) -> BatchDiffResult:
    result = BatchDiffResult()
    expected = set(expected_files)
    for block in extract_diff_blocks(content):
        if block.file_name in expected:
            result.diffs[block.file_name] = block

    result.missing_files = [f for f in expected_files if f not in result.diffs]

    asks = contains_clarifying_questions(content)
    if asks:
        prose = strip_diff_blocks(content)
        if len(prose) > MIN_QUESTION_CHARS:
            result.question_content = prose
    result.has_questions = asks or result.question_content is not None
    return result


def extract_batch_diff_summary(
    content: str, expected_files: Sequence[str]
) -> Optional[BatchDiffSummary]:
    result = parse_batch_diff_response(content, expected_files)
    if not result.diffs:
        return None

    summary = BatchDiffSummary()
    for name in expected_files:
        block = result.diffs.get(name)
        if block is None:
            continue
        summary.files.append(FileDiffStats(name, block.additions, block.deletions))
    return summary
