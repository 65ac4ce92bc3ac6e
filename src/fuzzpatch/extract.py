from __future__ import annotations

import itertools
import re
import time
import uuid
from typing import Callable, List, Optional

from .models import BlockStatus, DiffBlock
from .parser import parse_diff
from .settings import ExtractorSettings


IdFactory = Callable[[], str]


def _fence_re(tag: str) -> re.Pattern:
    return re.compile(r"```" + re.escape(tag) + r"\n(.*?)```", re.DOTALL)


class SequentialIdFactory:
    """Produces diff-<epoch-millis>-<n> ids; the counter belongs to the instance."""

    def __init__(self, prefix: str = "diff") -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self) -> str:
        return f"{self._prefix}-{int(time.time() * 1000)}-{next(self._counter)}"


def uuid_id_factory() -> str:
    return f"diff-{uuid.uuid4().hex}"


class DiffBlockExtractor:
    """
    Finds ```diff fenced sections in free text and parses each one into a
    DiffBlock. Blocks that fail to parse are still returned (parsed=None) so
    callers can show the raw text.
    """

    def __init__(
        self,
        settings: Optional[ExtractorSettings] = None,
        id_factory: Optional[IdFactory] = None,
    ) -> None:
        self.settings = settings or ExtractorSettings()
        self._id_factory: IdFactory = id_factory or SequentialIdFactory()
        self._fence = _fence_re(self.settings.fence_tag)

    def extract(self, text: str) -> List[DiffBlock]:
        blocks: List[DiffBlock] = []
        for m in self._fence.finditer(text):
            raw = m.group(1).strip()
            parsed = parse_diff(raw)
            blocks.append(
                DiffBlock(
                    id=self._id_factory(),
                    raw_diff=raw,
                    file_name=parsed.file_name if parsed else self.settings.unknown_file_name,
                    parsed=parsed,
                    status=BlockStatus.PENDING,
                )
            )
        return blocks

    def contains(self, text: str) -> bool:
        return self._fence.search(text) is not None

    def strip(self, text: str) -> str:
        return self._fence.sub("", text).strip()

    def marker(self, raw_diff: str) -> str:
        return f"```{self.settings.fence_tag}\n{raw_diff}\n```"


def extract_diff_blocks(text: str) -> List[DiffBlock]:
    return DiffBlockExtractor(id_factory=uuid_id_factory).extract(text)


def contains_diff_blocks(text: str) -> bool:
    return DiffBlockExtractor().contains(text)


def strip_diff_blocks(text: str) -> str:
    """Remove every fenced diff section, leaving the surrounding prose."""
    return DiffBlockExtractor().strip(text)


def get_diff_marker(raw_diff: str) -> str:
    """Fenced text for a block, for splitting a response around it."""
    return DiffBlockExtractor().marker(raw_diff)
