from __future__ import annotations

import pathlib
from dataclasses import dataclass
from typing import Dict, Optional

from .apply import apply_diff
from .logger import logger
from .models import DiffBlock, DiffError
from .settings import LocatorSettings


class FileSystemDiffTarget:
    """
    Reads and writes text files under base_path, refusing paths that would
    escape it, and records which files were written.
    """

    def __init__(self, base_path: pathlib.Path):
        self._base_path = pathlib.Path(base_path)
        self._changes: Dict[str, str] = {}

    def _resolve_safe_path(self, rel: str) -> pathlib.Path:
        if rel.startswith("/") or rel.startswith("~"):
            raise DiffError(f"Absolute paths are not allowed: {rel}")
        abs_path = (self._base_path / rel).resolve()
        base_resolved = self._base_path.resolve()
        if abs_path == base_resolved or base_resolved in abs_path.parents:
            return abs_path
        raise DiffError(f"Path escapes project root: {rel}")

    def open(self, rel: str) -> str:
        path = self._resolve_safe_path(rel)
        with path.open("rt", encoding="utf-8", newline="") as fh:
            return fh.read()

    def write(self, rel: str, content: str) -> None:
        path = self._resolve_safe_path(rel)
        with path.open("wt", encoding="utf-8", newline="") as fh:
            fh.write(content)
        self._changes[rel] = "updated"

    @property
    def changes_map(self) -> Dict[str, str]:
        return self._changes


@dataclass
class BlockApplyResult:
    file_name: str
    success: bool
    error: Optional[str] = None
    new_text: Optional[str] = None


def apply_block_to_file(
    block: DiffBlock,
    target: FileSystemDiffTarget,
    settings: Optional[LocatorSettings] = None,
    *,
    dry_run: bool = False,
) -> BlockApplyResult:
    """
    Apply one extracted block to its file. Failures are reported in the
    result, not raised; block.status is left for the caller to update.
    """
    if block.parsed is None:
        return BlockApplyResult(
            file_name=block.file_name,
            success=False,
            error="Not a valid unified diff (missing '+++' header or hunks).",
        )

    name = block.parsed.file_name
    try:
        original = target.open(name)
    except (OSError, DiffError) as e:
        return BlockApplyResult(
            file_name=name,
            success=False,
            error=f"Failed to read file: {name} ({type(e).__name__}: {e})",
        )

    # Hunks are applied to "\n"-joined text; CRLF files get their endings back on write.
    newline = "\r\n" if "\r\n" in original else "\n"
    try:
        new_text = apply_diff(original.replace("\r\n", "\n"), block.parsed, settings)
    except DiffError as e:
        return BlockApplyResult(file_name=name, success=False, error=str(e))
    if newline != "\n":
        new_text = new_text.replace("\n", newline)

    if not dry_run:
        try:
            target.write(name, new_text)
        except OSError as e:
            return BlockApplyResult(
                file_name=name,
                success=False,
                error=f"Failed to write file: {name} ({type(e).__name__}: {e})",
            )
    logger.info("Applied diff block", file=name, block_id=block.id, dry_run=dry_run)
    return BlockApplyResult(file_name=name, success=True, new_text=new_text)
