from pathlib import Path

import pytest

from fuzzpatch.extract import extract_diff_blocks
from fuzzpatch.files import FileSystemDiffTarget, apply_block_to_file
from fuzzpatch.models import BlockStatus, DiffError


def _block(name: str, *body: str):
    text = "\n".join(["```diff", f"--- a/{name}", f"+++ b/{name}", *body, "```"])
    return extract_diff_blocks(text)[0]


def test_apply_block_writes_file(tmp_path: Path):
    (tmp_path / "notes.md").write_text("# Notes\nold\n", encoding="utf-8")
    target = FileSystemDiffTarget(tmp_path)
    block = _block("notes.md", "@@ -1,2 +1,2 @@", " # Notes", "-old", "+new")

    result = apply_block_to_file(block, target)

    assert result.success
    assert result.error is None
    assert (tmp_path / "notes.md").read_text(encoding="utf-8") == "# Notes\nnew\n"
    assert target.changes_map == {"notes.md": "updated"}
    # the review workflow owns status
    assert block.status == BlockStatus.PENDING


def test_dry_run_leaves_file_untouched(tmp_path: Path):
    (tmp_path / "notes.md").write_text("old", encoding="utf-8")
    target = FileSystemDiffTarget(tmp_path)
    block = _block("notes.md", "@@ -1 +1 @@", "-old", "+new")

    result = apply_block_to_file(block, target, dry_run=True)

    assert result.success
    assert result.new_text == "new"
    assert (tmp_path / "notes.md").read_text(encoding="utf-8") == "old"
    assert target.changes_map == {}


def test_unparsed_block_is_reported(tmp_path: Path):
    block = extract_diff_blocks("```diff\nnope\n```")[0]

    result = apply_block_to_file(block, FileSystemDiffTarget(tmp_path))

    assert not result.success
    assert "Not a valid unified diff" in result.error


def test_missing_file_is_reported(tmp_path: Path):
    block = _block("absent.md", "@@ -1 +1 @@", "-a", "+b")

    result = apply_block_to_file(block, FileSystemDiffTarget(tmp_path))

    assert not result.success
    assert "Failed to read file: absent.md" in result.error


def test_unplaceable_hunk_is_reported(tmp_path: Path):
    (tmp_path / "notes.md").write_text("a\nb", encoding="utf-8")
    block = _block("notes.md", "@@ -0,1 +0,1 @@", "-zzz", "+q")

    result = apply_block_to_file(block, FileSystemDiffTarget(tmp_path))

    assert not result.success
    assert 'Looking for: "zzz"' in result.error
    assert (tmp_path / "notes.md").read_text(encoding="utf-8") == "a\nb"


@pytest.mark.parametrize("rel", ["../outside.md", "/etc/passwd", "~/notes.md"])
def test_paths_outside_root_are_rejected(tmp_path: Path, rel: str):
    target = FileSystemDiffTarget(tmp_path / "root")

    with pytest.raises(DiffError):
        target.open(rel)


def test_escaping_block_is_reported_not_raised(tmp_path: Path):
    root = tmp_path / "root"
    root.mkdir()
    (tmp_path / "outside.md").write_text("a", encoding="utf-8")
    block = _block("../outside.md", "@@ -1 +1 @@", "-a", "+b")

    result = apply_block_to_file(block, FileSystemDiffTarget(root))

    assert not result.success
    assert "escapes project root" in result.error
    assert (tmp_path / "outside.md").read_text(encoding="utf-8") == "a"


def test_crlf_file_keeps_crlf_endings(tmp_path: Path):
    (tmp_path / "notes.md").write_bytes(b"head\r\n# Notes\r\nold\r\ntail\r\nend\r\n")
    block = _block("notes.md", "@@ -2,3 +2,3 @@", " # Notes", "-old", "+new", " tail")

    result = apply_block_to_file(block, FileSystemDiffTarget(tmp_path))

    assert result.success, result.error
    assert (tmp_path / "notes.md").read_bytes() == b"head\r\n# Notes\r\nnew\r\ntail\r\nend\r\n"


def test_lf_file_is_written_with_lf(tmp_path: Path):
    (tmp_path / "notes.md").write_bytes(b"# Notes\nold\n")
    block = _block("notes.md", "@@ -1,2 +1,2 @@", " # Notes", "-old", "+new")

    apply_block_to_file(block, FileSystemDiffTarget(tmp_path))

    assert (tmp_path / "notes.md").read_bytes() == b"# Notes\nnew\n"
