from fuzzpatch.models import LineKind, render_hunk
from fuzzpatch.parser import parse_diff


def test_two_line_input_is_not_a_diff():
    assert parse_diff("--- a/notes.md\n@@ -1 +1 @@") is None
    assert parse_diff("") is None


def test_missing_destination_header_is_not_a_diff():
    text = "\n".join(
        [
            "--- a/notes.md",
            "@@ -1,2 +1,2 @@",
            " keep",
            "-old",
            "+new",
        ]
    )
    assert parse_diff(text) is None


def test_parses_headers_hunks_and_line_kinds():
    text = "\n".join(
        [
            "--- a/docs/Overview.md",
            "+++ b/docs/Overview.md",
            "@@ -3,3 +3,3 @@",
            " # Title",
            "-old line",
            "+new line",
            " tail",
        ]
    )
    parsed = parse_diff(text)

    assert parsed is not None
    assert parsed.file_name == "docs/Overview.md"
    assert parsed.old_file_name == "docs/Overview.md"
    assert len(parsed.hunks) == 1
    hunk = parsed.hunks[0]
    assert (hunk.old_start, hunk.old_count, hunk.new_start, hunk.new_count) == (3, 3, 3, 3)
    assert [(ln.kind, ln.content) for ln in hunk.lines] == [
        (LineKind.CONTEXT, "# Title"),
        (LineKind.REMOVE, "old line"),
        (LineKind.ADD, "new line"),
        (LineKind.CONTEXT, "tail"),
    ]
    assert hunk.old_pattern == ["# Title", "old line", "tail"]
    assert hunk.new_content == ["# Title", "new line", "tail"]


def test_destination_name_wins_over_old_name():
    text = "--- old/name.txt\n+++ new/name.txt\n@@ -1 +1 @@\n-a\n+b"
    parsed = parse_diff(text)

    assert parsed is not None
    assert parsed.file_name == "new/name.txt"
    assert parsed.old_file_name == "old/name.txt"


def test_omitted_counts_default_to_one():
    text = "--- a/x.txt\n+++ b/x.txt\n@@ -7 +9 @@\n-a\n+b"
    hunk = parse_diff(text).hunks[0]

    assert hunk.old_start == 7
    assert hunk.new_start == 9
    assert hunk.old_count == 1
    assert hunk.new_count == 1


def test_context_without_leading_space_is_kept_verbatim():
    text = "\n".join(
        [
            "--- a/x.txt",
            "+++ b/x.txt",
            "@@ -1,3 +1,3 @@",
            "no leading space",
            "  two spaces",
            "",
            "-gone",
        ]
    )
    hunk = parse_diff(text).hunks[0]

    assert hunk.lines[0].kind == LineKind.CONTEXT
    assert hunk.lines[0].content == "no leading space"
    assert hunk.lines[1].content == " two spaces"
    assert hunk.lines[2].kind == LineKind.CONTEXT
    assert hunk.lines[2].content == ""


def test_multiple_hunks_keep_source_order_and_last_is_flushed():
    text = "\n".join(
        [
            "diff --git a/x.txt b/x.txt",
            "index 123..456 100644",
            "--- a/x.txt",
            "+++ b/x.txt",
            "@@ -10,1 +10,1 @@",
            "-ten",
            "+TEN",
            "@@ -2,1 +2,1 @@",
            "-two",
            "+TWO",
        ]
    )
    parsed = parse_diff(text)

    assert [h.old_start for h in parsed.hunks] == [10, 2]
    assert parsed.hunks[1].add_lines == ["TWO"]
    assert parsed.additions == 2
    assert parsed.deletions == 2


def test_lines_before_first_hunk_are_ignored():
    parsed = parse_diff("--- a/x.txt\n+++ b/x.txt\nstray text")

    assert parsed is not None
    assert parsed.hunks == []


def test_render_hunk_round_trips_body():
    text = "--- a/x.txt\n+++ b/x.txt\n@@ -1,2 +1,2 @@\n keep\n-old\n+new"
    hunk = parse_diff(text).hunks[0]

    assert render_hunk(hunk) == "@@ -1,2 +1,2 @@\n keep\n-old\n+new"
