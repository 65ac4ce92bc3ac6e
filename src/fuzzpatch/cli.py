from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

import click
from rich import console as rich_console
from rich import table as rich_table
from rich import text as rich_text

from fuzzpatch.extract import DiffBlockExtractor
from fuzzpatch.files import FileSystemDiffTarget, apply_block_to_file
from fuzzpatch.logger import configure_logging
from fuzzpatch.models import BlockStatus, render_hunk
from fuzzpatch.settings import LogLevel, Settings, load_settings


def _load(config: Optional[Path], log_level: Optional[str]) -> Settings:
    settings = load_settings(config) if config is not None else Settings()
    if log_level:
        settings.logging.default_level = LogLevel(log_level)
    configure_logging(settings.logging)
    return settings


def _read_response(path: Path) -> str:
    return path.read_text(encoding="utf-8")


_common_options = [
    click.option(
        "--config",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        default=None,
        help="YAML or JSON5 settings file.",
    ),
    click.option(
        "--log-level",
        type=click.Choice([lvl.value for lvl in LogLevel]),
        default=None,
    ),
]


def _with_common_options(fn):
    for opt in reversed(_common_options):
        fn = opt(fn)
    return fn


@click.group()
def main() -> None:
    """Extract unified diffs from model output and apply them fuzzily."""


@main.command()
@click.argument("response", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--show-hunks", is_flag=True, help="Print every hunk of every block.")
@_with_common_options
def extract(
    response: Path, show_hunks: bool, config: Optional[Path], log_level: Optional[str]
) -> None:
    """List the ```diff blocks found in RESPONSE."""
    settings = _load(config, log_level)
    console = rich_console.Console(soft_wrap=True)
    blocks = DiffBlockExtractor(settings.extractor).extract(_read_response(response))

    if not blocks:
        console.print("No diff blocks found.")
        return

    table = rich_table.Table()
    for col in ("id", "file", "hunks", "+", "-", "parsed"):
        table.add_column(col)
    for block in blocks:
        hunks = len(block.parsed.hunks) if block.parsed else 0
        table.add_row(
            block.id,
            block.file_name,
            str(hunks),
            rich_text.Text(f"+{block.additions}", style="green"),
            rich_text.Text(f"-{block.deletions}", style="red"),
            "yes" if block.is_parsed else "no",
        )
    console.print(table)

    if show_hunks:
        for block in blocks:
            console.print(rich_text.Text(block.file_name, style="bold"))
            if block.parsed is None:
                console.print(rich_text.Text(block.raw_diff))
                continue
            for hunk in block.parsed.hunks:
                console.print(rich_text.Text(render_hunk(hunk)))


@main.command()
@click.argument("response", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    required=True,
    help="Directory the diff file names are relative to.",
)
@click.option("--only", "only", multiple=True, help="Apply only blocks for these files.")
@click.option("--dry-run", is_flag=True, help="Do not write any file.")
@_with_common_options
@click.pass_context
def apply(
    ctx: click.Context,
    response: Path,
    root: Path,
    only: Tuple[str, ...],
    dry_run: bool,
    config: Optional[Path],
    log_level: Optional[str],
) -> None:
    """Apply the ```diff blocks in RESPONSE to files under --root."""
    settings = _load(config, log_level)
    console = rich_console.Console(soft_wrap=True)
    target = FileSystemDiffTarget(root)
    blocks = DiffBlockExtractor(settings.extractor).extract(_read_response(response))
    if only:
        wanted = set(only)
        blocks = [b for b in blocks if b.file_name in wanted]

    if not blocks:
        console.print("No diff blocks to apply.")
        return

    failed = 0
    for block in blocks:
        result = apply_block_to_file(block, target, settings.locator, dry_run=dry_run)
        if result.success:
            block.status = BlockStatus.ACCEPTED
            verb = "Would apply" if dry_run else "Applied"
            console.print(rich_text.Text(f"{verb}: {result.file_name}", style="green"))
        else:
            failed += 1
            console.print(rich_text.Text(f"Failed: {result.file_name}", style="red"))
            console.print(rich_text.Text(result.error or ""))

    if failed:
        ctx.exit(1)


if __name__ == "__main__":
    main()
