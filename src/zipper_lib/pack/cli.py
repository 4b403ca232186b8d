# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.table import Table

from zipper_lib.archive import Archiver
from zipper_lib.core.click_format import GNUHelpColorsCommand
from zipper_lib.core.config import CFG
from zipper_lib.core.error import ArchiveEnvironmentError, ZipperError
from zipper_lib.core.logger import get_logger

logger = get_logger(__name__)
console = Console()


@click.command(
    short_help="Pack files and directories into a zip archive.",
    help=f"""Pack the specified files and directories into a single zip archive.

{click.style("SOURCE", fg="green")}   Files or directories to archive. At least one is required.

Files are archived as they are. For directories, `{CFG.binary_name} pack` archives only the files located
directly inside them, unless the `--recursive` flag is used.

With `--recursive`, the whole directory tree is archived, including empty directories.
Use `--depth` to only archive entries located exactly the given number of levels below the directory
(0 = its immediate children) and `--files-only` to leave out the directories themselves.

When `--strip-prefix` is used and all archived paths are located inside the given directory,
the directory is removed from the names of the archive entries. Otherwise, the entries are stored
under their absolute paths.""",
    cls=GNUHelpColorsCommand,
    help_options_color="bright_blue",
)
@click.argument(
    "sources",
    type=click.Path(path_type=Path),
    metavar=click.style("SOURCE", fg="green"),
    nargs=-1,
    required=True,
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    required=True,
    help=f"Path of the archive to create. Must end with '{CFG.archiver.archive_suffix}'.",
)
@click.option(
    "-r",
    "--recursive",
    is_flag=True,
    help="Archive directories recursively.",
)
@click.option(
    "--depth",
    type=click.IntRange(min=0),
    default=None,
    help="Only archive entries located exactly this many levels below each directory. Requires `--recursive`.",
)
@click.option(
    "--files-only",
    is_flag=True,
    help="Do not archive directories themselves, only the files inside them.",
)
@click.option(
    "--ignore-dot/--no-ignore-dot",
    default=CFG.archiver.ignore_dot_entries,
    show_default=True,
    help="Skip (or keep) files and directories whose names start with a dot.",
)
@click.option(
    "--strip-prefix",
    type=click.Path(path_type=Path),
    default=None,
    help="Directory to remove from the names of the archive entries.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Only print the paths that would be archived.",
)
def pack(
    sources: tuple[Path, ...],
    output: Path,
    recursive: bool = False,
    depth: int | None = None,
    files_only: bool = False,
    ignore_dot: bool = False,
    strip_prefix: Path | None = None,
    dry_run: bool = False,
) -> NoReturn:
    """
    Pack the specified files and directories into a zip archive.
    """
    try:
        if depth is not None and not recursive:
            raise ZipperError("Option '--depth' can only be used with '--recursive'.")

        archiver = Archiver(ignore_dot_entries=ignore_dot)
        collect_sources(archiver, sources, recursive, depth, files_only)
        archiver.setStripPrefix(strip_prefix)

        if dry_run:
            console.print(create_storage_table(archiver.getStorage()))
            sys.exit(0)

        if archiver.build(output):
            logger.info(f"Created archive '{output}'.")
        else:
            logger.warning("Nothing to archive. No archive was created.")
        sys.exit(0)
    except (ZipperError, ArchiveEnvironmentError) as e:
        logger.error(e)
        sys.exit(e.exit_code)
    except Exception as e:
        logger.critical(e, exc_info=True, stack_info=True)
        sys.exit(CFG.exit_codes.unexpected_error)


def collect_sources(
    archiver: Archiver,
    sources: tuple[Path, ...],
    recursive: bool,
    depth: int | None,
    files_only: bool,
) -> None:
    """
    Add the specified sources to the archiver.

    Args:
        archiver (Archiver): Archiver to add the sources to.
        sources (tuple[Path, ...]): Files and directories to add.
        recursive (bool): Whether to add directories recursively.
        depth (int | None): Depth limit for recursive directories.
        files_only (bool): Whether to leave out directories when adding recursively.

    Raises:
        NotFoundError: If any of the sources does not exist.
    """
    for source in sources:
        if not source.is_dir():
            archiver.addFile(source)
        elif recursive:
            archiver.addDirectoryRecursive(source, depth, files_only)
        else:
            archiver.addDirectoryShallow(source)

        logger.debug(f"Added '{source}'. Total entries: {len(archiver.getStorage())}.")


def create_storage_table(storage: tuple[Path, ...]) -> Table:
    """
    Create a table listing the paths collected for archiving.
    """
    table = Table(title=f"{len(storage)} entries to archive", title_style="bold")
    table.add_column("Type", style="bright_blue")
    table.add_column("Path", style="white")

    for path in storage:
        table.add_row("dir" if path.is_dir() else "file", str(path))

    return table
