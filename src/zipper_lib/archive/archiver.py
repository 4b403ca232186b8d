# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Self

from zipper_lib.core.config import CFG
from zipper_lib.core.error import (
    ArchiveEnvironmentError,
    DestinationNotFoundError,
    InvalidDestinationError,
    NotFoundError,
)
from zipper_lib.core.logger import get_logger

from .writer import ArchiveWriterInterface, ZipWriter

logger = get_logger(__name__)


class Archiver:
    """
    Collects files and directories and packs them into a single zip archive.

    Paths are accumulated in an ordered, duplicate-free storage by the `add*` methods
    and written into an archive by `build`. After a successful build, the storage and
    the strip prefix are cleared so the same instance can be used again.

    All mutating methods return the Archiver itself so that calls can be chained:

        Archiver().addDirectoryRecursive(src).setStripPrefix(src).build(dest)

    An Archiver is not safe for concurrent use. Use one instance per archive.
    """

    def __init__(
        self,
        writer: type[ArchiveWriterInterface] = ZipWriter,
        compression: str | None = None,
        ignore_dot_entries: bool | None = None,
    ):
        """
        Initialize the Archiver.

        Args:
            writer (type[ArchiveWriterInterface]): Facility used to write the archive.
                Defaults to `ZipWriter`.
            compression (str | None): Compression method for archive entries.
                Defaults to the configured compression.
            ignore_dot_entries (bool | None): Whether to skip entries starting with a dot.
                Defaults to the configured value.

        Raises:
            ArchiveEnvironmentError: If the writer cannot produce archives
                with the requested compression in the current environment.
        """
        self._compression = compression or CFG.archiver.compression
        if not writer.isAvailable(self._compression):
            raise ArchiveEnvironmentError(
                f"Archive writer '{writer.__name__}' is not available for compression '{self._compression}'."
            )

        self._writer = writer
        self._ignore_dot_entries = (
            CFG.archiver.ignore_dot_entries
            if ignore_dot_entries is None
            else ignore_dot_entries
        )

        # dict is used as an insertion-ordered set
        self._storage: dict[Path, None] = {}
        self._strip_prefix: Path | None = None

    def addFile(self, path: Path | str) -> Self:
        """
        Add a single file to the storage.

        Args:
            path (Path | str): Path to an existing regular file.

        Raises:
            NotFoundError: If the file does not exist or is not a regular file.
        """
        path = Path(path)
        if not path.is_file():
            raise NotFoundError(f"File '{path}' does not exist.")

        self._store([path.resolve()])
        return self

    def addDirectoryShallow(self, path: Path | str) -> Self:
        """
        Add the files located directly inside a directory to the storage.

        Subdirectories and their contents are not added.

        Args:
            path (Path | str): Path to an existing directory.

        Raises:
            NotFoundError: If the directory does not exist.
        """
        directory = Archiver._requireDirectory(path)
        self._store(
            entry for entry in self._listDirectory(directory) if entry.is_file()
        )
        return self

    def addDirectoryRecursive(
        self, path: Path | str, depth: int | None = None, files_only: bool = False
    ) -> Self:
        """
        Add the contents of a directory tree to the storage.

        The tree is traversed in pre-order with entries of each directory sorted
        lexicographically. Symbolic links to directories are not followed.
        The directory itself is never added.

        Args:
            path (Path | str): Path to an existing directory.
            depth (int | None): If `None`, entries at any depth are added.
                Otherwise, only entries exactly `depth` levels below `path` are added
                (0 = immediate children). Defaults to `None`.
            files_only (bool): If True, directories are not added as entries,
                so the archive will contain no empty-directory markers. Defaults to False.

        Raises:
            NotFoundError: If the directory does not exist.
            ValueError: If `depth` is negative.
        """
        if depth is not None and depth < 0:
            raise ValueError(f"Depth must be non-negative, got '{depth}'.")

        directory = Archiver._requireDirectory(path)

        # collect everything first so that storage is not modified if the traversal fails
        collected = list(self._walk(directory, depth, files_only, 0))
        logger.debug(f"Collected {len(collected)} entries from '{directory}'.")

        self._store(collected)
        return self

    def setStripPrefix(self, path: Path | str | None) -> Self:
        """
        Set the path prefix removed from the names of archive entries.

        The prefix is only applied if all entries in the storage are located under it
        at the time of building the archive. Otherwise, no entry is stripped.

        Args:
            path (Path | str | None): The prefix to strip. `None` or an empty string
                disables stripping.
        """
        self._strip_prefix = Path(path) if path else None
        return self

    def setIgnoreDotEntries(self, ignore: bool) -> Self:
        """
        Set whether entries whose name starts with a dot are skipped by subsequent add-operations.
        """
        self._ignore_dot_entries = ignore
        return self

    def getStorage(self) -> tuple[Path, ...]:
        """
        Get the paths collected so far in the order they were added.
        """
        return tuple(self._storage)

    def purgeStorage(self) -> Self:
        """
        Remove all collected paths. The strip prefix is kept.
        """
        self._storage.clear()
        return self

    def build(self, destination: Path | str) -> bool:
        """
        Write all collected paths into a zip archive.

        Directories are written as empty-directory markers, files with their full contents.
        Any existing file at `destination` is overwritten. After a successful build,
        the storage and the strip prefix are cleared.

        Args:
            destination (Path | str): Path of the archive to create.

        Returns:
            bool: True if the archive was written, False if the storage is empty
            and nothing was done.

        Raises:
            InvalidDestinationError: If `destination` does not end with the archive suffix.
            DestinationNotFoundError: If the parent directory of `destination` does not exist.
            NotFoundError: If any collected path no longer exists.
        """
        destination = Path(destination)
        Archiver._checkDestination(destination)

        if not self._storage:
            logger.debug("Nothing to archive.")
            return False

        if missing := [path for path in self._storage if not path.exists()]:
            raise NotFoundError(
                f"Files or directories no longer exist: {', '.join(str(x) for x in missing)}."
            )

        prefix = self._getActivePrefix()
        logger.debug(
            f"Building archive '{destination}' from {len(self._storage)} entries (strip prefix: {prefix})."
        )

        archive = destination.resolve()
        writer = self._writer(self._compression)
        writer.open(destination)
        try:
            for path in self._storage:
                # the archive may itself be part of a previously collected tree
                if path == archive:
                    logger.warning(
                        f"Skipping '{path}' since it is the archive being built."
                    )
                    continue

                name = Archiver._entryName(path, prefix)
                if path.is_dir():
                    writer.addDirectory(name)
                else:
                    writer.addFile(path, name)
        finally:
            writer.close()

        self._reset()
        return True

    def zipDirectory(
        self,
        source: Path | str,
        destination_dir: Path | str,
        filename: str | None = None,
    ) -> Path | None:
        """
        Archive a whole directory tree in a single call.

        The source directory is stripped from the names of the entries,
        so the archive contains the tree relative to `source`.

        Args:
            source (Path | str): Directory to archive.
            destination_dir (Path | str): Directory to write the archive into.
            filename (str | None): Name of the archive. Defaults to the name of
                `source` with the archive suffix.

        Returns:
            Path | None: Path to the created archive or `None` if `source` is empty.

        Raises:
            NotFoundError: If `source` is not an existing directory.
            DestinationNotFoundError: If `destination_dir` is not an existing directory.
            InvalidDestinationError: If `filename` does not end with the archive suffix.
        """
        source = Archiver._requireDirectory(source)
        destination_dir = Path(destination_dir)
        if not destination_dir.is_dir():
            raise DestinationNotFoundError(
                f"Destination directory '{destination_dir}' does not exist."
            )

        destination = destination_dir / (
            filename or f"{source.name}{CFG.archiver.archive_suffix}"
        )

        # fail before collecting anything so that no stale state is left behind
        Archiver._checkDestination(destination)

        if self.addDirectoryRecursive(source).setStripPrefix(source).build(destination):
            return destination

        # nothing was archived, the prefix set above must not leak into later builds
        self.setStripPrefix(None)
        return None

    def _store(self, paths: Iterable[Path]) -> None:
        """
        Append paths to the storage, skipping those that are already present.
        """
        for path in paths:
            self._storage.setdefault(path)

    def _listDirectory(self, directory: Path) -> list[Path]:
        """
        List the entries of a directory in lexicographic order, honoring the dot-entry setting.
        """
        return sorted(
            entry
            for entry in directory.iterdir()
            if not (self._ignore_dot_entries and entry.name.startswith("."))
        )

    def _walk(
        self, directory: Path, depth: int | None, files_only: bool, level: int
    ) -> Iterator[Path]:
        """
        Yield the entries of a directory tree in pre-order.

        Args:
            directory (Path): Directory currently being traversed.
            depth (int | None): Only yield entries at this level. `None` means all levels.
            files_only (bool): Do not yield directories.
            level (int): Level of the entries of `directory` relative to the root of the traversal.
        """
        for entry in self._listDirectory(directory):
            is_dir = entry.is_dir()
            if not is_dir and not entry.is_file():
                logger.debug(f"Skipping '{entry}': not a regular file or directory.")
                continue

            if (depth is None or level == depth) and not (files_only and is_dir):
                yield entry

            if is_dir and not entry.is_symlink() and (depth is None or level < depth):
                yield from self._walk(entry, depth, files_only, level + 1)

    def _getActivePrefix(self) -> Path | None:
        """
        Return the prefix to strip from entry names in this build.

        The prefix is only used if every collected path is located strictly under it.
        If even a single path is not, stripping is disabled for all entries.
        """
        if self._strip_prefix is None:
            return None

        prefix = self._strip_prefix.resolve()
        if all(
            path != prefix and path.is_relative_to(prefix) for path in self._storage
        ):
            return prefix

        logger.debug(
            f"Not all entries are located in '{prefix}'. Entry names will not be stripped."
        )
        return None

    def _reset(self) -> None:
        """
        Clear the storage and the strip prefix.
        """
        self._storage.clear()
        self._strip_prefix = None

    @staticmethod
    def _entryName(path: Path, prefix: Path | None) -> str:
        """
        Get the name under which `path` is stored in the archive.

        Args:
            path (Path): Absolute path to the file or directory.
            prefix (Path | None): Prefix to remove from the path, if any.

        Returns:
            str: Relative, '/'-separated name of the entry.
        """
        if prefix is not None:
            return path.relative_to(prefix).as_posix()

        # remove the leading separator (and drive, if any)
        return path.relative_to(path.anchor).as_posix()

    @staticmethod
    def _requireDirectory(path: Path | str) -> Path:
        """
        Get the absolute path to an existing directory.

        Raises:
            NotFoundError: If the directory does not exist.
        """
        path = Path(path)
        if not path.is_dir():
            raise NotFoundError(f"Directory '{path}' does not exist.")

        return path.resolve()

    @staticmethod
    def _checkDestination(destination: Path) -> None:
        """
        Make sure that an archive can be written to `destination`.

        Raises:
            InvalidDestinationError: If `destination` does not end with the archive suffix.
            DestinationNotFoundError: If the parent directory of `destination` does not exist.
        """
        suffix = CFG.archiver.archive_suffix
        if not str(destination).endswith(suffix):
            raise InvalidDestinationError(
                f"Destination '{destination}' is not a '{suffix}' file."
            )

        if not destination.parent.is_dir():
            raise DestinationNotFoundError(
                f"Directory '{destination.parent}' does not exist."
            )
