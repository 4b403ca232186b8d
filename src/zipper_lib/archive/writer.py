# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import zipfile
from abc import ABC
from importlib.util import find_spec
from pathlib import Path

from zipper_lib.core.error import ZipperError
from zipper_lib.core.logger import get_logger

logger = get_logger(__name__)


class ArchiveWriterInterface(ABC):
    """
    Abstract base class for the facility writing archive files.

    An archive writer is opened for a single destination, receives entries
    one by one and is closed once all entries have been written.
    Concrete writers must implement these methods to allow the Archiver
    to produce archives independently of the underlying library.
    """

    @staticmethod
    def isAvailable(compression: str) -> bool:
        """
        Determine whether the writer can produce archives using the given compression.

        Args:
            compression (str): Name of the compression method.

        Returns:
            bool: True if the writer is usable in the current environment, False otherwise.
        """
        raise NotImplementedError(
            "isAvailable method is not implemented for this archive writer"
        )

    def open(self, destination: Path) -> None:
        """
        Create the archive at `destination`, overwriting any existing file.

        Args:
            destination (Path): Path to the archive file.
        """
        raise NotImplementedError(
            "open method is not implemented for this archive writer"
        )

    def addDirectory(self, name: str) -> None:
        """
        Write an empty-directory marker.

        Args:
            name (str): Name of the entry inside the archive.
        """
        raise NotImplementedError(
            "addDirectory method is not implemented for this archive writer"
        )

    def addFile(self, source: Path, name: str) -> None:
        """
        Write the contents of `source` into the archive.

        Args:
            source (Path): File to read the contents from.
            name (str): Name of the entry inside the archive.
        """
        raise NotImplementedError(
            "addFile method is not implemented for this archive writer"
        )

    def close(self) -> None:
        """
        Finalize the archive and release the file handle.

        Closing a writer that is not open does nothing.
        """
        raise NotImplementedError(
            "close method is not implemented for this archive writer"
        )


class ZipWriter(ArchiveWriterInterface):
    """
    Archive writer producing standard zip files using `zipfile`.
    """

    # compression methods and the modules providing their codecs
    COMPRESSIONS: dict[str, tuple[int, str | None]] = {
        "stored": (zipfile.ZIP_STORED, None),
        "deflated": (zipfile.ZIP_DEFLATED, "zlib"),
        "bzip2": (zipfile.ZIP_BZIP2, "bz2"),
        "lzma": (zipfile.ZIP_LZMA, "lzma"),
    }

    def __init__(self, compression: str):
        """
        Initialize the ZipWriter.

        Args:
            compression (str): Name of the compression method, see `COMPRESSIONS`.

        Raises:
            ZipperError: If the compression method is not known.
        """
        # Archiver rejects unknown methods through `isAvailable` before constructing a writer,
        # this only guards writers created directly
        try:
            self._compression = ZipWriter.COMPRESSIONS[compression][0]
        except KeyError as e:
            raise ZipperError(
                f"Unknown compression method '{compression}'. Supported methods: {', '.join(ZipWriter.COMPRESSIONS)}."
            ) from e

        self._zip: zipfile.ZipFile | None = None

    @staticmethod
    def isAvailable(compression: str) -> bool:
        if compression not in ZipWriter.COMPRESSIONS:
            return False

        module = ZipWriter.COMPRESSIONS[compression][1]
        return module is None or find_spec(module) is not None

    def open(self, destination: Path) -> None:
        logger.debug(f"Opening zip archive '{destination}'.")
        self._zip = zipfile.ZipFile(
            destination,
            mode="w",
            compression=self._compression,
            strict_timestamps=False,
        )

    def addDirectory(self, name: str) -> None:
        self._requireOpen().mkdir(ZipWriter._directoryInfo(name))

    def addFile(self, source: Path, name: str) -> None:
        self._requireOpen().write(source, arcname=name)

    def close(self) -> None:
        if self._zip is None:
            return

        self._zip.close()
        self._zip = None

    def _requireOpen(self) -> zipfile.ZipFile:
        """
        Return the open archive.

        Raises:
            ZipperError: If the writer has not been opened.
        """
        if self._zip is None:
            raise ZipperError("Zip archive is not open.")

        return self._zip

    @staticmethod
    def _directoryInfo(name: str) -> zipfile.ZipInfo:
        """
        Create the entry describing an empty directory named `name`.

        Directory entries have a trailing separator and carry the directory
        flag in their external attributes.
        """
        info = zipfile.ZipInfo(name.rstrip("/") + "/")
        # drwxr-xr-x + MS-DOS directory flag
        info.external_attr = (0o40755 << 16) | 0x10
        return info
