# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Utilities for packing files and directories into zip archives.

This module provides the `Archiver` class, which collects paths from the
filesystem and writes them into a single archive, and the archive writers
it delegates the actual zip encoding to.
"""

from .archiver import Archiver
from .writer import ArchiveWriterInterface, ZipWriter

__all__ = [
    "Archiver",
    "ArchiveWriterInterface",
    "ZipWriter",
]
