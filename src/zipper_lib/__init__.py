# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core implementation of the zipper command-line tool.

This package collects files and directories from the filesystem and packs
them into zip archives, optionally removing a common directory prefix from
the names of the archive entries. The `Archiver` class can be used directly
as a library; all zipper CLI commands ultimately delegate to it.
"""

from .archive import Archiver
from .zipper import __version__, cli

__all__ = [
    "__version__",
    "cli",
    "Archiver",
    "archive",
    "core",
    "pack",
]
