# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Exception types used throughout zipper.

This module defines the recoverable zipper errors raised while collecting
sources and validating archive destinations, and the fatal error raised when
the zip facility itself is unavailable. Each exception carries an associated
exit code used by zipper commands to report failures consistently.
"""

from .config import CFG


class ZipperError(Exception):
    """Common exception type for all recoverable zipper errors."""

    exit_code = CFG.exit_codes.default


class NotFoundError(ZipperError):
    """Raised when a source file or directory does not exist."""

    pass


class InvalidDestinationError(ZipperError):
    """Raised when the destination of an archive does not have the archive suffix."""

    pass


class DestinationNotFoundError(ZipperError):
    """Raised when the directory the archive should be written into does not exist."""

    pass


class ArchiveEnvironmentError(Exception):
    """
    Raised when the zip facility required by zipper is not available.

    Signals a broken environment rather than a bad input and cannot be recovered from.
    """

    exit_code = CFG.exit_codes.environment
