# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Command for packing files and directories into a zip archive.

This module defines the `zipper pack` command which collects the requested
sources using the `Archiver` and writes them into a single archive.
"""
