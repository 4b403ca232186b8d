# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

"""
Core infrastructure for zipper.

This module collects the foundational helpers used across the zipper codebase:
configuration, error types, structured logging, and help formatting for the
command-line interface.
"""
