# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import pytest

from zipper_lib.pack.cli import pack


@pytest.fixture(autouse=True)
def reset_pack_help_option():
    # click caches the help option on the command object the first time it is
    # built; invoking `pack` directly (without the `-h` context settings of the
    # parent group) would otherwise leak a `--help`-only option into later tests
    pack._help_option = None
    yield
    pack._help_option = None
