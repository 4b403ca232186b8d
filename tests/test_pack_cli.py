# Released under MIT License.
# Copyright (c) 2025 Ladislav Bartos and Robert Vacha Lab

import zipfile
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from zipper_lib.archive import Archiver, ZipWriter
from zipper_lib.core.config import CFG
from zipper_lib.pack.cli import collect_sources, create_storage_table, pack


@pytest.fixture
def source(tmp_path) -> Path:
    root = tmp_path / "project"
    (root / "src" / "pkg").mkdir(parents=True)
    (root / ".git").mkdir()
    (root / "README.md").write_text("readme")
    (root / ".gitignore").write_text("*.pyc")
    (root / "src" / "main.py").write_text("print('hi')")
    (root / "src" / "pkg" / "mod.py").write_text("x = 1")
    (root / ".git" / "HEAD").write_text("ref")
    return root.resolve()


def _names(archive: Path) -> list[str]:
    with zipfile.ZipFile(archive) as zf:
        return zf.namelist()


def test_pack_recursive_with_strip_prefix(source, tmp_path):
    output = tmp_path / "out.zip"
    runner = CliRunner()

    result = runner.invoke(
        pack,
        [str(source), "-r", "--strip-prefix", str(source), "-o", str(output)],
    )

    assert result.exit_code == 0
    assert _names(output) == [
        ".git/",
        ".git/HEAD",
        ".gitignore",
        "README.md",
        "src/",
        "src/main.py",
        "src/pkg/",
        "src/pkg/mod.py",
    ]


def test_pack_shallow_by_default(source, tmp_path):
    output = tmp_path / "out.zip"
    runner = CliRunner()

    result = runner.invoke(
        pack, [str(source), "--strip-prefix", str(source), "-o", str(output)]
    )

    assert result.exit_code == 0
    assert _names(output) == [".gitignore", "README.md"]


def test_pack_ignore_dot_files_only(source, tmp_path):
    output = tmp_path / "out.zip"
    runner = CliRunner()

    result = runner.invoke(
        pack,
        [
            str(source),
            "-r",
            "--ignore-dot",
            "--files-only",
            "--strip-prefix",
            str(source),
            "-o",
            str(output),
        ],
    )

    assert result.exit_code == 0
    assert _names(output) == ["README.md", "src/main.py", "src/pkg/mod.py"]


@pytest.fixture
def ignore_dot_by_default(monkeypatch):
    # simulates `ignore_dot_entries = true` in the configuration file
    option = next(p for p in pack.params if p.name == "ignore_dot")
    monkeypatch.setattr(option, "default", True)


def test_pack_ignore_dot_uses_configured_default(
    source, tmp_path, ignore_dot_by_default
):
    output = tmp_path / "out.zip"
    runner = CliRunner()

    result = runner.invoke(
        pack, [str(source), "--strip-prefix", str(source), "-o", str(output)]
    )

    assert result.exit_code == 0
    assert _names(output) == ["README.md"]


def test_pack_no_ignore_dot_overrides_configured_default(
    source, tmp_path, ignore_dot_by_default
):
    output = tmp_path / "out.zip"
    runner = CliRunner()

    result = runner.invoke(
        pack,
        [
            str(source),
            "--no-ignore-dot",
            "--strip-prefix",
            str(source),
            "-o",
            str(output),
        ],
    )

    assert result.exit_code == 0
    assert _names(output) == [".gitignore", "README.md"]


def test_pack_depth(source, tmp_path):
    output = tmp_path / "out.zip"
    runner = CliRunner()

    result = runner.invoke(
        pack,
        [
            str(source / "src"),
            "-r",
            "--depth",
            "1",
            "--strip-prefix",
            str(source),
            "-o",
            str(output),
        ],
    )

    assert result.exit_code == 0
    assert _names(output) == ["src/pkg/mod.py"]


def test_pack_files_and_directories(source, tmp_path):
    output = tmp_path / "out.zip"
    runner = CliRunner()

    result = runner.invoke(
        pack,
        [
            str(source / "README.md"),
            str(source / "src"),
            "--strip-prefix",
            str(source),
            "-o",
            str(output),
        ],
    )

    assert result.exit_code == 0
    assert _names(output) == ["README.md", "src/main.py"]


def test_pack_depth_without_recursive_fails(source, tmp_path):
    output = tmp_path / "out.zip"
    runner = CliRunner()

    result = runner.invoke(pack, [str(source), "--depth", "1", "-o", str(output)])

    assert result.exit_code == CFG.exit_codes.default
    assert not output.exists()


def test_pack_negative_depth_rejected_by_click(source, tmp_path):
    runner = CliRunner()

    result = runner.invoke(
        pack, [str(source), "-r", "--depth", "-1", "-o", str(tmp_path / "out.zip")]
    )

    assert result.exit_code == 2


def test_pack_missing_source_fails(tmp_path):
    output = tmp_path / "out.zip"
    runner = CliRunner()

    result = runner.invoke(pack, [str(tmp_path / "missing"), "-o", str(output)])

    assert result.exit_code == CFG.exit_codes.default
    assert not output.exists()


def test_pack_invalid_destination_fails(source, tmp_path):
    output = tmp_path / "out.tar"
    runner = CliRunner()

    result = runner.invoke(pack, [str(source), "-o", str(output)])

    assert result.exit_code == CFG.exit_codes.default
    assert not output.exists()


def test_pack_missing_destination_directory_fails(source, tmp_path):
    runner = CliRunner()

    result = runner.invoke(
        pack, [str(source), "-o", str(tmp_path / "missing" / "out.zip")]
    )

    assert result.exit_code == CFG.exit_codes.default


def test_pack_empty_directory_creates_nothing(tmp_path):
    (tmp_path / "empty").mkdir()
    output = tmp_path / "out.zip"
    runner = CliRunner()

    result = runner.invoke(pack, [str(tmp_path / "empty"), "-o", str(output)])

    assert result.exit_code == 0
    assert not output.exists()


def test_pack_dry_run_writes_nothing(source, tmp_path):
    output = tmp_path / "out.zip"
    runner = CliRunner()

    result = runner.invoke(pack, [str(source), "--dry-run", "-o", str(output)])

    assert result.exit_code == 0
    assert "2 entries to archive" in result.output
    assert not output.exists()


def test_pack_environment_error(source, tmp_path):
    runner = CliRunner()

    with patch.object(ZipWriter, "isAvailable", return_value=False):
        result = runner.invoke(pack, [str(source), "-o", str(tmp_path / "out.zip")])

    assert result.exit_code == CFG.exit_codes.environment


def test_pack_unexpected_error(source, tmp_path):
    runner = CliRunner()

    with patch.object(Archiver, "build", side_effect=RuntimeError("boom")):
        result = runner.invoke(pack, [str(source), "-o", str(tmp_path / "out.zip")])

    assert result.exit_code == CFG.exit_codes.unexpected_error


def test_collect_sources_dispatches_by_type(source):
    archiver = MagicMock()
    archiver.getStorage.return_value = ()
    readme = source / "README.md"

    collect_sources(archiver, (readme, source), True, 2, True)

    archiver.addFile.assert_called_once_with(readme)
    archiver.addDirectoryRecursive.assert_called_once_with(source, 2, True)
    archiver.addDirectoryShallow.assert_not_called()


def test_collect_sources_shallow(source):
    archiver = MagicMock()
    archiver.getStorage.return_value = ()

    collect_sources(archiver, (source,), False, None, False)

    archiver.addDirectoryShallow.assert_called_once_with(source)
    archiver.addDirectoryRecursive.assert_not_called()


def test_create_storage_table(source):
    storage = (source / "src", source / "README.md")
    table = create_storage_table(storage)

    assert table.row_count == 2
    assert list(table.columns[0].cells) == ["dir", "file"]
    assert list(table.columns[1].cells) == [str(p) for p in storage]
