"""Tests for project archive packaging."""

from __future__ import annotations

import io
import stat
import zipfile
from pathlib import Path

import pytest

from hytale_modgen.scaffolder import ProjectFile, build_zip, write_tree
from hytale_modgen.scaffolder.archive import EXECUTABLE_MODE, FILE_MODE, dedupe_files

pytestmark = pytest.mark.unit


@pytest.fixture
def files() -> list[ProjectFile]:
    return [
        ProjectFile.text("README.md", "# Mod\n"),
        ProjectFile(path="gradlew", content=b"#!/bin/sh\n", mode=EXECUTABLE_MODE),
        ProjectFile.text("src/main/resources/manifest.json", "{}"),
    ]


class TestProjectFile:
    def test_text_encodes_utf8(self):
        f = ProjectFile.text("a.txt", "héllo")
        assert f.content == "héllo".encode("utf-8")
        assert f.mode == FILE_MODE

    def test_is_executable(self):
        assert ProjectFile(path="x", mode=EXECUTABLE_MODE).is_executable is True
        assert ProjectFile(path="x").is_executable is False


class TestDedupeFiles:
    def test_last_write_wins_first_position_kept(self):
        result = dedupe_files(
            [
                ProjectFile.text("a", "first"),
                ProjectFile.text("b", "b"),
                ProjectFile.text("a", "second"),
            ]
        )
        assert [f.path for f in result] == ["a", "b"]
        assert result[0].content == b"second"


class TestBuildZip:
    def test_members_in_order(self, files):
        data = build_zip(files)
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert zf.namelist() == [
                "README.md",
                "gradlew",
                "src/main/resources/manifest.json",
            ]
            assert zf.read("README.md") == b"# Mod\n"

    def test_unix_modes(self, files):
        data = build_zip(files)
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            gradlew = zf.getinfo("gradlew")
            assert gradlew.create_system == 3
            assert stat.S_IMODE(gradlew.external_attr >> 16) == 0o755
            assert stat.S_IMODE(zf.getinfo("README.md").external_attr >> 16) == 0o644

    def test_fixed_timestamps(self, files):
        data = build_zip(files)
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert {info.date_time for info in zf.infolist()} == {(1980, 1, 1, 0, 0, 0)}

    def test_deterministic(self, files):
        assert build_zip(files) == build_zip(files)

    def test_duplicates_collapsed(self):
        data = build_zip([ProjectFile.text("a", "1"), ProjectFile.text("a", "2")])
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert zf.namelist() == ["a"]
            assert zf.read("a") == b"2"

    def test_stored_level_larger(self):
        payload = [ProjectFile.text("big.txt", "x" * 10_000)]
        assert len(build_zip(payload, compression_level=0)) > len(build_zip(payload, compression_level=9))

    def test_empty(self):
        data = build_zip([])
        with zipfile.ZipFile(io.BytesIO(data)) as zf:
            assert zf.namelist() == []

    @pytest.mark.parametrize("level", [-1, 10])
    def test_invalid_level(self, files, level):
        with pytest.raises(ValueError, match="compression_level"):
            build_zip(files, compression_level=level)

    @pytest.mark.parametrize("path", ["/etc/passwd", "../escape.txt", "a/../../b"])
    def test_unsafe_path(self, path):
        with pytest.raises(ValueError, match="Unsafe archive path"):
            build_zip([ProjectFile.text(path, "x")])


class TestWriteTree:
    @pytest.mark.asyncio
    async def test_writes_files_and_modes(self, files, tmp_path: Path):
        written = await write_tree(files, tmp_path / "Mod")

        root = tmp_path / "Mod"
        assert written == [
            root / "README.md",
            root / "gradlew",
            root / "src" / "main" / "resources" / "manifest.json",
        ]
        assert (root / "README.md").read_bytes() == b"# Mod\n"
        assert stat.S_IMODE((root / "gradlew").stat().st_mode) == 0o755
        assert stat.S_IMODE((root / "README.md").stat().st_mode) == 0o644

    @pytest.mark.asyncio
    async def test_unsafe_path(self, tmp_path: Path):
        with pytest.raises(ValueError, match="Unsafe archive path"):
            await write_tree([ProjectFile.text("../x", "x")], tmp_path / "Mod")
        assert not (tmp_path / "x").exists()
