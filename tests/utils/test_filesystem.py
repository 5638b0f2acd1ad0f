# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for filesystem utilities: atomic writes, symlink replacement and safe deletes.

Atomic writes are checked by verifying that the target holds the full new
content and that no temp files remain next to it.
"""

import os
import stat
from pathlib import Path

import pytest

from pkger.utils.filesystem import atomic_write, replace_symlink, safe_delete


class TestAtomicWrite:
    def test_writes_content_successfully(self, tmp_path: Path) -> None:
        target = tmp_path / "downloads-minio.json"
        atomic_write(target, "{}")

        assert target.read_text(encoding="utf-8") == "{}"

    def test_creates_parent_directories(self, tmp_path: Path) -> None:
        target = tmp_path / "minio-release" / "linux-amd64" / "x.sha256sum"
        atomic_write(target, "nested content")

        assert target.read_text(encoding="utf-8") == "nested content"

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "overwrite.txt"
        atomic_write(target, "first version")
        atomic_write(target, "second version")

        assert target.read_text(encoding="utf-8") == "second version"

    def test_no_leftover_temp_files_on_success(self, tmp_path: Path) -> None:
        atomic_write(tmp_path / "clean.txt", "clean write")
        assert list(tmp_path.glob(".pkger_tmp_*")) == []

    def test_result_is_world_readable(self, tmp_path: Path) -> None:
        target = tmp_path / "public.json"
        atomic_write(target, "{}")
        assert stat.S_IMODE(target.stat().st_mode) == 0o644


class TestReplaceSymlink:
    def test_creates_relative_link(self, tmp_path: Path) -> None:
        (tmp_path / "minio_2_amd64.deb").write_text("pkg")
        link = tmp_path / "minio.deb"

        replace_symlink(link, "minio_2_amd64.deb")

        assert os.readlink(link) == "minio_2_amd64.deb"
        assert link.read_text() == "pkg"

    def test_replaces_existing_link(self, tmp_path: Path) -> None:
        link = tmp_path / "minio.deb"
        replace_symlink(link, "old.deb")
        replace_symlink(link, "new.deb")

        assert os.readlink(link) == "new.deb"
        assert [p.name for p in tmp_path.iterdir()] == ["minio.deb"]


class TestSafeDelete:
    def test_deletes_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "partial.rpm"
        target.write_text("partial", encoding="utf-8")

        assert safe_delete(target) is True
        assert not target.exists()

    def test_returns_false_for_missing_file(self, tmp_path: Path) -> None:
        assert safe_delete(tmp_path / "nonexistent.txt") is False

    def test_raises_on_directory(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            safe_delete(tmp_path)
