# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for checksum sidecars and release verification.
"""

from pathlib import Path

import pytest

from pkger.release.checksums.integrity import (
    parse_sidecar,
    sidecar_path,
    verify_sidecars,
    write_sidecar,
)
from pkger.utils.hashing import compute_sha256


def test_sidecar_format(tmp_path: Path):
    """The sidecar is one `sha256sum -c` compatible line with the bare file name."""
    artifact = tmp_path / "linux-amd64" / "minio_1.0.0_amd64.deb"
    artifact.parent.mkdir()
    artifact.write_bytes(b"package bytes")

    path, digest = write_sidecar(artifact)

    assert path == sidecar_path(artifact)
    assert path.name == "minio_1.0.0_amd64.deb.sha256sum"
    assert digest == compute_sha256(artifact)
    assert path.read_text() == f"{digest}  minio_1.0.0_amd64.deb"


def test_precomputed_digest_is_used(tmp_path: Path):
    artifact = tmp_path / "warp.rpm"
    artifact.write_bytes(b"x")

    path, digest = write_sidecar(artifact, digest="a" * 64)

    assert digest == "a" * 64
    assert parse_sidecar(path) == ("a" * 64, "warp.rpm")


class TestParseSidecar:
    def test_rejects_multiple_lines(self, tmp_path: Path):
        path = tmp_path / "x.sha256sum"
        path.write_text(f"{'a' * 64}  x\n{'b' * 64}  y\n")
        with pytest.raises(ValueError, match="exactly one line"):
            parse_sidecar(path)

    def test_rejects_single_space(self, tmp_path: Path):
        path = tmp_path / "x.sha256sum"
        path.write_text(f"{'a' * 64} x")
        with pytest.raises(ValueError, match="<sha256>  <filename>"):
            parse_sidecar(path)

    def test_rejects_short_digest(self, tmp_path: Path):
        path = tmp_path / "x.sha256sum"
        path.write_text("abc123  x")
        with pytest.raises(ValueError, match="64 hex chars"):
            parse_sidecar(path)

    def test_accepts_trailing_newline(self, tmp_path: Path):
        path = tmp_path / "x.sha256sum"
        path.write_text(f"{'A' * 64}  x\n")
        assert parse_sidecar(path) == ("a" * 64, "x")


def test_verification_success(tmp_path: Path):
    """Test verification passes for untouched artifacts."""
    for arch in ("amd64", "arm64"):
        artifact = tmp_path / f"linux-{arch}" / f"mcli_1.0.0_{arch}.deb"
        artifact.parent.mkdir()
        artifact.write_bytes(arch.encode())
        write_sidecar(artifact)

    result = verify_sidecars(tmp_path)
    assert result.is_valid
    assert result.checked_count == 2
    assert not result.mismatches
    assert not result.missing_files
    assert not result.errors


def test_verification_corruption(tmp_path: Path):
    """Test verification fails when an artifact is modified after publishing."""
    artifact = tmp_path / "linux-amd64" / "minio.rpm"
    artifact.parent.mkdir()
    artifact.write_bytes(b"original")
    write_sidecar(artifact)

    artifact.write_bytes(b"corrupted")

    result = verify_sidecars(tmp_path)
    assert not result.is_valid
    assert "linux-amd64/minio.rpm" in result.mismatches


def test_verification_missing_file(tmp_path: Path):
    artifact = tmp_path / "sidekick.apk"
    artifact.write_bytes(b"data")
    write_sidecar(artifact)
    artifact.unlink()

    result = verify_sidecars(tmp_path)
    assert not result.is_valid
    assert result.missing_files == ["sidekick.apk"]
    assert result.checked_count == 0


def test_verification_malformed_sidecar(tmp_path: Path):
    (tmp_path / "broken.deb.sha256sum").write_text("not a checksum")

    result = verify_sidecars(tmp_path)
    assert not result.is_valid
    assert len(result.errors) == 1


def test_verification_missing_directory(tmp_path: Path):
    result = verify_sidecars(tmp_path / "nope")
    assert not result.is_valid
    assert "not found" in result.errors[0]


def test_empty_directory_is_valid(tmp_path: Path):
    result = verify_sidecars(tmp_path)
    assert result.is_valid
    assert result.checked_count == 0


@pytest.mark.parametrize("name", ["../outside.deb", "linux-amd64/minio.deb", "..", "C:\\minio.exe"])
def test_sidecar_names_must_be_bare(tmp_path: Path, name: str):
    path = tmp_path / "x.sha256sum"
    path.write_text(f"{'a' * 64}  {name}")
    with pytest.raises(ValueError, match="bare file name"):
        parse_sidecar(path)


def test_verification_ignores_files_outside_release_dir(tmp_path: Path):
    """A sidecar pointing outside the release directory is reported, not followed."""
    outside = tmp_path / "outside.bin"
    outside.write_bytes(b"not part of the release")
    release_dir = tmp_path / "minio-release"
    release_dir.mkdir()
    (release_dir / "evil.sha256sum").write_text(f"{compute_sha256(outside)}  ../outside.bin")

    result = verify_sidecars(release_dir)
    assert not result.is_valid
    assert result.checked_count == 0
    assert "bare file name" in result.errors[0]
