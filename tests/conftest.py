# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for pkger tests.

The external packager is never run here: `fake_backend` stands in for nfpm
and writes a small deterministic file to the requested target.
"""

import textwrap
from pathlib import Path

import pytest

from pkger.release.packaging.nfpm import PackagingError

RELEASE_TAG = "RELEASE.2025-03-12T00-00-00Z"
RELEASE_VERSION = "20250312000000.0.0"


class FakeBackend:
    """Records every call and writes `<packager>:<file name>` as the package body."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Path, str]] = []

    def package(self, config_path: Path, packager: str, target: Path) -> None:
        self.calls.append((packager, target, config_path.read_text(encoding="utf-8")))
        target.write_bytes(f"{packager}:{target.name}".encode())


class FailingBackend:
    """Writes a partial file and then fails, like an nfpm crash mid-write."""

    def package(self, config_path: Path, packager: str, target: Path) -> None:
        target.write_bytes(b"partial")
        raise PackagingError(f"boom building {target.name}")


@pytest.fixture()
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
def failing_backend() -> FailingBackend:
    return FailingBackend()


def _make_release_tree(root: Path, binary: str, tag: str, arches: list[str]) -> Path:
    for arch in arches:
        arch_dir = root / f"linux-{arch}"
        arch_dir.mkdir(parents=True, exist_ok=True)
        (arch_dir / f"{binary}.{tag}").write_bytes(f"{binary}-{arch}".encode())
    return root


@pytest.fixture()
def make_release_tree():  # type: ignore[no-untyped-def]
    """Factory creating `<root>/linux-<arch>/<binary>.<tag>` for each arch."""
    return _make_release_tree


@pytest.fixture()
def minio_release_dir(tmp_path: Path) -> Path:
    """A minio-release directory with amd64 and arm64 binaries (no s390x/ppc64le)."""
    return _make_release_tree(tmp_path / "minio-release", "minio", RELEASE_TAG, ["amd64", "arm64"])


@pytest.fixture()
def systemd_unit(tmp_path: Path) -> Path:
    unit = tmp_path / "minio.service"
    unit.write_text(
        textwrap.dedent("""\
            [Unit]
            Description=MinIO
            AssertFileIsExecutable=/usr/local/bin/minio

            [Service]
            EnvironmentFile=-/etc/default/minio
            ExecStart=/usr/local/bin/minio server $MINIO_OPTS $MINIO_VOLUMES
        """),
        encoding="utf-8",
    )
    return unit


@pytest.fixture()
def tmp_config_file(tmp_path: Path) -> Path:
    """The smallest config that passes schema validation."""
    config_content = textwrap.dedent("""\
        global:
          config_version: "1.0.0"
          log_level: "DEBUG"
    """)
    config_file = tmp_path / "test_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def invalid_config_file(tmp_path: Path) -> Path:
    """Valid YAML that fails schema validation (missing config_version)."""
    config_content = textwrap.dedent("""\
        global:
          log_level: "INFO"
    """)
    config_file = tmp_path / "invalid_config.yaml"
    config_file.write_text(config_content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file
