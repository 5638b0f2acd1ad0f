# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Checksum sidecars for release artifacts.

Each artifact `X` is published with `X.sha256sum`, a single line in GNU
coreutils format so users can check it with `sha256sum -c`:

    <sha256hex>  <file name>

The file name is the bare name, not a path, because the sidecar always
sits next to the artifact it describes.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from pkger.logging.logger import get_logger
from pkger.utils.filesystem import atomic_write
from pkger.utils.hashing import compute_sha256

_logger: logging.Logger = get_logger(__name__)

SIDECAR_SUFFIX = ".sha256sum"


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of verifying every sidecar under a release directory."""

    is_valid: bool
    checked_count: int
    mismatches: list[str] = field(default_factory=list)
    missing_files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def sidecar_path(artifact: Path) -> Path:
    return artifact.with_name(artifact.name + SIDECAR_SUFFIX)


def format_sidecar(digest: str, file_name: str) -> str:
    return f"{digest}  {file_name}"


def write_sidecar(artifact: Path, digest: str | None = None) -> tuple[Path, str]:
    """
    Write `<artifact>.sha256sum` and return (sidecar path, digest).

    The digest is computed from the file unless the caller already has it.
    """
    if digest is None:
        digest = compute_sha256(artifact)

    path = sidecar_path(artifact)
    atomic_write(path, format_sidecar(digest, artifact.name))

    _logger.debug(
        "Checksum sidecar written",
        extra={"path": str(path), "sha256": digest[:16] + "..."},
    )
    return path, digest


def parse_sidecar(path: Path) -> tuple[str, str]:
    """
    Read a sidecar and return (digest, file name).

    Raises:
        ValueError: If the content is not a single `<sha256>  <name>` line, or
            the name is a path rather than a bare file name.
    """
    content = path.read_text(encoding="utf-8").strip()
    lines = content.splitlines()
    if len(lines) != 1:
        raise ValueError(f"{path.name}: expected exactly one line, got {len(lines)}")

    parts = lines[0].split("  ", maxsplit=1)
    if len(parts) != 2:
        raise ValueError(f"{path.name}: expected '<sha256>  <filename>', got {lines[0]!r}")

    digest, file_name = parts
    if len(digest) != 64:
        raise ValueError(f"{path.name}: expected 64 hex chars, got {len(digest)}")
    # A sidecar always names a file in its own directory.
    if "/" in file_name or "\\" in file_name or file_name in ("", ".", ".."):
        raise ValueError(f"{path.name}: expected a bare file name, got {file_name!r}")
    return digest.lower(), file_name


def verify_sidecars(release_dir: Path) -> VerificationResult:
    """
    Check every `*.sha256sum` under `release_dir` against the file it names.

    All problems are collected, not just the first one.
    """
    if not release_dir.is_dir():
        return VerificationResult(
            is_valid=False,
            checked_count=0,
            errors=[f"release directory not found: {release_dir}"],
        )

    mismatches: list[str] = []
    missing_files: list[str] = []
    errors: list[str] = []
    checked = 0

    for sidecar in sorted(release_dir.rglob(f"*{SIDECAR_SUFFIX}")):
        try:
            expected, file_name = parse_sidecar(sidecar)
        except ValueError as err:
            errors.append(str(err))
            continue

        artifact = sidecar.parent / file_name
        display = str(artifact.relative_to(release_dir))
        if not artifact.is_file():
            missing_files.append(display)
            _logger.error("Artifact missing for sidecar", extra={"file": display})
            continue

        checked += 1
        actual = compute_sha256(artifact)
        if actual != expected:
            mismatches.append(display)
            _logger.error(
                "Checksum mismatch",
                extra={
                    "file": display,
                    "expected": expected[:16] + "...",
                    "actual": actual[:16] + "...",
                },
            )

    is_valid = not mismatches and not missing_files and not errors

    if is_valid:
        _logger.info("All checksums verified", extra={"checked_count": checked})
    else:
        _logger.error(
            "Checksum verification failed",
            extra={
                "mismatches": len(mismatches),
                "missing": len(missing_files),
                "errors": len(errors),
            },
        )

    return VerificationResult(
        is_valid=is_valid,
        checked_count=checked,
        mismatches=mismatches,
        missing_files=missing_files,
        errors=errors,
    )
