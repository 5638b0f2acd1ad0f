# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Package emitter: turns prebuilt Linux binaries into DEB, RPM and APK files.

For a product and release, every Linux architecture the product ships is
packaged in every requested format:

    <release dir>/linux-<arch>/
    ├─ <binary>.<release tag>            prebuilt input
    ├─ <name>_<version>_<debarch>.deb
    ├─ <name>_<version>_<debarch>.deb.sha256sum
    ├─ <name>-<version>.<rpmarch>.rpm
    ├─ <name>-<version>.<rpmarch>.rpm.sha256sum
    ├─ <name>_<version>_<apkarch>.apk
    └─ <name>_<version>_<apkarch>.apk.sha256sum

An architecture whose binary was not built is skipped with a warning. Any
other failure stops the run, and the partial package it was writing is
removed so a sync job never publishes a truncated file.
"""

import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from pkger.logging.logger import get_logger
from pkger.release.checksums.integrity import write_sidecar
from pkger.release.packaging.nfpm import PackagerBackend, PackagingError
from pkger.release.products.catalog import (
    APK_ARCH_MAP,
    DEB_ARCH_MAP,
    RPM_ARCH_MAP,
    Product,
)
from pkger.release.templates.renderer import (
    PackageSpec,
    TemplateContext,
    parse_config,
    render_config,
)
from pkger.release.versioning.normalizer import ReleaseVersion
from pkger.utils.filesystem import replace_symlink, safe_delete

_logger: logging.Logger = get_logger(__name__)

SUPPORTED_PACKAGERS: tuple[str, ...] = ("deb", "rpm", "apk")


@dataclass(frozen=True)
class PackageArtifact:
    """One package written to disk."""

    path: Path
    packager: str
    arch: str
    sha256: str
    sidecar: Path
    symlink: Optional[Path] = None


@dataclass(frozen=True)
class PackagingSettings:
    """Header fields shared by every package of a run."""

    maintainer: str = "MinIO Development <dev@minio.io>"
    vendor: str = "MinIO, Inc."
    homepage: str = "https://min.io"


def parse_packagers(value: str) -> list[str]:
    """
    Split a --packager value like "deb,rpm" into validated, de-duplicated names.

    Raises:
        PackagingError: On an empty list or an unknown packager.
    """
    names: list[str] = []
    for raw in value.split(","):
        name = raw.strip().lower()
        if not name:
            continue
        if name not in SUPPORTED_PACKAGERS:
            raise PackagingError(
                f"Unknown packager '{name}'. Must be one of: {', '.join(SUPPORTED_PACKAGERS)}"
            )
        if name not in names:
            names.append(name)

    if not names:
        raise PackagingError("At least one packager must be selected")
    return names


def conventional_file_name(spec: PackageSpec, packager: str) -> str:
    """The file name nfpm conventionally gives a package of this format."""
    if packager == "deb":
        return f"{spec.name}_{spec.version}_{DEB_ARCH_MAP[spec.arch]}.deb"
    if packager == "rpm":
        return f"{spec.name}-{spec.version}.{RPM_ARCH_MAP[spec.arch]}.rpm"
    if packager == "apk":
        return f"{spec.name}_{spec.version}_{APK_ARCH_MAP[spec.arch]}.apk"
    raise PackagingError(f"Unknown packager '{packager}'")


def _emit_one(
    backend: PackagerBackend,
    spec: PackageSpec,
    config_path: Path,
    packager: str,
    arch_dir: Path,
    symlink: bool,
) -> PackageArtifact:
    file_name = conventional_file_name(spec, packager)
    target = arch_dir / file_name

    _logger.info(
        "Using packager",
        extra={"packager": packager, "arch": spec.arch, "target": str(target)},
    )

    try:
        backend.package(config_path, packager, target)
        if not target.is_file():
            raise PackagingError(f"Packager reported success but {target} was not written")
        sidecar, digest = write_sidecar(target)
    except Exception:
        if safe_delete(target):
            _logger.warning("Removed partial package", extra={"path": str(target)})
        raise

    link_path = None
    if symlink:
        link_path = arch_dir / f"{spec.name}.{packager}"
        replace_symlink(link_path, file_name)
        _logger.debug("Updated symlink", extra={"link": str(link_path), "target": file_name})

    _logger.info(
        "Created package",
        extra={"path": str(target), "sha256": digest[:16] + "..."},
    )
    return PackageArtifact(
        path=target,
        packager=packager,
        arch=spec.arch,
        sha256=digest,
        sidecar=sidecar,
        symlink=link_path,
    )


def emit_packages(
    product: Product,
    release: ReleaseVersion,
    release_dir: Path,
    packagers: Sequence[str],
    backend: PackagerBackend,
    settings: Optional[PackagingSettings] = None,
    systemd_unit: Optional[Path] = None,
    symlink: bool = False,
) -> list[PackageArtifact]:
    """
    Package every available Linux architecture of `product`.

    Args:
        product: Catalogue entry being released.
        release: Normalized tag and version.
        release_dir: Directory holding `linux-<arch>/<binary>.<tag>` inputs.
        packagers: Formats to build, each one of SUPPORTED_PACKAGERS.
        backend: Packager implementation (nfpm in production).
        settings: Maintainer/vendor/homepage for the package headers.
        systemd_unit: Rewritten unit file, required for server products.
        symlink: Also maintain `<name>.<format>` links to the newest package.

    Returns:
        The artifacts written, in architecture then packager order.

    Raises:
        PackagingError: On an unknown packager or a failed nfpm run.
        TemplateRenderError: If the rendered config is invalid.
    """
    unknown = [p for p in packagers if p not in SUPPORTED_PACKAGERS]
    if unknown:
        raise PackagingError(f"Unknown packager(s): {', '.join(unknown)}")

    settings = settings or PackagingSettings()
    artifacts: list[PackageArtifact] = []

    for arch in product.linux_arches:
        context = TemplateContext(
            product=product,
            arch=arch,
            release_tag=release.tag,
            version=release.version,
            release_dir=release_dir.resolve(),
            maintainer=settings.maintainer,
            vendor=settings.vendor,
            homepage=settings.homepage,
            systemd_unit=systemd_unit,
        )

        if not context.binary_source.is_file():
            _logger.warning(
                "Binary not found, skipping architecture",
                extra={"arch": arch, "binary": str(context.binary_source)},
            )
            continue

        rendered = render_config(context)
        spec = parse_config(rendered)
        arch_dir = context.binary_source.parent

        with tempfile.TemporaryDirectory(prefix="pkger-") as workdir:
            config_path = Path(workdir) / "nfpm.yaml"
            config_path.write_text(rendered, encoding="utf-8")

            for packager in packagers:
                artifacts.append(
                    _emit_one(backend, spec, config_path, packager, arch_dir, symlink)
                )

    _logger.info(
        "Packaging finished",
        extra={"app": product.app_name, "version": release.version, "count": len(artifacts)},
    )
    return artifacts
