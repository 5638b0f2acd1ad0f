# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The fixed set of products pkger knows how to release.

Everything that differs between MinIO Server, the client, their AIStor
enterprise builds, Sidekick and Warp lives in this table: package name,
binary name, the label shown on the download page, the URL path on the
download server, which tag format the product uses, and which
architectures are published per platform. The packaging and download-page
code only branches on these attributes, never on the app name itself.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Edition(str, Enum):
    COMMUNITY = "community"
    ENTERPRISE = "enterprise"
    TOOL = "tool"


class VersionScheme(str, Enum):
    """How a product's release tags look."""

    DATE = "date"  # RELEASE.2025-03-12T00-00-00Z, EDGE.2025-...
    SEMVER = "semver"  # v0.4.3


class UnknownProductError(ValueError):
    """Raised for an --appName pkger has no catalogue entry for."""


LINUX_ARCHES_FULL: tuple[str, ...] = ("amd64", "arm64", "s390x", "ppc64le")
LINUX_ARCHES_COMMON: tuple[str, ...] = ("amd64", "arm64")

RPM_ARCH_MAP: dict[str, str] = {
    "amd64": "x86_64",
    "arm64": "aarch64",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}

DEB_ARCH_MAP: dict[str, str] = {
    "amd64": "amd64",
    "arm64": "arm64",
    "ppc64le": "ppc64el",
    "s390x": "s390x",
}

APK_ARCH_MAP: dict[str, str] = {
    "amd64": "x86_64",
    "arm64": "aarch64",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
}

_SERVER_DESCRIPTION = (
    "MinIO is a High Performance Object Storage released under AGPLv3.\n"
    "It is API compatible with Amazon S3 cloud storage service. Use MinIO to build\n"
    "high performance infrastructure for machine learning, analytics and application\n"
    "data workloads."
)

_ENTERPRISE_SERVER_DESCRIPTION = (
    "MinIO AIStor is a High Performance Object Storage for AI and analytics workloads.\n"
    "It is API compatible with Amazon S3 cloud storage service."
)


@dataclass(frozen=True)
class Product:
    """One releasable product variant."""

    app_name: str
    package_name: str
    binary: str
    label: str
    url_path: str
    edition: Edition
    version_scheme: VersionScheme
    description: str
    license: str
    linux_arches: tuple[str, ...]
    macos_arches: tuple[str, ...]
    windows_arches: tuple[str, ...]
    ships_systemd_unit: bool = False

    @property
    def is_enterprise(self) -> bool:
        return self.edition is Edition.ENTERPRISE


_PRODUCTS: dict[str, Product] = {
    p.app_name: p
    for p in (
        Product(
            app_name="minio",
            package_name="minio",
            binary="minio",
            label="MinIO Server",
            url_path="server/minio",
            edition=Edition.COMMUNITY,
            version_scheme=VersionScheme.DATE,
            description=_SERVER_DESCRIPTION,
            license="AGPLv3",
            linux_arches=LINUX_ARCHES_FULL,
            macos_arches=("amd64", "arm64"),
            windows_arches=("amd64",),
            ships_systemd_unit=True,
        ),
        Product(
            app_name="mc",
            package_name="mcli",
            binary="mc",
            label="MinIO Client",
            url_path="client/mc",
            edition=Edition.COMMUNITY,
            version_scheme=VersionScheme.DATE,
            description="MinIO Client for cloud storage and filesystems",
            license="AGPLv3",
            linux_arches=LINUX_ARCHES_FULL,
            macos_arches=("amd64", "arm64"),
            windows_arches=("amd64",),
        ),
        Product(
            app_name="minio-enterprise",
            package_name="minio",
            binary="minio",
            label="AIStor Server",
            url_path="aistor/minio",
            edition=Edition.ENTERPRISE,
            version_scheme=VersionScheme.DATE,
            description=_ENTERPRISE_SERVER_DESCRIPTION,
            license="MinIO Commercial License",
            linux_arches=LINUX_ARCHES_COMMON,
            macos_arches=("amd64", "arm64"),
            windows_arches=("amd64",),
            ships_systemd_unit=True,
        ),
        Product(
            app_name="mc-enterprise",
            package_name="mcli",
            binary="mc",
            label="AIStor Client",
            url_path="aistor/mc",
            edition=Edition.ENTERPRISE,
            version_scheme=VersionScheme.DATE,
            description="MinIO AIStor Client for cloud storage and filesystems",
            license="MinIO Commercial License",
            linux_arches=LINUX_ARCHES_COMMON,
            macos_arches=("amd64", "arm64"),
            windows_arches=("amd64",),
        ),
        Product(
            app_name="sidekick",
            package_name="sidekick",
            binary="sidekick",
            label="MinIO Sidekick",
            url_path="aistor/sidekick",
            edition=Edition.TOOL,
            version_scheme=VersionScheme.DATE,
            description="High performance HTTP sidecar load balancer",
            license="AGPLv3",
            linux_arches=LINUX_ARCHES_COMMON,
            macos_arches=(),
            windows_arches=("amd64",),
        ),
        Product(
            app_name="warp",
            package_name="warp",
            binary="warp",
            label="MinIO Warp",
            url_path="aistor/warp",
            edition=Edition.TOOL,
            version_scheme=VersionScheme.SEMVER,
            description="S3 benchmarking tool",
            license="AGPLv3",
            linux_arches=LINUX_ARCHES_COMMON,
            macos_arches=("arm64",),
            windows_arches=("amd64",),
        ),
    )
}

KNOWN_APP_NAMES: tuple[str, ...] = tuple(_PRODUCTS)


def get_product(app_name: str) -> Product:
    """Look up a product by its --appName value."""
    try:
        return _PRODUCTS[app_name]
    except KeyError:
        raise UnknownProductError(
            f"Unknown application '{app_name}'. Must be one of: {', '.join(KNOWN_APP_NAMES)}"
        ) from None


def release_dir_name(app_name: str, override: Optional[str] = None) -> str:
    """
    Directory holding the prebuilt binaries and receiving the packages.

    Enterprise builds share the community layout, so `minio-enterprise`
    resolves to `minio-release`.
    """
    if override:
        return override
    base = app_name.removesuffix("-enterprise")
    return f"{base}-release"
