# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Download page metadata.

The download page on min.io is rendered from `downloads-<app>.json`, written
next to the packages. Its shape is

    platform → product label → architecture → install options

for example `Linux → "MinIO Server" → "amd64" → {"Binary", "RPM", "DEB"}`, where
each option carries the download URL, its `.sha256sum` URL and a copy-paste
snippet. Enterprise products nest the same document under
`{"Subscriptions": {"Enterprise": ...}}`.

URLs follow the download server layout:

    <base>/<url path>/<release|edge>/<os>-<arch>/<file>

`edge` is used only for enterprise builds of an EDGE tag. Community products
and tools always link to `release`.

Package file names match what the emitter writes, so the page never links to
a file that was not produced under that name.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from string import Template
from typing import Optional, Union

from pkger.config.schema import DEFAULT_DOWNLOAD_BASE_URL
from pkger.logging.logger import get_logger
from pkger.release.checksums.integrity import SIDECAR_SUFFIX
from pkger.release.products.catalog import (
    DEB_ARCH_MAP,
    RPM_ARCH_MAP,
    Edition,
    Product,
)
from pkger.release.versioning.normalizer import Channel, ReleaseVersion
from pkger.utils.filesystem import atomic_write

_logger: logging.Logger = get_logger(__name__)

ENTERPRISE_SUBSCRIPTION = "Enterprise"
CONTAINER_REGISTRY = "quay.io/minio"


@dataclass(frozen=True)
class DownloadInfo:
    """One downloadable file plus the snippet that installs it."""

    text: str
    cksum: str = ""
    download: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"text": self.text, "cksum": self.cksum, "download": self.download}


@dataclass(frozen=True)
class Download:
    """Install options for one product on one platform/architecture."""

    text: str = ""
    binary: Optional[DownloadInfo] = None
    rpm: Optional[DownloadInfo] = None
    deb: Optional[DownloadInfo] = None
    homebrew: Optional[DownloadInfo] = None
    podman: Optional[DownloadInfo] = None

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {}
        if self.text:
            out["text"] = self.text
        for key, info in (
            ("Binary", self.binary),
            ("RPM", self.rpm),
            ("DEB", self.deb),
            ("Homebrew", self.homebrew),
            ("Podman", self.podman),
        ):
            if info is not None:
                out[key] = info.to_dict()
        return out


# product label -> architecture -> options
PlatformDownloads = dict[str, dict[str, Download]]


@dataclass
class Downloads:
    """The per-platform document. A platform left as None is not shipped."""

    kubernetes: Optional[PlatformDownloads] = None
    docker: Optional[PlatformDownloads] = None
    linux: Optional[PlatformDownloads] = None
    macos: Optional[PlatformDownloads] = None
    windows: Optional[PlatformDownloads] = None

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {}
        for key, platform in (
            ("Kubernetes", self.kubernetes),
            ("Docker", self.docker),
            ("Linux", self.linux),
            ("macOS", self.macos),
            ("Windows", self.windows),
        ):
            if platform is None:
                continue
            out[key] = {
                label: {arch: entry.to_dict() for arch, entry in by_arch.items()}
                for label, by_arch in platform.items()
            }
        return out


@dataclass
class EnterpriseDownloads:
    subscriptions: dict[str, Downloads] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "Subscriptions": {name: doc.to_dict() for name, doc in self.subscriptions.items()}
        }


DownloadsDocument = Union[Downloads, EnterpriseDownloads]


@dataclass(frozen=True)
class _Usage:
    """How to start a product once installed. `$cmd` is the executable."""

    unix: Template
    windows: Template
    homebrew_tap: str
    kubernetes: str = ""
    docker: str = ""


_SERVER_USAGE = _Usage(
    unix=Template(
        'MINIO_ROOT_USER=admin MINIO_ROOT_PASSWORD=password $cmd server /mnt/data --console-address ":9001"'
    ),
    windows=Template(
        "PS> setx MINIO_ROOT_USER admin\n"
        "PS> setx MINIO_ROOT_PASSWORD password\n"
        'PS> $cmd server F:\\Data --console-address ":9001"'
    ),
    homebrew_tap="minio/stable",
    kubernetes=(
        "kubectl krew install minio\n"
        "kubectl minio init\n"
        "kubectl minio tenant create tenant1 --servers 4 --volumes 16 --capacity 16Ti"
    ),
    docker='podman run -p 9000:9000 -p 9001:9001 minio/minio server /data --console-address ":9001"',
)

_CLIENT_USAGE = _Usage(
    unix=Template("$cmd alias set myminio/ http://MINIO-SERVER MYUSER MYPASSWORD"),
    windows=Template("$cmd alias set myminio/ http://MINIO-SERVER MYUSER MYPASSWORD"),
    homebrew_tap="minio/stable",
    kubernetes=(
        "kubectl run my-mc -i --tty --image minio/mc:latest --command -- bash\n"
        "[root@my-mc /]# mc alias set myminio/ https://minio.default.svc.cluster.local MY-USER MY-PASSWORD\n"
        "[root@my-mc /]# mc ls myminio/mybucket"
    ),
    docker=(
        "podman run --name my-mc --hostname my-mc -it --entrypoint /bin/bash --rm minio/mc\n"
        "[root@my-mc /]# mc alias set myminio/ https://my-minio-service MY-USER MY-PASSWORD\n"
        "[root@my-mc /]# mc ls myminio/mybucket"
    ),
)

_SIDEKICK_USAGE = _Usage(
    unix=Template(
        "$cmd --health-path=/minio/health/ready --address :8000 http://minio{1...4}:9000"
    ),
    windows=Template(
        "PS> $cmd --health-path=/minio/health/ready --address :8000 http://minio{1...4}:9000"
    ),
    homebrew_tap="minio/stable",
)

_WARP_USAGE = _Usage(
    unix=Template("$cmd mixed --host=minio:9000 --access-key=minioadmin --secret-key=minioadmin"),
    windows=Template(
        "PS> $cmd mixed --host=minio:9000 --access-key=minioadmin --secret-key=minioadmin"
    ),
    homebrew_tap="minio/stable",
)

_USAGE_BY_BINARY: dict[str, _Usage] = {
    "minio": _SERVER_USAGE,
    "mc": _CLIENT_USAGE,
    "sidekick": _SIDEKICK_USAGE,
    "warp": _WARP_USAGE,
}

_ENTERPRISE_KUBERNETES: dict[str, str] = {
    "minio": (
        "helm repo add minio https://helm.min.io\n"
        "helm install aistor minio/aistor-operator --namespace aistor --create-namespace\n"
        "kubectl apply -f objectstore.yaml"
    ),
    "mc": (
        "kubectl run my-mc -i --tty --image $image --command -- bash\n"
        "[root@my-mc /]# mc alias set myminio/ https://minio.aistor.svc.cluster.local MY-USER MY-PASSWORD\n"
        "[root@my-mc /]# mc ls myminio/mybucket"
    ),
}

_ENTERPRISE_PODMAN: dict[str, str] = {
    "minio": 'podman run -p 9000:9000 -p 9001:9001 $image server /data --console-address ":9001"',
    "mc": (
        "podman run --name my-mc --hostname my-mc -it --entrypoint /bin/bash --rm $image\n"
        "[root@my-mc /]# mc alias set myminio/ https://my-minio-service MY-USER MY-PASSWORD\n"
        "[root@my-mc /]# mc ls myminio/mybucket"
    ),
}


class _Links:
    """URL and file-name construction for one product/release."""

    def __init__(self, product: Product, release: ReleaseVersion, base_url: str) -> None:
        self.product = product
        self.release = release
        channel = release.channel.value if product.is_enterprise else Channel.STABLE.value
        self.root = f"{base_url.rstrip('/')}/{product.url_path}/{channel}"

    def url(self, os_name: str, arch: str, file_name: str) -> str:
        return f"{self.root}/{os_name}-{arch}/{file_name}"

    def rpm_name(self, arch: str) -> str:
        return f"{self.product.package_name}-{self.release.version}.{RPM_ARCH_MAP[arch]}.rpm"

    def deb_name(self, arch: str) -> str:
        return f"{self.product.package_name}_{self.release.version}_{DEB_ARCH_MAP[arch]}.deb"


def _linux_entry(links: _Links, usage: _Usage, arch: str) -> Download:
    product = links.product
    binary = product.binary
    package = product.package_name

    bin_url = links.url("linux", arch, binary)
    rpm_url = links.url("linux", arch, links.rpm_name(arch))
    deb_name = links.deb_name(arch)
    deb_url = links.url("linux", arch, deb_name)

    return Download(
        binary=DownloadInfo(
            text=f"wget {bin_url}\nchmod +x {binary}\n" + usage.unix.substitute(cmd=f"./{binary}"),
            cksum=bin_url + SIDECAR_SUFFIX,
            download=bin_url,
        ),
        rpm=DownloadInfo(
            text=f"dnf install {rpm_url}\n" + usage.unix.substitute(cmd=package),
            cksum=rpm_url + SIDECAR_SUFFIX,
            download=rpm_url,
        ),
        deb=DownloadInfo(
            text=f"wget {deb_url}\ndpkg -i {deb_name}\n" + usage.unix.substitute(cmd=package),
            cksum=deb_url + SIDECAR_SUFFIX,
            download=deb_url,
        ),
    )


def _macos_entry(links: _Links, usage: _Usage, arch: str) -> Download:
    binary = links.product.binary
    bin_url = links.url("darwin", arch, binary)
    tap = "minio/aistor" if links.product.is_enterprise else usage.homebrew_tap

    return Download(
        homebrew=DownloadInfo(
            text=f"brew install {tap}/{binary}\n" + usage.unix.substitute(cmd=binary),
            cksum=bin_url + SIDECAR_SUFFIX,
            download=bin_url,
        ),
        binary=DownloadInfo(
            text=f"curl --progress-bar -O {bin_url}\nchmod +x {binary}\n"
            + usage.unix.substitute(cmd=f"./{binary}"),
            cksum=bin_url + SIDECAR_SUFFIX,
            download=bin_url,
        ),
    )


def _windows_entry(links: _Links, usage: _Usage, arch: str) -> Download:
    exe = f"{links.product.binary}.exe"
    exe_url = links.url("windows", arch, exe)
    local = f"C:\\{exe}"

    return Download(
        binary=DownloadInfo(
            text=f'PS> Invoke-WebRequest -Uri "{exe_url}" -OutFile "{local}"\n'
            + usage.windows.substitute(cmd=local),
            cksum=exe_url + SIDECAR_SUFFIX,
            download=exe_url,
        ),
    )


def _container_entries(
    links: _Links, usage: _Usage
) -> tuple[Download, Download]:
    """(Docker, Kubernetes) entries. Enterprise images are pinned to the release tag."""
    product = links.product
    if not product.is_enterprise:
        return Download(text=usage.docker), Download(text=usage.kubernetes)

    image = f"{CONTAINER_REGISTRY}/{product.url_path}:{links.release.tag}"
    podman_text = Template(_ENTERPRISE_PODMAN[product.binary]).substitute(image=image)
    kubernetes_text = Template(_ENTERPRISE_KUBERNETES[product.binary]).substitute(image=image)
    docker = Download(podman=DownloadInfo(text=podman_text, download=image))
    return docker, Download(text=kubernetes_text)


def build_downloads(
    product: Product,
    release: ReleaseVersion,
    base_url: str = DEFAULT_DOWNLOAD_BASE_URL,
) -> Downloads:
    """
    Build the platform document for `product`, without the enterprise wrapper.

    Platforms the product doesn't ship stay None. Servers and clients also
    get Docker and Kubernetes entries for every Linux architecture.
    """
    usage = _USAGE_BY_BINARY[product.binary]
    links = _Links(product, release, base_url)
    label = product.label
    doc = Downloads()

    if product.linux_arches:
        doc.linux = {label: {arch: _linux_entry(links, usage, arch) for arch in product.linux_arches}}

    if product.macos_arches:
        doc.macos = {label: {arch: _macos_entry(links, usage, arch) for arch in product.macos_arches}}

    if product.windows_arches:
        doc.windows = {
            label: {arch: _windows_entry(links, usage, arch) for arch in product.windows_arches}
        }

    if product.edition is not Edition.TOOL:
        docker, kubernetes = _container_entries(links, usage)
        doc.docker = {label: {arch: docker for arch in product.linux_arches}}
        doc.kubernetes = {label: {arch: kubernetes for arch in product.linux_arches}}

    return doc


def generate_downloads(
    product: Product,
    release: ReleaseVersion,
    base_url: str = DEFAULT_DOWNLOAD_BASE_URL,
) -> DownloadsDocument:
    """Build the complete download document, wrapping enterprise products."""
    doc = build_downloads(product, release, base_url)

    _logger.info(
        "Download metadata generated",
        extra={
            "app": product.app_name,
            "version": release.version,
            "channel": release.channel.value,
        },
    )

    if product.is_enterprise:
        return EnterpriseDownloads(subscriptions={ENTERPRISE_SUBSCRIPTION: doc})
    return doc


def downloads_file_name(app_name: str) -> str:
    return f"downloads-{app_name}.json"


def write_downloads(doc: DownloadsDocument, path: Path) -> Path:
    """Serialize the document to JSON and write it atomically."""
    content = json.dumps(doc.to_dict(), indent=2) + "\n"
    atomic_write(path, content)
    _logger.info("Download metadata written", extra={"path": str(path)})
    return path
