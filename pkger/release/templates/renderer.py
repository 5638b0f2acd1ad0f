# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
nfpm config rendering.

nfpm takes a YAML document describing one package for one architecture. We
render it from a static template so the document that gets packaged is
exactly what a human would write by hand, then parse it back with PyYAML and
validate the result before handing it to nfpm. A template mistake therefore
fails here, with a readable error, instead of inside the packager.
"""

import json
import tempfile
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from string import Template
from typing import Iterator, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pkger.logging.logger import get_logger
from pkger.release.products.catalog import Product

_logger = get_logger(__name__)

SYSTEMD_UNIT_DESTINATION = "/etc/systemd/system/minio.service"

_CONFIG_TEMPLATE = Template(
    """\
name: $name
arch: $arch
platform: $platform
version: $version
maintainer: $maintainer
description: |
  $description
vendor: $vendor
homepage: $homepage
license: $license
rpm:
  group: Applications/File
contents:
- src: $binary_src
  dst: $binary_dst
$extra_contents"""
)

_SYSTEMD_CONTENT_TEMPLATE = Template(
    """\
- src: $unit_src
  dst: $unit_dst
"""
)


class TemplateRenderError(ValueError):
    """Raised when a rendered config is not a usable nfpm document."""


@dataclass(frozen=True)
class TemplateContext:
    """Everything substituted into the template for one architecture."""

    product: Product
    arch: str
    release_tag: str
    version: str
    release_dir: Path
    maintainer: str
    vendor: str
    homepage: str
    os: str = "linux"
    systemd_unit: Optional[Path] = None

    @property
    def binary_source(self) -> Path:
        """Prebuilt binary: <release dir>/linux-<arch>/<binary>.<release tag>."""
        return (
            self.release_dir
            / f"{self.os}-{self.arch}"
            / f"{self.product.binary}.{self.release_tag}"
        )


class ContentEntry(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    src: str
    dst: str


class RpmSection(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    group: str = ""


class PackageSpec(BaseModel):
    """The parsed nfpm document, restricted to the keys the template emits."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1)
    arch: str = Field(min_length=1)
    platform: str = "linux"
    version: str = Field(min_length=1)
    maintainer: str = ""
    description: str = ""
    vendor: str = ""
    homepage: str = ""
    license: str = ""
    rpm: RpmSection = Field(default_factory=RpmSection)
    contents: list[ContentEntry] = Field(min_length=1)


def _quote(value: str) -> str:
    # A JSON string is a valid YAML double-quoted scalar.
    return json.dumps(value)


def render_config(context: TemplateContext) -> str:
    """Render the nfpm YAML document for one product/architecture."""
    product = context.product

    extra_contents = ""
    if product.ships_systemd_unit:
        if context.systemd_unit is None:
            raise TemplateRenderError(
                f"{product.app_name} ships a systemd unit but none was provided"
            )
        extra_contents = _SYSTEMD_CONTENT_TEMPLATE.substitute(
            unit_src=_quote(str(context.systemd_unit)),
            unit_dst=_quote(SYSTEMD_UNIT_DESTINATION),
        )

    return _CONFIG_TEMPLATE.substitute(
        name=_quote(product.package_name),
        arch=_quote(context.arch),
        platform=_quote(context.os),
        version=_quote(context.version),
        maintainer=_quote(context.maintainer),
        description=product.description.replace("\n", "\n  "),
        vendor=_quote(context.vendor),
        homepage=_quote(context.homepage),
        license=_quote(product.license),
        binary_src=_quote(str(context.binary_source)),
        binary_dst=_quote(f"/usr/bin/{product.package_name}"),
        extra_contents=extra_contents,
    )


def parse_config(text: str) -> PackageSpec:
    """
    Parse and validate a rendered nfpm document.

    Raises:
        TemplateRenderError: On invalid YAML, a non-mapping document, or
            missing/unknown fields.
    """
    try:
        parsed = yaml.safe_load(text)
    except yaml.YAMLError as err:
        raise TemplateRenderError(f"Rendered config is not valid YAML: {err}") from err

    if not isinstance(parsed, dict):
        raise TemplateRenderError(
            f"Rendered config must be a YAML mapping, got {type(parsed).__name__}"
        )

    try:
        return PackageSpec.model_validate(parsed)
    except ValidationError as err:
        raise TemplateRenderError(f"Rendered config failed validation:\n{err}") from err


@contextmanager
def rewritten_systemd_unit(unit_path: Path) -> Iterator[Path]:
    """
    Yield a temp copy of the systemd unit with /usr/local paths moved to /usr.

    The unit in the source tree targets a manual install under /usr/local;
    packages put the binary in /usr/bin. The temp file is removed on exit.
    """
    original = unit_path.read_bytes()
    fixed = original.replace(b"/usr/local", b"/usr")

    with tempfile.NamedTemporaryFile(
        mode="wb", prefix="pkger-", suffix=".service", delete=False
    ) as handle:
        handle.write(fixed)
        temp_path = Path(handle.name)

    _logger.debug(
        "Rewrote systemd unit",
        extra={"source": str(unit_path), "temp": str(temp_path)},
    )
    try:
        yield temp_path
    finally:
        temp_path.unlink(missing_ok=True)
