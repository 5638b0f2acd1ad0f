# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release tag → package version.

Package managers compare versions numerically, but MinIO releases are tagged
with timestamps:

    RELEASE.2025-03-12T00-00-00Z          → 20250312000000.0.0
    RELEASE.2025-03-12T00-00-00Z.hotfix.1 → 20250312000000.0.0.hotfix.1
    EDGE.2025-10-10T05-28-23Z             → 20251010052823.0.0

Warp is tagged with plain semantic versions, which only lose the leading `v`:

    v0.4.3 → 0.4.3

The EDGE prefix also selects the EDGE channel, which changes the download
URL path segment from `release` to `edge`.
"""

import re
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from pkger.release.products.catalog import Product, VersionScheme

RELEASE_TIME_FORMAT = "%Y-%m-%dT%H-%M-%SZ"
VERSION_TIME_FORMAT = "%Y%m%d%H%M%S"

_DATE_PREFIXES: frozenset[str] = frozenset({"RELEASE", "EDGE"})

# semver.org grammar, minus the leading "v" which is checked separately.
_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


class InvalidReleaseTagError(ValueError):
    """Raised when a tag does not match the format its product uses."""


class Channel(str, Enum):
    STABLE = "release"
    EDGE = "edge"


@dataclass(frozen=True)
class ReleaseVersion:
    """A release tag together with its normalized package version."""

    tag: str
    version: str
    channel: Channel

    @property
    def is_edge(self) -> bool:
        return self.channel is Channel.EDGE


def date_tag_version(tag: str) -> str:
    """
    Convert a RELEASE./EDGE. timestamp tag into a package version.

    Raises:
        InvalidReleaseTagError: On a missing prefix, missing timestamp, or a
            timestamp that doesn't match RELEASE_TIME_FORMAT.
    """
    fields = tag.split(".")
    if len(fields) < 2:
        raise InvalidReleaseTagError(
            f"Release tag '{tag}' must look like RELEASE.<timestamp>[.<suffix>]"
        )

    prefix, stamp, suffix = fields[0], fields[1], fields[2:]
    if prefix not in _DATE_PREFIXES:
        raise InvalidReleaseTagError(
            f"Release tag '{tag}' must start with one of: {', '.join(sorted(_DATE_PREFIXES))}"
        )

    try:
        released_at = datetime.strptime(stamp, RELEASE_TIME_FORMAT)
    except ValueError as err:
        raise InvalidReleaseTagError(
            f"Release tag '{tag}' has an invalid timestamp '{stamp}': {err}"
        ) from err

    version = released_at.strftime(VERSION_TIME_FORMAT) + ".0.0"
    if suffix:
        version += "." + ".".join(suffix)
    return version


def semver_tag_version(tag: str) -> str:
    """
    Validate a `v`-prefixed semantic version tag and strip the prefix.

    Raises:
        InvalidReleaseTagError: If the prefix is missing or the remainder isn't semver.
    """
    if not tag.startswith("v"):
        raise InvalidReleaseTagError(f"Release tag '{tag}' must start with 'v'")

    version = tag[1:]
    if not _SEMVER_RE.match(version):
        raise InvalidReleaseTagError(f"Release tag '{tag}' is not a valid semantic version")
    return version


def channel_for_tag(tag: str) -> Channel:
    return Channel.EDGE if tag.startswith("EDGE.") else Channel.STABLE


def normalize_release(product: Product, tag: str) -> ReleaseVersion:
    """Resolve a tag into its package version and channel for `product`."""
    if not tag:
        raise InvalidReleaseTagError("A release tag is required")

    if product.version_scheme is VersionScheme.SEMVER:
        version = semver_tag_version(tag)
    else:
        version = date_tag_version(tag)

    return ReleaseVersion(tag=tag, version=version, channel=channel_for_tag(tag))
