# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe configuration schemas for pkger.

A config file is optional. Without one, every packaging run uses the
defaults declared here, which describe the MinIO release layout. A config
lets a CI job point at a different nfpm binary, a mirror for download URLs,
or a systemd unit that lives somewhere other than the working directory.

    global:
      config_version: "1.0.0"
      log_level: "DEBUG"
    packaging:
      nfpm_binary: /usr/local/bin/nfpm
      download_base_url: https://dl.min.io

All models are frozen and reject unknown keys.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DOWNLOAD_BASE_URL = "https://dl.min.io"


class GlobalConfig(BaseModel):
    """Cross-cutting settings: schema version and logging."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    config_version: str = Field(
        description="Schema version for compatibility tracking, e.g. '1.0.0'"
    )
    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for an additional JSON log file",
    )

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level {value!r}")
        return upper


class PackagingConfig(BaseModel):
    """
    Package metadata and tooling knobs.

    The maintainer/vendor/homepage fields end up verbatim in every DEB, RPM
    and APK header, so changing them changes the artifacts.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    maintainer: str = Field(default="MinIO Development <dev@minio.io>")
    vendor: str = Field(default="MinIO, Inc.")
    homepage: str = Field(default="https://min.io")
    download_base_url: str = Field(
        default=DEFAULT_DOWNLOAD_BASE_URL,
        description="Scheme and host every download/checksum URL is built on",
    )
    nfpm_binary: str = Field(
        default="nfpm",
        description="nfpm executable name or absolute path",
    )
    nfpm_timeout_seconds: int = Field(
        default=600,
        ge=1,
        description="Hard limit for a single nfpm invocation",
    )
    systemd_unit: str = Field(
        default="minio.service",
        description="Systemd unit shipped with server packages",
    )

    @field_validator("download_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("download_base_url must be an http(s) URL")
        return value.rstrip("/")


class PkgerConfig(BaseModel):
    """Top-level config container. `packaging` falls back to defaults when absent."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    global_config: GlobalConfig = Field(alias="global")
    packaging: PackagingConfig = Field(default_factory=PackagingConfig)
