# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the pkger CLI.

Each handler returns an exit code from exit_codes.py. Library code raises;
this is the only layer that turns exceptions into exit codes, and every
failure is logged with enough context to find the artifact involved.
"""

import argparse
import contextlib
import logging
from pathlib import Path
from typing import Optional

from pkger.cli.exit_codes import (
    CONFIG_ERROR,
    RUNTIME_ERROR,
    SUCCESS,
    USER_ERROR,
    VALIDATION_ERROR,
)
from pkger.config.exceptions import ConfigError
from pkger.config.loader import default_config, load_config
from pkger.config.schema import PkgerConfig
from pkger.logging.logger import configure_package_logging, get_logger
from pkger.release.products.catalog import (
    Product,
    get_product,
    release_dir_name,
)
from pkger.release.versioning.normalizer import (
    InvalidReleaseTagError,
    ReleaseVersion,
    normalize_release,
)


def _load_and_configure(
    args: argparse.Namespace,
    command_name: str,
) -> tuple[int, Optional[PkgerConfig], logging.Logger]:
    """
    Shared setup: load the config (or defaults) and apply the log level.

    Returns (exit_code, config, logger). Callers return early unless
    exit_code is SUCCESS.
    """
    log_level = args.log_level or "INFO"
    logger = get_logger(f"pkger.cli.{command_name}", log_level=log_level)

    if args.config is None:
        config = default_config()
    else:
        try:
            config = load_config(Path(args.config))
        except ConfigError as err:
            logger.error(
                "Configuration error",
                extra={"command": command_name, "error": str(err)},
            )
            return CONFIG_ERROR, None, logger

    if args.log_level is None:
        log_level = config.global_config.log_level
    log_file = config.global_config.log_file
    # Covers this command's logger as well as the library ones.
    configure_package_logging(log_level, Path(log_file) if log_file else None)

    return SUCCESS, config, logger


def _resolve_release(
    args: argparse.Namespace, logger: logging.Logger
) -> tuple[int, Optional[Product], Optional[ReleaseVersion]]:
    # --appName is restricted to the catalogue by argparse choices.
    product = get_product(args.app_name)

    try:
        release = normalize_release(product, args.release)
    except InvalidReleaseTagError as err:
        logger.error(
            "Invalid release tag",
            extra={"app": product.app_name, "release": args.release, "error": str(err)},
        )
        return VALIDATION_ERROR, None, None

    logger.info(
        "Resolved release",
        extra={
            "app": product.app_name,
            "release": release.tag,
            "version": release.version,
            "channel": release.channel.value,
        },
    )
    return SUCCESS, product, release


def handle_package(args: argparse.Namespace) -> int:
    """Build packages for every available architecture, then the download metadata."""
    exit_code, config, logger = _load_and_configure(args, "package")
    if exit_code != SUCCESS or config is None:
        return exit_code

    exit_code, product, release = _resolve_release(args, logger)
    if exit_code != SUCCESS or product is None or release is None:
        return exit_code

    from pkger.release.manifests.downloads import (
        downloads_file_name,
        generate_downloads,
        write_downloads,
    )
    from pkger.release.packaging.nfpm import NfpmBackend, PackagingError
    from pkger.release.packaging.packager import (
        PackagingSettings,
        emit_packages,
        parse_packagers,
    )
    from pkger.release.templates.renderer import (
        TemplateRenderError,
        rewritten_systemd_unit,
    )

    try:
        packagers = parse_packagers(args.packager)
    except PackagingError as err:
        logger.error("Invalid packager selection", extra={"error": str(err)})
        return USER_ERROR

    release_dir = Path(release_dir_name(product.app_name, args.release_dir))
    if not release_dir.is_dir():
        logger.error("Release directory not found", extra={"path": str(release_dir)})
        return VALIDATION_ERROR

    packaging = config.packaging
    unit_path = Path(args.systemd_unit or packaging.systemd_unit)
    if product.ships_systemd_unit and not unit_path.is_file():
        logger.error("Systemd unit not found", extra={"path": str(unit_path)})
        return VALIDATION_ERROR

    downloads = generate_downloads(product, release, packaging.download_base_url)
    downloads_path = release_dir / downloads_file_name(product.app_name)

    if args.dry_run:
        logger.info(
            "Dry run, would build packages",
            extra={
                "packagers": packagers,
                "arches": list(product.linux_arches),
                "release_dir": str(release_dir),
                "downloads": str(downloads_path),
            },
        )
        return SUCCESS

    backend = NfpmBackend(
        binary=packaging.nfpm_binary,
        timeout_seconds=packaging.nfpm_timeout_seconds,
    )
    settings = PackagingSettings(
        maintainer=packaging.maintainer,
        vendor=packaging.vendor,
        homepage=packaging.homepage,
    )

    try:
        with contextlib.ExitStack() as stack:
            systemd_unit = None
            if product.ships_systemd_unit:
                systemd_unit = stack.enter_context(rewritten_systemd_unit(unit_path))

            artifacts = emit_packages(
                product,
                release,
                release_dir,
                packagers,
                backend,
                settings=settings,
                systemd_unit=systemd_unit,
                symlink=args.symlink,
            )

        write_downloads(downloads, downloads_path)

    except (PackagingError, TemplateRenderError) as err:
        logger.error("Packaging failed", extra={"error": str(err)})
        return RUNTIME_ERROR
    except Exception as err:
        logger.error("Packaging failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    if not artifacts:
        logger.warning(
            "No binaries found, no packages were built",
            extra={"release_dir": str(release_dir)},
        )

    logger.info(
        "Release packaged",
        extra={
            "app": product.app_name,
            "packages": len(artifacts),
            "downloads": str(downloads_path),
        },
    )
    return SUCCESS


def handle_downloads(args: argparse.Namespace) -> int:
    """Write only the download metadata JSON."""
    exit_code, config, logger = _load_and_configure(args, "downloads")
    if exit_code != SUCCESS or config is None:
        return exit_code

    exit_code, product, release = _resolve_release(args, logger)
    if exit_code != SUCCESS or product is None or release is None:
        return exit_code

    from pkger.release.manifests.downloads import (
        downloads_file_name,
        generate_downloads,
        write_downloads,
    )

    release_dir = Path(release_dir_name(product.app_name, args.release_dir))
    downloads_path = release_dir / downloads_file_name(product.app_name)

    try:
        downloads = generate_downloads(product, release, config.packaging.download_base_url)

        if args.dry_run:
            logger.info("Dry run, would write download metadata", extra={"path": str(downloads_path)})
            return SUCCESS

        write_downloads(downloads, downloads_path)
        return SUCCESS

    except Exception as err:
        logger.error("Writing download metadata failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR


def handle_verify(args: argparse.Namespace) -> int:
    """Verify every checksum sidecar under a release directory."""
    exit_code, _config, logger = _load_and_configure(args, "verify")
    if exit_code != SUCCESS:
        return exit_code

    from pkger.release.checksums.integrity import verify_sidecars

    release_dir = Path(args.release_dir)
    if not release_dir.is_dir():
        logger.error("Release directory not found", extra={"path": str(release_dir)})
        return VALIDATION_ERROR

    try:
        result = verify_sidecars(release_dir)
    except Exception as err:
        logger.error("Verification failed", extra={"error": str(err)}, exc_info=True)
        return RUNTIME_ERROR

    if not result.is_valid:
        logger.error(
            "Integrity check failed",
            extra={
                "path": str(release_dir),
                "mismatches": result.mismatches,
                "missing": result.missing_files,
                "errors": result.errors,
            },
        )
        return VALIDATION_ERROR

    logger.info(
        "Integrity check passed",
        extra={"path": str(release_dir), "checked": result.checked_count},
    )
    return SUCCESS
