# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for pkger.

Usage:
    pkger package -a minio -r RELEASE.2025-03-12T00-00-00Z
    pkger package -a warp -r v0.4.3 -p deb,rpm --symlink
    pkger downloads -a minio-enterprise -r EDGE.2025-10-10T05-28-23Z
    pkger verify -d minio-release

Global options (--config, --log-level, --dry-run) are shared by every
subcommand through an argparse parent parser. The product flags keep the
camelCase spelling release pipelines already pass (--appName, --releaseDir).
"""

import argparse
import sys

from pkger import __version__
from pkger.cli.commands import handle_downloads, handle_package, handle_verify
from pkger.cli.exit_codes import USER_ERROR
from pkger.release.packaging.packager import SUPPORTED_PACKAGERS
from pkger.release.products.catalog import KNOWN_APP_NAMES


def _build_global_parser(on_subcommand: bool = False) -> argparse.ArgumentParser:
    """
    Options accepted both before and after the subcommand.

    The subcommand copies default to SUPPRESS so they only set a value when
    the flag is given there, instead of resetting one given before it.
    """

    def _default(value: object) -> object:
        return argparse.SUPPRESS if on_subcommand else value

    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=_default(None),
        help="Path to YAML configuration file.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=_default(None),
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging verbosity (overrides the config file, default INFO).",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        default=_default(False),
        dest="dry_run",
        help="Resolve versions and paths without writing anything.",
    )
    return parent


def _build_release_parser() -> argparse.ArgumentParser:
    """Product/tag options shared by `package` and `downloads`."""
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "-a",
        "--appName",
        dest="app_name",
        default="minio",
        choices=KNOWN_APP_NAMES,
        help="Application name for the package.",
    )
    parent.add_argument(
        "-r",
        "--release",
        dest="release",
        required=True,
        help="Current release tag, e.g. RELEASE.2025-03-12T00-00-00Z or v0.4.3.",
    )
    parent.add_argument(
        "-d",
        "--releaseDir",
        dest="release_dir",
        default=None,
        help="Release directory (default: <app>-release).",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    global_parent: argparse.ArgumentParser,
) -> None:
    release_parent = _build_release_parser()

    package = subparsers.add_parser(
        "package",
        parents=[global_parent, release_parent],
        help="Build DEB/RPM/APK packages and the download metadata.",
    )
    package.add_argument(
        "-p",
        "--packager",
        dest="packager",
        default=",".join(SUPPORTED_PACKAGERS),
        help="Comma separated packagers to use, any of: deb, rpm, apk (default: deb,rpm,apk).",
    )
    package.add_argument(
        "--systemd-unit",
        dest="systemd_unit",
        default=None,
        help="Systemd unit shipped with server packages (default: minio.service).",
    )
    package.add_argument(
        "--symlink",
        action="store_true",
        default=False,
        help="Point <name>.<format> at each newly built package.",
    )
    package.set_defaults(func=handle_package)

    downloads = subparsers.add_parser(
        "downloads",
        parents=[global_parent, release_parent],
        help="Only write the download metadata JSON.",
    )
    downloads.set_defaults(func=handle_downloads)

    verify = subparsers.add_parser(
        "verify",
        parents=[global_parent],
        help="Check every .sha256sum sidecar in a release directory.",
    )
    verify.add_argument(
        "-d",
        "--releaseDir",
        dest="release_dir",
        required=True,
        help="Release directory to verify.",
    )
    verify.set_defaults(func=handle_verify)


def build_parser() -> argparse.ArgumentParser:
    root_parser = argparse.ArgumentParser(
        prog="pkger",
        description="Debian, RPMs and APKs for MinIO.",
        parents=[_build_global_parser()],
    )
    root_parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, _build_global_parser(on_subcommand=True))
    return root_parser


def main(argv: list[str] | None = None) -> None:
    """
    Parse the command line, run the chosen subcommand, exit with its code.

    With no subcommand, help is printed and the exit code is USER_ERROR.
    """
    root_parser = build_parser()
    args = root_parser.parse_args(argv)

    if getattr(args, "func", None) is None:
        root_parser.print_help()
        sys.exit(USER_ERROR)

    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
