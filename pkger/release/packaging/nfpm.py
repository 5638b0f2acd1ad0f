# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Thin wrapper around the `nfpm` packager.

nfpm does the actual DEB/RPM/APK encoding. We call it once per
(architecture, format) with an explicit target path, so the file name is
always the one pkger computed, and capture its output for the logs. No
shell, no string-built command lines.
"""

import subprocess
import time
from pathlib import Path
from typing import Protocol

from pkger.logging.logger import get_logger

logger = get_logger(__name__)


class PackagingError(RuntimeError):
    """Raised when a package could not be produced."""


class PackagerBackend(Protocol):
    """Anything that can turn an nfpm config into a package file."""

    def package(self, config_path: Path, packager: str, target: Path) -> None: ...


class NfpmBackend:
    """Runs `nfpm package` as a subprocess."""

    def __init__(self, binary: str = "nfpm", timeout_seconds: int = 600) -> None:
        self.binary = binary
        self.timeout_seconds = timeout_seconds

    def package(self, config_path: Path, packager: str, target: Path) -> None:
        """
        Build one package.

        Raises:
            PackagingError: nfpm missing, timed out, or exited non-zero.
        """
        command = [
            self.binary,
            "package",
            "--config",
            str(config_path),
            "--packager",
            packager,
            "--target",
            str(target),
        ]
        start = time.monotonic()

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
                check=False,
            )
        except FileNotFoundError as err:
            raise PackagingError(
                f"nfpm executable '{self.binary}' not found; install it from https://nfpm.goreleaser.com"
            ) from err
        except subprocess.TimeoutExpired as err:
            raise PackagingError(
                f"nfpm timed out after {self.timeout_seconds}s building {target.name}"
            ) from err

        elapsed = time.monotonic() - start
        logger.debug(
            "nfpm finished",
            extra={
                "packager": packager,
                "target": str(target),
                "exit_code": result.returncode,
                "elapsed_seconds": round(elapsed, 3),
            },
        )

        if result.returncode != 0:
            detail = (result.stderr or result.stdout).strip()
            raise PackagingError(
                f"nfpm failed building {target.name} (exit {result.returncode}): {detail}"
            )
