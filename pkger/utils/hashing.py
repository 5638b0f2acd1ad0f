# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
SHA-256 helpers for release artifacts.

Every package pkger writes is published next to a `.sha256sum` sidecar, and
the same digest function is used again by `pkger verify`.
"""

import hashlib
from pathlib import Path

HASH_BUFFER_SIZE = 65536  # 64 KiB


def compute_sha256(file_path: Path) -> str:
    """
    Compute the SHA-256 hex digest of a file, reading it in chunks.

    Packages for the server can be well over 100 MB, so the file is never
    loaded into memory in one piece.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        OSError: If the file can't be read.
    """
    hasher = hashlib.sha256()
    with open(file_path, "rb") as f:
        while True:
            chunk = f.read(HASH_BUFFER_SIZE)
            if not chunk:
                break
            hasher.update(chunk)
    return hasher.hexdigest()
