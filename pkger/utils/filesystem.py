# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Filesystem helpers for writing release metadata.

Download manifests and checksum sidecars are picked up by a sync job that
mirrors the release directory to the download server. A reader must never see
half a JSON document, so these writes go through a temp file in the target
directory and a rename, which is atomic on POSIX within one filesystem.
"""

import os
import tempfile
from pathlib import Path


def atomic_write(target_path: Path, content: str, encoding: str = "utf-8") -> None:
    """
    Write text to a file atomically.

    Raises:
        OSError: If the write or rename fails. The target is left untouched.
    """
    target_path.parent.mkdir(parents=True, exist_ok=True)

    temp_fd = tempfile.NamedTemporaryFile(
        mode="w",
        encoding=encoding,
        dir=str(target_path.parent),
        prefix=".pkger_tmp_",
        suffix=".tmp",
        delete=False,
    )
    temp_path = Path(temp_fd.name)

    try:
        temp_fd.write(content)
        temp_fd.flush()
        temp_fd.close()
        # NamedTemporaryFile creates 0600; published metadata must be world-readable.
        os.chmod(temp_path, 0o644)
        temp_path.replace(target_path)
    except BaseException:
        temp_fd.close()
        if temp_path.exists():
            temp_path.unlink()
        raise


def replace_symlink(link_path: Path, target_name: str) -> None:
    """
    Point `link_path` at `target_name` (relative), replacing any existing link.

    The new link is created under a temporary name first and renamed over the
    old one, so there is no window in which the link is missing.
    """
    temp_link = link_path.with_name(f".{link_path.name}.pkger_tmp")
    if temp_link.is_symlink() or temp_link.exists():
        temp_link.unlink()
    os.symlink(target_name, temp_link)
    try:
        temp_link.replace(link_path)
    except BaseException:
        temp_link.unlink()
        raise


def safe_delete(file_path: Path) -> bool:
    """
    Delete a file if it exists. Returns whether anything was actually deleted.

    Raises:
        OSError: If the file exists but can't be deleted.
    """
    if file_path.exists():
        file_path.unlink()
        return True
    return False
