# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""pkger: DEB, RPM and APK packages plus download metadata for MinIO releases."""

__version__ = "1.0.0"
