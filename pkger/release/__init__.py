# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release subsystem for pkger.

Tag normalization, nfpm config rendering, package emission through nfpm,
checksum sidecars and the download page metadata. Each concern is its own
subpackage; the CLI wires them together in order.
"""
