# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""Process exit codes returned by every pkger subcommand."""

SUCCESS: int = 0
USER_ERROR: int = 1
CONFIG_ERROR: int = 2
RUNTIME_ERROR: int = 3
VALIDATION_ERROR: int = 4
