# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions raised while loading the optional pkger YAML config.

Kept apart from the loader so the CLI can catch config failures without
pulling in pydantic.
"""


class ConfigError(Exception):
    """Base for all configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when a config file cannot be read from disk or parsed as YAML."""


class ConfigValidationError(ConfigError):
    """
    Raised when a config file parses fine but fails schema validation:
    missing required fields, unknown keys, or values of the wrong type.
    """
