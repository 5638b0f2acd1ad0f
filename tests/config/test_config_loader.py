# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the config loader.

A config file is optional, but when one is given it must either load
completely or fail with ConfigLoadError / ConfigValidationError.
"""

import textwrap
from pathlib import Path

import pytest

from pkger.config.exceptions import ConfigError, ConfigLoadError, ConfigValidationError
from pkger.config.loader import default_config, load_config


class TestLoadValidConfig:
    def test_loads_minimal_valid_config(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        assert config.global_config.config_version == "1.0.0"
        assert config.global_config.log_level == "DEBUG"

    def test_packaging_section_defaults(self, tmp_config_file: Path) -> None:
        packaging = load_config(tmp_config_file).packaging
        assert packaging.nfpm_binary == "nfpm"
        assert packaging.download_base_url == "https://dl.min.io"
        assert packaging.systemd_unit == "minio.service"
        assert packaging.maintainer == "MinIO Development <dev@minio.io>"

    def test_loads_packaging_overrides(self, tmp_path: Path) -> None:
        content = textwrap.dedent("""\
            global:
              config_version: "1.0.0"
              log_level: "warning"
              log_file: "pkger.log"
            packaging:
              nfpm_binary: "/usr/local/bin/nfpm"
              nfpm_timeout_seconds: 60
              download_base_url: "https://mirror.example.com/"
              systemd_unit: "deploy/minio.service"
        """)
        config_file = tmp_path / "full.yaml"
        config_file.write_text(content, encoding="utf-8")

        config = load_config(config_file)
        assert config.global_config.log_level == "WARNING"
        assert config.global_config.log_file == "pkger.log"
        assert config.packaging.nfpm_binary == "/usr/local/bin/nfpm"
        assert config.packaging.nfpm_timeout_seconds == 60
        assert config.packaging.download_base_url == "https://mirror.example.com"
        assert config.packaging.systemd_unit == "deploy/minio.service"

    def test_default_config(self) -> None:
        config = default_config()
        assert config.global_config.log_level == "INFO"
        assert config.packaging.nfpm_timeout_seconds == 600


class TestLoadInvalidConfig:
    def test_missing_required_field_raises_validation_error(
        self, invalid_config_file: Path
    ) -> None:
        with pytest.raises(ConfigValidationError):
            load_config(invalid_config_file)

    def test_unknown_field_raises_validation_error(self, tmp_path: Path) -> None:
        content = textwrap.dedent("""\
            global:
              config_version: "1.0.0"
            packaging:
              signing_key: "secret"
        """)
        config_file = tmp_path / "unknown_field.yaml"
        config_file.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_wrong_type_raises_validation_error(self, tmp_path: Path) -> None:
        content = textwrap.dedent("""\
            global:
              config_version: "1.0.0"
            packaging:
              nfpm_timeout_seconds: "forever"
        """)
        config_file = tmp_path / "wrong_type.yaml"
        config_file.write_text(content, encoding="utf-8")

        with pytest.raises(ConfigValidationError):
            load_config(config_file)

    def test_broken_yaml_raises_load_error(self, broken_yaml_file: Path) -> None:
        with pytest.raises(ConfigLoadError):
            load_config(broken_yaml_file)

    def test_non_mapping_raises_load_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / "list.yaml"
        config_file.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigLoadError, match="mapping"):
            load_config(config_file)

    def test_nonexistent_file_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError, match="not found"):
            load_config(tmp_path / "does_not_exist.yaml")

    def test_directory_path_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError):
            load_config(tmp_path)

    def test_errors_share_a_base_class(self, broken_yaml_file: Path) -> None:
        with pytest.raises(ConfigError):
            load_config(broken_yaml_file)


class TestConfigImmutability:
    def test_cannot_mutate_frozen_config(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        with pytest.raises(Exception):
            config.global_config.log_level = "ERROR"  # type: ignore[misc]

    def test_cannot_mutate_packaging(self, tmp_config_file: Path) -> None:
        config = load_config(tmp_config_file)
        with pytest.raises(Exception):
            config.packaging.nfpm_binary = "/tmp/evil"  # type: ignore[misc]
