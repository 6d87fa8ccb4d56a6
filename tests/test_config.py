# bucketsync Config Tests
# Tests for configuration loading and validation

from pathlib import Path

import pytest
import yaml

from bucketsync.config.defaults import DEFAULT_CONFIG, generate_default_config
from bucketsync.config.loader import (
    apply_env_overrides,
    ensure_config_exists,
    get_config_path,
    load_config,
    validate_config_file,
)
from bucketsync.config.schema import BucketSyncConfig, LocationsConfig, OutputConfig
from bucketsync.errors import ConfigurationError


class TestBucketSyncConfig:
    """Tests for BucketSyncConfig schema."""

    def test_defaults(self):
        """Test configuration with all defaults."""
        config = BucketSyncConfig()

        assert config.sync.source is None
        assert config.sync.fallback_region == "us-east-1"
        assert config.concurrency.max_workers == 16
        assert config.concurrency.run_deadline is None
        assert config.verification.timeout == 100
        assert config.verification.poll_delay == 5
        assert config.policy.fail_on_errors is False

    def test_full_config(self, sample_config: dict):
        """Test full configuration loading."""
        config = BucketSyncConfig.model_validate(sample_config)

        assert config.sync.source == "s3://src-bucket/data"
        assert config.sync.credentials.profile == "test"
        assert config.concurrency.max_workers == 4

    def test_missing_locations(self):
        """Test reporting of unset locations."""
        assert BucketSyncConfig().missing_locations() == ["source", "destination"]

        config = BucketSyncConfig(sync={"source": "s3://a-bucket"})
        assert config.missing_locations() == ["destination"]

    def test_invalid_workers(self):
        """Test that max_workers must be positive."""
        with pytest.raises(ValueError):
            BucketSyncConfig(concurrency={"max_workers": 0})

    def test_invalid_timeout(self):
        """Test that verification timeout must be positive."""
        with pytest.raises(ValueError):
            BucketSyncConfig(verification={"timeout": 0})


class TestLocationsConfig:
    """Tests for LocationsConfig schema."""

    def test_blank_values_unset(self):
        """Test that blank strings count as unset."""
        locations = LocationsConfig(source="  ", profile="")
        assert locations.source is None
        assert locations.profile is None

    def test_values_stripped(self):
        """Test that URIs are stripped."""
        assert LocationsConfig(source=" s3://a-bucket/x ").source == "s3://a-bucket/x"

    def test_default_credentials(self):
        """Test default credential chain."""
        assert LocationsConfig().credentials.display_name == "default chain"


class TestOutputConfig:
    """Tests for OutputConfig schema."""

    def test_log_file_expanded(self, temp_home: Path):
        """Test that ~ is expanded in the log file path."""
        output = OutputConfig(log_file="~/logs/bucketsync.log")
        assert output.log_file == str(temp_home / "logs" / "bucketsync.log")


class TestConfigLoader:
    """Tests for configuration loading."""

    def test_load_config(self, config_file: Path):
        """Test loading configuration from file."""
        config = load_config(config_file, environ={})

        assert config.sync.destination == "s3://dst-bucket/backup"
        assert config.verification.timeout == 10

    def test_default_path(self, config_file: Path):
        """Test loading from the default location."""
        assert get_config_path() == config_file
        assert load_config(environ={}).concurrency.max_workers == 4

    def test_env_path(self, temp_dir: Path, sample_config: dict, monkeypatch):
        """Test BUCKETSYNC_CONFIG override of the config path."""
        path = temp_dir / "custom.yaml"
        path.write_text(yaml.dump(sample_config), encoding="utf-8")
        monkeypatch.setenv("BUCKETSYNC_CONFIG", str(path))

        assert get_config_path() == path

    def test_missing_default_file(self, temp_home: Path):
        """Test that a missing default file falls back to defaults."""
        config = load_config(environ={})
        assert config.sync.source is None
        assert config.concurrency.max_workers == DEFAULT_CONFIG["concurrency"]["max_workers"]

    def test_missing_explicit_file(self, temp_dir: Path):
        """Test that an explicit missing file is an error."""
        with pytest.raises(FileNotFoundError):
            load_config(temp_dir / "nonexistent.yaml", environ={})

    def test_partial_config_merged(self, temp_dir: Path):
        """Test that missing keys get default values."""
        path = temp_dir / "partial.yaml"
        path.write_text("concurrency:\n  max_workers: 2\n", encoding="utf-8")

        config = load_config(path, environ={})

        assert config.concurrency.max_workers == 2
        assert config.concurrency.request_timeout == 60
        assert config.verification.timeout == 100

    def test_empty_file(self, temp_dir: Path):
        """Test that an empty file is all defaults."""
        path = temp_dir / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path, environ={}).sync.fallback_region == "us-east-1"

    def test_invalid_yaml(self, temp_dir: Path):
        """Test YAML syntax errors."""
        path = temp_dir / "bad.yaml"
        path.write_text("sync: [unclosed", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(path, environ={})

    def test_not_a_mapping(self, temp_dir: Path):
        """Test that a top-level list is rejected."""
        path = temp_dir / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(path, environ={})

    def test_invalid_values(self, temp_dir: Path):
        """Test validation errors name the offending field."""
        path = temp_dir / "invalid.yaml"
        path.write_text("concurrency:\n  max_workers: -3\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="concurrency -> max_workers"):
            load_config(path, environ={})

    def test_env_overrides(self, config_file: Path):
        """Test environment variables override the file."""
        environ = {
            "SOURCE_URI": "s3://env-source/in",
            "DESTINATION_URI": "s3://env-dest/out",
            "AWS_PROFILE": "env-profile",
        }

        config = load_config(config_file, environ=environ)

        assert config.sync.source == "s3://env-source/in"
        assert config.sync.destination == "s3://env-dest/out"
        assert config.sync.profile == "env-profile"

    def test_empty_env_ignored(self, config_file: Path):
        """Test that empty environment variables do not override."""
        config = load_config(config_file, environ={"SOURCE_URI": ""})
        assert config.sync.source == "s3://src-bucket/data"

    def test_apply_env_overrides(self):
        """Test override application on a raw dict."""
        data = apply_env_overrides({}, {"AWS_PROFILE": "p"})
        assert data == {"sync": {"profile": "p"}}


class TestDefaultConfig:
    """Tests for the generated default configuration."""

    def test_generated_config_valid(self):
        """Test that the generated file parses and validates."""
        data = yaml.safe_load(generate_default_config())
        config = BucketSyncConfig.model_validate(data)
        assert config.concurrency.max_workers == 16

    def test_generated_config_documents_env(self):
        """Test that the header names the environment overrides."""
        text = generate_default_config()
        assert "SOURCE_URI" in text
        assert "DESTINATION_URI" in text

    def test_ensure_config_exists(self, temp_dir: Path):
        """Test creating the config file once."""
        path = temp_dir / "cfg" / "config.yaml"

        created_path, created = ensure_config_exists(path)
        assert created
        assert created_path.exists()

        _, created_again = ensure_config_exists(path)
        assert not created_again


class TestValidateConfigFile:
    """Tests for validate_config_file."""

    def test_valid(self, config_file: Path):
        assert validate_config_file(config_file) == (True, [])

    def test_missing(self, temp_dir: Path):
        is_valid, errors = validate_config_file(temp_dir / "none.yaml")
        assert not is_valid
        assert "not found" in errors[0]

    def test_invalid(self, temp_dir: Path):
        path = temp_dir / "bad.yaml"
        path.write_text("verification:\n  poll_delay: fast\n", encoding="utf-8")

        is_valid, errors = validate_config_file(path)

        assert not is_valid
        assert any("poll_delay" in e for e in errors)
