# bucketsync Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from bucketsync.config.defaults import DEFAULT_CONFIG, ENV_OVERRIDES, generate_default_config
from bucketsync.config.loader import (
    apply_env_overrides,
    ensure_config_exists,
    get_config_path,
    load_config,
    validate_config_file,
)
from bucketsync.config.schema import (
    BucketSyncConfig,
    ConcurrencyConfig,
    LocationsConfig,
    OutputConfig,
    PolicyConfig,
    VerificationConfig,
)

__all__ = [
    # Schema
    "BucketSyncConfig",
    "LocationsConfig",
    "ConcurrencyConfig",
    "VerificationConfig",
    "PolicyConfig",
    "OutputConfig",
    # Loader
    "load_config",
    "get_config_path",
    "ensure_config_exists",
    "validate_config_file",
    "apply_env_overrides",
    # Defaults
    "DEFAULT_CONFIG",
    "ENV_OVERRIDES",
    "generate_default_config",
]
