# bucketsync Configuration Loader
# Load, save, and manage YAML configuration files

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from bucketsync.config.defaults import ENV_OVERRIDES, default_config, generate_default_config
from bucketsync.config.schema import BucketSyncConfig
from bucketsync.errors import ConfigurationError


def get_config_dir() -> Path:
    """Get the bucketsync configuration directory."""
    return Path.home() / ".config" / "bucketsync"


def get_config_path() -> Path:
    """Get the path to the configuration file."""
    # Allow override via environment variable
    env_path = os.environ.get("BUCKETSYNC_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / "config.yaml"


def load_config(
    config_path: Optional[Path] = None,
    *,
    environ: Optional[Mapping[str, str]] = None,
) -> BucketSyncConfig:
    """
    Load configuration from YAML file and environment.

    A missing default config file is not an error; defaults apply. An
    explicitly requested file must exist.

    Args:
        config_path: Optional path to config file. Uses default if not provided.
        environ: Environment mapping for overrides (default: os.environ).

    Returns:
        BucketSyncConfig: Validated configuration object.

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist.
        ConfigurationError: If the file is not valid YAML or fails validation.
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = get_config_path()

    data: dict[str, Any] = {}
    if config_path.exists():
        data = _read_yaml(config_path)
    elif explicit:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    merged = _merge_with_defaults(data)
    apply_env_overrides(merged, os.environ if environ is None else environ)

    try:
        return BucketSyncConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}:\n" + "\n".join(_format_errors(e))) from e


def ensure_config_exists(config_path: Optional[Path] = None) -> tuple[Path, bool]:
    """
    Ensure configuration file exists, creating default if needed.

    Returns:
        Tuple of (config_path, was_created).
    """
    if config_path is None:
        config_path = get_config_path()

    if config_path.exists():
        return config_path, False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(generate_default_config(), encoding="utf-8")
    return config_path, True


def validate_config_file(config_path: Optional[Path] = None) -> tuple[bool, list[str]]:
    """
    Validate a configuration file without applying environment overrides.

    Args:
        config_path: Path to config file to validate.

    Returns:
        Tuple of (is_valid, error_messages).
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        return False, [f"Configuration file not found: {config_path}"]

    try:
        data = _read_yaml(config_path)
    except ConfigurationError as e:
        return False, [e.message]

    try:
        BucketSyncConfig.model_validate(_merge_with_defaults(data))
    except ValidationError as e:
        return False, _format_errors(e)

    return True, []


def apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """
    Apply SOURCE_URI, DESTINATION_URI and AWS_PROFILE to a config dict.

    Args:
        data: Merged configuration dict, updated in place.
        environ: Environment mapping.

    Returns:
        The updated dict.
    """
    for variable, (section, key) in ENV_OVERRIDES.items():
        value = environ.get(variable)
        if value:
            data.setdefault(section, {})[key] = value
    return data


def _read_yaml(config_path: Path) -> dict[str, Any]:
    """Read a YAML mapping from disk."""
    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {config_path} must be a mapping")
    return data


def _merge_with_defaults(data: dict[str, Any]) -> dict[str, Any]:
    """Merge loaded data with default values for missing keys."""
    result = default_config()

    for section, values in data.items():
        if isinstance(values, dict) and isinstance(result.get(section), dict):
            result[section] = {**result[section], **values}
        else:
            result[section] = values

    return result


def _format_errors(error: ValidationError) -> list[str]:
    """Flatten pydantic errors into readable lines."""
    messages = []
    for item in error.errors():
        loc = " -> ".join(str(part) for part in item["loc"])
        messages.append(f"{loc}: {item['msg']}")
    return messages
