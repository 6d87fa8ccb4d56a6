# bucketsync Default Configuration
# Full default configuration as Python dict and YAML generator

import copy
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "sync": {
        "source": None,
        "destination": None,
        "profile": None,
        "fallback_region": "us-east-1",
    },
    "concurrency": {
        "max_workers": 16,
        "request_timeout": 60.0,
        "run_deadline": None,
    },
    "verification": {
        "poll_delay": 5.0,
        "timeout": 100.0,
    },
    "policy": {
        "fail_on_errors": False,
    },
    "output": {
        "verbose": False,
        "colored": True,
        "log_file": None,
    },
}

# Environment variables that override the config file
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "SOURCE_URI": ("sync", "source"),
    "DESTINATION_URI": ("sync", "destination"),
    "AWS_PROFILE": ("sync", "profile"),
}


def default_config() -> dict[str, Any]:
    """Return a deep copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def generate_default_config() -> str:
    """
    Generate a commented default configuration file.

    Returns:
        YAML text ready to be written to disk.
    """
    header = """\
# bucketsync configuration
#
# Copies objects that exist in the source location but not in the
# destination. Objects are compared by key and size only: an object whose
# bytes changed without changing size is NOT copied again.
#
# Environment overrides: SOURCE_URI, DESTINATION_URI, AWS_PROFILE
# Command line options override both.

"""
    body = yaml.dump(
        default_config(),
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    return header + body
