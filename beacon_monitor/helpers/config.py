"""Configuration management and environment variable utilities."""

import os
from pathlib import Path

from typing import Literal

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, BaseModel, ConfigDict, Field, ValidationError

from beacon_monitor.helpers.constants import (
    DEFAULT_CHAIN,
    DEFAULT_STATUS_FILE,
    EPOCH_SECONDS,
)
from beacon_monitor.helpers.errors import ConfigError


# Load environment variables from .env file
load_dotenv()


def get_required_env(key: str) -> str:
    """Get a required environment variable.

    Args:
        key: Environment variable name

    Returns:
        Environment variable value

    Raises:
        ConfigError: If the environment variable is not set

    Example:
        ```python
        from beacon_monitor.helpers.config import get_required_env

        beacon_url = get_required_env("BEACON_NODE_URL")
        ```
    """
    value = os.getenv(key)
    if not value:
        msg = f"{key} environment variable is not set"
        raise ConfigError(msg)
    return value


def get_optional_env(key: str, default: str | None = None) -> str | None:
    """Get an optional environment variable with a default value.

    Args:
        key: Environment variable name
        default: Default value if not set

    Returns:
        Environment variable value or default

    Example:
        ```python
        from beacon_monitor.helpers.config import get_optional_env

        status_file = get_optional_env("STATUS_FILE", "validators.json")
        ```
    """
    return os.getenv(key, default)


class MonitorSettings(BaseModel):
    """Runtime settings of the validator monitor."""

    beacon_node_url: AnyHttpUrl = Field(..., description="Beacon node base URL")
    keyshares_file: Path = Field(..., description="Key-share JSON file")
    registration_url: AnyHttpUrl = Field(
        ..., description="Registration service endpoint"
    )
    status_file: Path = Field(
        default=Path(DEFAULT_STATUS_FILE), description="Persisted status file"
    )
    chain: Literal["mainnet", "hoodi", "sepolia"] = Field(
        default=DEFAULT_CHAIN, description="Chain network selector"
    )
    registration_mode: Literal["bulk", "per_key"] = Field(
        default="bulk", description="Register activations in one call or per key"
    )
    epoch_seconds: float = Field(
        default=EPOCH_SECONDS, gt=0, description="Poll interval in seconds"
    )

    model_config = ConfigDict(frozen=True)


ENV_VARS: dict[str, str] = {
    "beacon_node_url": "BEACON_NODE_URL",
    "keyshares_file": "KEYSHARES_FILE",
    "registration_url": "REGISTRATION_URL",
    "status_file": "STATUS_FILE",
    "chain": "CHAIN",
    "registration_mode": "REGISTRATION_MODE",
    "epoch_seconds": "EPOCH_SECONDS",
}
"""Settings field name to environment variable name"""

REQUIRED_FIELDS = ("beacon_node_url", "keyshares_file", "registration_url")

LOWERCASE_FIELDS = ("chain", "registration_mode")


def load_settings() -> MonitorSettings:
    """Build monitor settings from the environment.

    Returns:
        Validated, immutable settings

    Raises:
        ConfigError: If a required variable is missing or a value is invalid.
            The message names the offending variable.
    """
    values: dict[str, str] = {
        field: get_required_env(ENV_VARS[field]) for field in REQUIRED_FIELDS
    }

    for field, env_key in ENV_VARS.items():
        if field in REQUIRED_FIELDS:
            continue
        value = get_optional_env(env_key)
        if not value:
            continue
        if field in LOWERCASE_FIELDS:
            value = value.strip().lower()
        values[field] = value

    try:
        return MonitorSettings.model_validate(values)
    except ValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else ""
        env_key = ENV_VARS.get(field, field)
        msg = f"Invalid value for {env_key}: {error['msg']}"
        raise ConfigError(msg) from e


__all__ = [
    "ENV_VARS",
    "MonitorSettings",
    "get_optional_env",
    "get_required_env",
    "load_settings",
]
