"""
Configuration management.

All configuration keys and their environment overrides are defined here.
The client itself only needs a base URL; everything else has defaults.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .accounts_client.client import ConfigError
from .accounts_client.pagination import DEFAULT_ACCOUNTS_PAGE_SIZE

DEFAULT_BASE_URL = "http://localhost:8080/v1"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails."""

    pass


@dataclass
class ApiConfig:
    """Accounts API connection settings."""

    base_url: str = DEFAULT_BASE_URL
    # Request timeout (seconds), handed to the transport unmodified
    timeout: float = 30
    # Default page size for account listings
    page_size: int = DEFAULT_ACCOUNTS_PAGE_SIZE


@dataclass
class Config:
    """Application configuration."""

    api: ApiConfig = field(default_factory=ApiConfig)
    log_level: str = "INFO"

    def validate(self) -> list[str]:
        """Validate configuration completeness and consistency.

        Returns:
            List of validation errors (empty if valid)
        """
        errors: list[str] = []

        if not self.api.base_url:
            errors.append("api.base_url is required")
        elif not self.api.base_url.startswith(("http://", "https://")):
            errors.append("api.base_url must be an http(s) URL")
        if self.api.timeout <= 0:
            errors.append("api.timeout must be > 0")
        if self.api.page_size < 1:
            errors.append("api.page_size must be >= 1")
        if self.log_level.upper() not in LOG_LEVELS:
            errors.append(f"log_level must be one of {', '.join(LOG_LEVELS)}")

        return errors


def _number_setting(env_name: str, key: str, value: Any, convert: type) -> float | int:
    """Resolve a numeric setting, preferring the environment over the file."""
    raw = os.environ.get(env_name, "")
    name = env_name if raw else key
    if raw:
        value = raw
    if isinstance(value, bool):
        raise ConfigValidationError(f"{name} must be a number, got {value!r}")
    try:
        return convert(value)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"{name} must be a number, got {value!r}") from e


def _string_setting(env_name: str, key: str, value: Any) -> str:
    """Resolve a string setting, preferring the environment over the file."""
    value = os.environ.get(env_name, value)
    if not isinstance(value, str):
        raise ConfigValidationError(f"{key} must be a string, got {value!r}")
    return value


def load_config(config_path: Path) -> Config:
    """
    Load configuration from YAML file.

    A missing file yields the defaults. Environment variables override
    config values:
    - FORM3_API_URL
    - FORM3_TIMEOUT (seconds)
    - FORM3_PAGE_SIZE
    - FORM3_LOG_LEVEL

    Raises:
        ConfigValidationError: If the file is not valid YAML, a value has
            the wrong type, or the resulting configuration is invalid
    """
    if config_path.exists():
        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigValidationError(f"Invalid YAML in {config_path}: {e}") from e
    else:
        data = {}

    if not isinstance(data, dict):
        raise ConfigValidationError(f"{config_path} must contain a mapping")

    api_data = data.get("api") or {}
    if not isinstance(api_data, dict):
        raise ConfigValidationError("api must be a mapping")

    api = ApiConfig(
        base_url=_string_setting(
            "FORM3_API_URL", "api.base_url", api_data.get("base_url", DEFAULT_BASE_URL)
        ),
        timeout=_number_setting("FORM3_TIMEOUT", "api.timeout", api_data.get("timeout", 30), float),
        page_size=_number_setting(
            "FORM3_PAGE_SIZE",
            "api.page_size",
            api_data.get("page_size", DEFAULT_ACCOUNTS_PAGE_SIZE),
            int,
        ),
    )

    config = Config(
        api=api,
        log_level=_string_setting("FORM3_LOG_LEVEL", "log_level", data.get("log_level", "INFO")).upper(),
    )

    errors = config.validate()
    if errors:
        raise ConfigValidationError("; ".join(errors))

    return config


def create_default_config(config_path: Path) -> None:
    """Create a default configuration file."""
    default_config = f"""# Form3 Accounts API client configuration
#
# Environment overrides: FORM3_API_URL, FORM3_TIMEOUT, FORM3_PAGE_SIZE,
# FORM3_LOG_LEVEL

api:
  # API root, including the version prefix
  base_url: "{DEFAULT_BASE_URL}"
  # Request timeout (seconds)
  timeout: 30
  # Accounts per page when listing
  page_size: {DEFAULT_ACCOUNTS_PAGE_SIZE}

log_level: "INFO"
"""

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w") as f:
        f.write(default_config)
