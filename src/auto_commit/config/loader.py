"""Configuration loader with YAML parsing and environment variable substitution."""

import os
import re
from pathlib import Path

import yaml

from .schema import PROVIDERS, AppConfig

DEFAULT_CONFIG_PATH = Path("~/.config/auto-commit/config.yaml")


def substitute_env_vars(text: str) -> str:
    """
    Replace ${VAR_NAME} patterns with environment variable values.

    Args:
        text: Text containing ${VAR_NAME} patterns

    Returns:
        Text with environment variables substituted

    Raises:
        ValueError: If a referenced environment variable is not found
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(f"Environment variable {var_name} not found")
        return value

    return re.sub(r"\$\{([^}]+)\}", replacer, text)


def load_config(path: Path | None = None) -> AppConfig:
    """
    Load configuration from a YAML file with environment variable substitution.

    With no explicit path the default location is used when it exists;
    otherwise built-in defaults (plus AUTO_COMMIT_* environment variables)
    apply. An explicit path that does not exist is an error.

    Args:
        path: Path to YAML configuration file, or None for the default

    Returns:
        Validated AppConfig instance

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist
        ValueError: If environment variables are missing or config is invalid
    """
    if path is None:
        path = DEFAULT_CONFIG_PATH.expanduser()
        if not path.exists():
            config = AppConfig()
            validate_config(config)
            return config
    elif not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    raw_yaml = path.read_text(encoding="utf-8")

    config_dict = yaml.safe_load(substitute_env_vars(raw_yaml)) or {}
    if not isinstance(config_dict, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")

    config = AppConfig.model_validate(config_dict)

    validate_config(config)

    return config


def validate_config(config: AppConfig) -> None:
    """
    Perform additional cross-field validation.

    Args:
        config: Configuration to validate

    Raises:
        ValueError: If provider-specific config is missing
    """
    if config.tracker.provider == "github" and config.tracker.github is None:
        raise ValueError("GitHub tracker selected but github config missing")

    unknown = set(config.truncation.budgets) - set(PROVIDERS)
    if unknown:
        raise ValueError(f"Truncation budgets given for unknown providers: {sorted(unknown)}")
