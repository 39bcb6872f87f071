"""Configuration loading, validation and persisted user settings."""

from .loader import load_config
from .schema import (
    COMMON_MODELS,
    DEFAULT_MODELS,
    PROVIDERS,
    AnthropicConfig,
    AppConfig,
    CommitConfig,
    GitHubConfig,
    LLMConfig,
    MatchingConfig,
    OllamaConfig,
    OpenAIConfig,
    TrackerConfig,
    TruncationConfig,
)
from .store import ConfigStore

__all__ = [
    # Loader
    "load_config",
    # Persisted settings
    "ConfigStore",
    # Root config
    "AppConfig",
    # Top-level configs
    "LLMConfig",
    "TrackerConfig",
    "MatchingConfig",
    "TruncationConfig",
    "CommitConfig",
    # Provider-specific configs
    "GitHubConfig",
    "OpenAIConfig",
    "AnthropicConfig",
    "OllamaConfig",
    # Provider defaults
    "PROVIDERS",
    "DEFAULT_MODELS",
    "COMMON_MODELS",
]
