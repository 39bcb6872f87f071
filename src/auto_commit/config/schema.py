"""Pydantic models for configuration schema."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.commit import CommitFormat

ProviderName = Literal["anthropic", "openai", "ollama"]

PROVIDERS: tuple[ProviderName, ...] = ("anthropic", "openai", "ollama")

# Used when neither the config file nor the stored defaults name a model
DEFAULT_MODELS: dict[str, str] = {
    "anthropic": "claude-3-haiku-20240307",
    "openai": "gpt-3.5-turbo",
    "ollama": "llama3",
}

# Shown by --list-models
COMMON_MODELS: dict[str, tuple[str, ...]] = {
    "anthropic": (
        "claude-3-5-haiku-20241022",
        "claude-3-5-sonnet-20241022",
        "claude-3-7-sonnet-20250219",
    ),
    "openai": ("gpt-4o-mini", "gpt-4o", "o3-mini", "o1"),
    "ollama": ("llama3", "mistral", "mixtral", "codellama", "llama2"),
}


class AnthropicConfig(BaseModel):
    """Anthropic-specific configuration."""

    api_key: str | None = None
    model: str = DEFAULT_MODELS["anthropic"]
    max_tokens: int = Field(1024, ge=1, le=8192)
    temperature: float = Field(0.0, ge=0.0, le=1.0)
    timeout: float = Field(60.0, gt=0)


class OpenAIConfig(BaseModel):
    """OpenAI-specific configuration."""

    api_key: str | None = None
    model: str = DEFAULT_MODELS["openai"]
    base_url: str | None = None
    max_tokens: int = Field(1024, ge=1, le=16384)
    temperature: float = Field(0.0, ge=0.0, le=2.0)
    timeout: float = Field(60.0, gt=0)


class OllamaConfig(BaseModel):
    """Ollama-specific configuration."""

    base_url: str = "http://localhost:11434"
    model: str = DEFAULT_MODELS["ollama"]
    temperature: float = Field(0.0, ge=0.0, le=2.0)
    timeout: float = Field(120.0, gt=0)
    allow_remote_host: bool = False

    @model_validator(mode="after")
    def check_remote_host(self) -> "OllamaConfig":
        """Validate Ollama URL and check for SSRF prevention."""
        from urllib.parse import urlparse

        from ..utils.security import validate_ollama_url

        if not validate_ollama_url(self.base_url, allow_remote=self.allow_remote_host):
            host = urlparse(self.base_url).hostname
            if host and not self.allow_remote_host:
                raise ValueError(
                    f"Ollama host {host} not allowed. "
                    f"Set allow_remote_host=true to use non-localhost hosts."
                )
            raise ValueError(f"Invalid Ollama URL: {self.base_url}")
        return self


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: ProviderName = "anthropic"
    anthropic: AnthropicConfig = AnthropicConfig()
    openai: OpenAIConfig = OpenAIConfig()
    ollama: OllamaConfig = OllamaConfig()
    keyword_timeout: float = Field(
        30.0, gt=0, description="Timeout for the keyword extraction completion"
    )


class GitHubConfig(BaseModel):
    """GitHub-specific configuration."""

    gh_path: str | None = None
    remote: str = "origin"
    command_timeout: int = Field(30, ge=1, le=300)
    issue_cache_ttl: int = Field(300, ge=0)

    @field_validator("remote")
    @classmethod
    def validate_remote(cls, v: str) -> str:
        """Reject remote names that could be read as git options."""
        if not v or v.startswith("-") or any(c.isspace() for c in v):
            raise ValueError(f"Invalid git remote name: {v!r}")
        return v


class TrackerConfig(BaseModel):
    """Issue tracker configuration."""

    provider: Literal["github"] = "github"
    github: GitHubConfig | None = GitHubConfig()


class MatchingConfig(BaseModel):
    """Issue relevance scoring weights and fetch limits."""

    title_weight: int = Field(10, ge=0)
    label_weight: int = Field(8, ge=0)
    body_weight: int = Field(5, ge=0)
    broad_title_weight: int = Field(3, ge=0)
    broad_body_weight: int = Field(1, ge=0)
    max_scored_candidates: int = Field(5, ge=1, le=50)
    max_raw_candidates: int = Field(15, ge=1, le=100)
    open_issue_fetch_limit: int = Field(30, ge=1, le=100)
    fallback_search_terms: int = Field(3, ge=1, le=10)
    fallback_search_limit: int = Field(5, ge=1, le=100)
    max_keywords: int = Field(20, ge=1, le=100)


class TruncationConfig(BaseModel):
    """Diff truncation budgets, in characters, per LLM provider."""

    head_ratio: float = Field(0.3, gt=0.0, lt=1.0)
    tail_ratio: float = Field(0.4, gt=0.0, lt=1.0)
    budgets: dict[str, int] = {
        "anthropic": 100_000,
        "openai": 60_000,
        "ollama": 12_000,
    }
    default_budget: int = Field(30_000, ge=1_000)

    @model_validator(mode="after")
    def check_ratios(self) -> "TruncationConfig":
        """Head and tail must leave room for the middle sample."""
        if self.head_ratio + self.tail_ratio >= 1.0:
            raise ValueError("head_ratio + tail_ratio must be less than 1.0")
        return self

    @field_validator("budgets")
    @classmethod
    def validate_budgets(cls, v: dict[str, int]) -> dict[str, int]:
        """Budgets must be large enough to hold the truncation markers."""
        for provider, budget in v.items():
            if budget < 1_000:
                raise ValueError(f"Truncation budget for {provider} is too small: {budget}")
        return v


class CommitConfig(BaseModel):
    """Commit message generation configuration."""

    default_format: CommitFormat = CommitFormat.CONVENTIONAL
    editor: str | None = None
    history_limit: int = Field(50, ge=1, le=500)


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("~/.cache/auto-commit/auto-commit.log")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: Literal["json", "console"] = "console"
    file: FileLoggingConfig = FileLoggingConfig()


class AppConfig(BaseSettings):
    """Root configuration for auto-commit."""

    llm: LLMConfig = LLMConfig()
    tracker: TrackerConfig = TrackerConfig()
    matching: MatchingConfig = MatchingConfig()
    truncation: TruncationConfig = TruncationConfig()
    commit: CommitConfig = CommitConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_prefix="AUTO_COMMIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )
