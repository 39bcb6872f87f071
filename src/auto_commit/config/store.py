"""Persisted user settings under ~/.config/auto-commit.

Each setting is a small plain-text file so it can be inspected and edited
by hand:

    <provider>-key          API key for a provider
    llm-provider            default provider
    <provider>-model        default model for a provider
    <provider>-<setting>    provider setting, e.g. ollama-baseUrl
    default-format          default commit format
    default-style           learned repository style guide
    style-<author>          learned style guide for one author

Values are read at most once per key per process; writes update the cache.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import structlog

from ..models.commit import CommitFormat

log = structlog.get_logger()

DEFAULT_CONFIG_DIR = Path("~/.config/auto-commit")

# Keeps author names and setting keys from escaping the config directory
_SAFE_NAME = re.compile(r"[^A-Za-z0-9@._+-]")


def _safe_filename(name: str) -> str:
    cleaned = _SAFE_NAME.sub("_", name.strip())
    if not cleaned or cleaned in (".", ".."):
        raise ValueError(f"Invalid config name: {name!r}")
    return cleaned


class ConfigStore:
    """Reads and writes the per-user settings files.

    Example:
        store = ConfigStore()
        provider = store.get_provider() or "anthropic"
        api_key = store.get_api_key(provider)
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        self._dir = (config_dir or DEFAULT_CONFIG_DIR).expanduser()
        self._cache: dict[str, str | None] = {}

    @property
    def config_dir(self) -> Path:
        return self._dir

    def _read(self, name: str) -> str | None:
        if name in self._cache:
            return self._cache[name]

        path = self._dir / name
        try:
            value: str | None = path.read_text(encoding="utf-8").strip() or None
        except FileNotFoundError:
            value = None
        except OSError as e:
            log.warning("config_store_read_failed", file=name, error=str(e))
            value = None

        self._cache[name] = value
        return value

    def _write(self, name: str, value: str, private: bool = False) -> None:
        self._dir.mkdir(parents=True, exist_ok=True)
        path = self._dir / name
        path.write_text(value, encoding="utf-8")
        if private:
            os.chmod(path, 0o600)
        self._cache[name] = value.strip() or None
        log.debug("config_store_written", file=name)

    def _remove(self, name: str) -> bool:
        self._cache[name] = None
        try:
            (self._dir / name).unlink()
        except FileNotFoundError:
            return False
        return True

    # API keys

    def get_api_key(self, provider: str) -> str | None:
        return self._read(f"{_safe_filename(provider)}-key")

    def store_api_key(self, provider: str, api_key: str) -> None:
        self._write(f"{_safe_filename(provider)}-key", api_key.strip(), private=True)

    # Provider and model defaults

    def get_provider(self) -> str | None:
        return self._read("llm-provider")

    def store_provider(self, provider: str) -> None:
        self._write("llm-provider", provider)

    def get_model(self, provider: str) -> str | None:
        return self._read(f"{_safe_filename(provider)}-model")

    def store_model(self, provider: str, model: str) -> None:
        self._write(f"{_safe_filename(provider)}-model", model.strip())

    def get_provider_setting(self, provider: str, key: str) -> str | None:
        return self._read(f"{_safe_filename(provider)}-{_safe_filename(key)}")

    def store_provider_setting(self, provider: str, key: str, value: str) -> None:
        self._write(f"{_safe_filename(provider)}-{_safe_filename(key)}", value.strip())

    # Commit format and learned styles

    def get_default_format(self) -> CommitFormat | None:
        """Return the stored default format, ignoring unknown values."""
        value = self._read("default-format")
        if value is None:
            return None
        try:
            return CommitFormat(value)
        except ValueError:
            log.warning("unknown_stored_format", value=value)
            return None

    def store_default_format(self, fmt: CommitFormat) -> None:
        self._write("default-format", fmt.value)

    def reset_default_format(self) -> bool:
        """Delete the stored default format. Returns False if none was stored."""
        return self._remove("default-format")

    def get_style_guide(self, author: str | None = None) -> str | None:
        """Return the author's style guide, falling back to the repository one."""
        if author:
            style = self._read(f"style-{_safe_filename(author)}")
            if style:
                return style
        return self._read("default-style")

    def store_style_guide(self, style: str, author: str | None = None) -> None:
        name = f"style-{_safe_filename(author)}" if author else "default-style"
        self._write(name, style)
