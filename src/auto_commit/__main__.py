"""Entry point for auto-commit.

This module provides the command line interface. It handles:
- Argument parsing
- Logging setup with secret sanitization
- Configuration loading and provider/model/API key resolution
- Administrative commands (defaults, model and author listings)
- Running the commit workflow
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

import structlog

from auto_commit._version import __version__
from auto_commit.config.schema import COMMON_MODELS, DEFAULT_MODELS, PROVIDERS, AppConfig
from auto_commit.models.commit import CommitFormat
from auto_commit.utils.security import mask_config_value

log = structlog.get_logger()

# Read by the provider SDKs when no key is configured
API_KEY_ENV_VARS: dict[str, str] = {
    "anthropic": "ANTHROPIC_API_KEY",
    "openai": "OPENAI_API_KEY",
}


def setup_logging(
    debug: bool = False,
    log_format: str = "console",
    file_path: Path | None = None,
    file_enabled: bool = False,
) -> None:
    """Configure structured logging with secret sanitization.

    Args:
        debug: Enable debug logging if True
        log_format: Output format ("json" or "console")
        file_path: Path to log file (if file logging enabled)
        file_enabled: Whether to enable file logging
    """
    from auto_commit.utils.logging import LogFormat, LogLevel, configure_logging

    level = LogLevel.DEBUG if debug else LogLevel.WARNING
    fmt = LogFormat(log_format.lower()) if isinstance(log_format, str) else log_format

    configure_logging(
        level=level,
        log_format=fmt,
        file_path=file_path,
        file_enabled=file_enabled,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="auto-commit",
        description="Generate commit messages for staged changes and link related issues",
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    commit = parser.add_argument_group("commit message")
    commit.add_argument(
        "-f",
        "--format",
        help="Commit format: conventional, semantic, angular, kernel, issue, repo, custom "
        "(prefixes accepted, e.g. 'conv'). Remembered as the default.",
    )
    commit.add_argument("--author", help="Learn or use the style guide of this author")
    commit.add_argument(
        "--learn",
        action="store_true",
        help="Learn a style guide from the commit history (of --author, if given)",
    )
    commit.add_argument(
        "--issue",
        action="store_true",
        help="Search for a related issue to reference",
    )
    commit.add_argument(
        "--reset-format",
        action="store_true",
        help="Forget the stored default commit format",
    )

    llm = parser.add_argument_group("LLM provider")
    llm.add_argument("--provider", choices=PROVIDERS, help="LLM provider to use")
    llm.add_argument("--model", help="Model to use with the provider")
    llm.add_argument("--base-url", help="Base URL for OpenAI-compatible or Ollama servers")
    llm.add_argument(
        "--set-default-provider",
        action="store_true",
        help="Store --provider as the default and exit",
    )
    llm.add_argument(
        "--set-default-model",
        action="store_true",
        help="Store --model as the default for the provider and exit",
    )
    llm.add_argument("--list-models", action="store_true", help="List common models")
    llm.add_argument("--show-defaults", action="store_true", help="Show stored defaults")

    parser.add_argument(
        "--list-authors",
        action="store_true",
        help="List commit authors in this repository",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: ~/.config/auto-commit/config.yaml)",
    )
    parser.add_argument("-d", "--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-format",
        choices=["json", "console"],
        default="console",
        help="Log output format (default: console)",
    )

    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed argument namespace
    """
    return build_parser().parse_args(argv)


def apply_provider_overrides(
    config: AppConfig,
    provider: str,
    *,
    model: str | None = None,
    api_key: str | None = None,
    base_url: str | None = None,
) -> AppConfig:
    """Return a copy of ``config`` using ``provider`` with the given overrides.

    The provider section is re-validated, so an unsafe Ollama URL is
    rejected here rather than at request time.
    """
    section = getattr(config.llm, provider)
    updates: dict[str, str] = {}
    if model:
        updates["model"] = model
    if api_key and provider != "ollama":
        updates["api_key"] = api_key
    if base_url and provider in ("openai", "ollama"):
        updates["base_url"] = base_url

    validated = type(section).model_validate({**section.model_dump(), **updates})
    llm = config.llm.model_copy(update={"provider": provider, provider: validated})
    return config.model_copy(update={"llm": llm})


def resolve_format(args: argparse.Namespace, config: AppConfig, store) -> CommitFormat:
    """Pick the commit format, remembering an explicit valid choice."""
    if args.format:
        fmt = CommitFormat.match(args.format)
        if fmt is None:
            log.warning("unknown_commit_format", value=args.format)
            return CommitFormat.CONVENTIONAL
        store.store_default_format(fmt)
        return fmt
    return store.get_default_format() or config.commit.default_format


def list_models(ui, provider: str | None) -> None:
    for name in [provider] if provider else PROVIDERS:
        ui.info(f"[bold]{name}[/bold] (default: {DEFAULT_MODELS[name]})")
        for model in COMMON_MODELS[name]:
            ui.info(f"  - {model}")


def show_defaults(ui, store, config: AppConfig) -> None:
    ui.info(f"Default provider: [cyan]{store.get_provider() or config.llm.provider}[/cyan]")
    for name in PROVIDERS:
        stored = store.get_model(name)
        if stored:
            ui.info(f"Default model for [cyan]{name}[/cyan]: [cyan]{stored}[/cyan]")
        else:
            model = getattr(config.llm, name).model
            ui.info(f"Default model for [cyan]{name}[/cyan]: [dim]{model} (system default)[/dim]")

    fmt = store.get_default_format()
    ui.info(f"Default format: [cyan]{fmt.value if fmt else config.commit.default_format.value}[/cyan]")

    base_url = store.get_provider_setting("ollama", "baseUrl")
    if base_url:
        ui.info(f"Ollama base URL: [cyan]{base_url}[/cyan]")

    for name in API_KEY_ENV_VARS:
        api_key = store.get_api_key(name)
        if api_key:
            ui.info(f"Stored {name} key: [dim]{mask_config_value('key', api_key)}[/dim]")


def resolve_api_key(ui, store, config: AppConfig, provider: str) -> str | None:
    """Find the API key, prompting (and offering to store it) as a last resort.

    Returns:
        The key, or None when the user gave none
    """
    section = getattr(config.llm, provider)
    key = section.api_key or store.get_api_key(provider) or os.environ.get(
        API_KEY_ENV_VARS[provider]
    )
    if key:
        return key

    key = ui.ask_secret(f"Please enter your {provider.upper()} API key").strip()
    if not key:
        return None
    if ui.confirm("Would you like to store this API key for future use?"):
        store.store_api_key(provider, key)
        ui.success("API key stored successfully!")
    return key


async def run(args: argparse.Namespace) -> int:
    """Run one auto-commit invocation.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    from auto_commit.config.loader import load_config
    from auto_commit.config.store import ConfigStore
    from auto_commit.ui.console import ConsoleUI
    from auto_commit.utils.logging import configure_logging

    config = load_config(args.config)
    ui = ConsoleUI(editor=config.commit.editor)
    store = ConfigStore()

    if not args.debug:
        configure_logging(
            level=config.logging.level,
            log_format=args.log_format,
            file_path=config.logging.file.path if config.logging.file.enabled else None,
            file_enabled=config.logging.file.enabled,
        )

    if args.list_authors:
        from auto_commit.adapters.vcs.git import GitRepository

        for count, author in await GitRepository().list_authors():
            ui.info(f"{count:>6}  {author}")
        return 0

    if args.list_models:
        list_models(ui, args.provider)
        return 0

    if args.show_defaults:
        show_defaults(ui, store, config)
        return 0

    provider = args.provider or store.get_provider() or config.llm.provider
    if provider not in PROVIDERS:
        ui.error(f"Invalid provider: {provider}. Available providers: {', '.join(PROVIDERS)}")
        return 1

    if args.set_default_provider:
        if not args.provider:
            ui.error("--set-default-provider requires --provider")
            return 1
        store.store_provider(provider)
        ui.success(f"Default provider set to: {provider}")
        return 0

    if args.set_default_model:
        if not args.model:
            ui.error("--set-default-model requires --model")
            return 1
        store.store_model(provider, args.model)
        ui.success(f"Default model for {provider} set to: {args.model}")
        return 0

    if args.reset_format:
        if store.reset_default_format():
            ui.success("Reset commit format to default")
        else:
            ui.notice("No stored commit format to reset")
        return 0

    if args.provider:
        store.store_provider(provider)
    if args.model:
        store.store_model(provider, args.model)
    if args.base_url:
        store.store_provider_setting(provider, "baseUrl", args.base_url)

    api_key = None
    if provider != "ollama":
        api_key = resolve_api_key(ui, store, config, provider)
        if not api_key:
            ui.error("API key is required")
            return 1

    config = apply_provider_overrides(
        config,
        provider,
        model=args.model or store.get_model(provider),
        api_key=api_key,
        base_url=args.base_url or store.get_provider_setting(provider, "baseUrl"),
    )
    ui.info(
        f"Using model: [cyan]{getattr(config.llm, provider).model}[/cyan] "
        f"with provider: [cyan]{provider}[/cyan]"
    )

    from auto_commit.core.workflow import RunOptions, create_workflow

    workflow = create_workflow(config, ui, store)
    options = RunOptions(
        format=resolve_format(args, config, store),
        author=args.author,
        learn=args.learn,
        issue=args.issue,
    )
    return await workflow.run(options)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(debug=args.debug, log_format=args.log_format)

    from auto_commit.utils.async_helpers import AutoCommitError
    from auto_commit.utils.safe_subprocess import CLIError
    from auto_commit.utils.security import SecurityError

    try:
        return asyncio.run(run(args))
    except FileNotFoundError as e:
        log.error("configuration_file_not_found", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        log.error("configuration_invalid", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except (AutoCommitError, CLIError, SecurityError) as e:
        log.error("command_failed", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nCommit aborted", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
