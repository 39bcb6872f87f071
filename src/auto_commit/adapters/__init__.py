"""Concrete implementations of provider interfaces."""

from .llm.anthropic import AnthropicAdapter
from .llm.ollama import OllamaAdapter
from .llm.openai import OpenAIAdapter
from .tracker.github import GitHubIssueTracker
from .vcs.git import GitRepository

__all__ = [
    "AnthropicAdapter",
    "GitHubIssueTracker",
    "GitRepository",
    "OllamaAdapter",
    "OpenAIAdapter",
]
