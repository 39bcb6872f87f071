"""Protocol definitions for pluggable adapters."""

from .llm import LLMProvider
from .terminal import TerminalUI
from .tracker import IssueTracker
from .vcs import VCSProvider

__all__ = ["IssueTracker", "LLMProvider", "TerminalUI", "VCSProvider"]
