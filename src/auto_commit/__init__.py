"""auto-commit: LLM-written commit messages linked to the most relevant issue."""

from auto_commit._version import __version__

__all__ = ["__version__"]
