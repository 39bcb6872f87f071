"""Version information for auto-commit."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("auto-commit")
except PackageNotFoundError:
    # Source checkout that was never installed
    __version__ = "0.0.0+local"

__all__ = ["__version__"]
