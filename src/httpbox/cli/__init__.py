"""Command-line interface for httpbox.

Provides the example server command.
"""

from .main import cli

__all__ = ["cli"]
