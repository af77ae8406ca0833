"""Logging utilities and helpers.

This package provides logging infrastructure for httpbox:
- iso_formatter: JSONL and console formatters that keep structured extras
- logger_setup: Factory function wiring the httpbox loggers to stderr

Import directly from submodules:
    from httpbox.utils.logging.logger_setup import configure_logging
"""

__all__: list[str] = []  # Direct submodule imports required (see docstring)
