"""Shared utilities for httpbox."""
