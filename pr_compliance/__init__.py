"""Commit to pull request compliance worker."""

__version__ = "1.0.0"
