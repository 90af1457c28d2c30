"""Helpers for hashing, directory views, Markdown, JSON, TOML, templates, search and reports."""

__version__ = "1.0.0"
__all__ = ["__version__"]