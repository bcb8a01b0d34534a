"""Fossil - unearth technical debt markers and date them with git history."""

__version__ = "0.1.0"
