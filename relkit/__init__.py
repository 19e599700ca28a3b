"""Staged release workflow: checks, versions, tests, commits, tags, push."""

__version__ = "0.1.0"
