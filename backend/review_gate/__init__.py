"""Commit-time retrieval-augmented code review gate."""

__version__ = "0.1.0"
