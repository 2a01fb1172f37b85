"""Repo Analyzer: GitHub login sessions and repository metrics API."""

__version__ = "0.1.0"
