# src/memwatch/cli/__init__.py
"""
Command-line interface. `memwatch.cli.app` is the console entry point.
"""

from .main import app

__all__ = ["app"]
