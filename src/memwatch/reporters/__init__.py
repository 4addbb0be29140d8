# src/memwatch/reporters/__init__.py
"""Human-readable renderers for memory reports and analysis results."""
