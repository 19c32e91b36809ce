"""Compass: enrich policy evaluation evidence with compliance context."""

__version__ = "0.3.0"
