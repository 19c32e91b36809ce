"""Exception types raised by Compass."""

from __future__ import annotations


class CompassError(Exception):
    """Base class for Compass errors."""


class ConfigurationError(CompassError):
    """Startup configuration is missing, malformed or inconsistent.

    Raised only while loading config, catalogs and evaluation plans. Request
    handling never raises it.
    """
