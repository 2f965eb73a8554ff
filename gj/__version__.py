"""Version information for gj."""

__version__ = "0.3.0"
