"""Random item generation from nested weighted tables."""

__version__ = "0.1.0"
