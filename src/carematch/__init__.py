"""Provider matching and geographic coverage engine."""

__version__ = "0.1.0"
