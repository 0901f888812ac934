"""Clean Store: user and product management API."""

__version__ = "1.0.0"
