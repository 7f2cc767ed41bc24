"""Nearby event discovery kept in sync with location, radius and favorites."""

__version__ = "0.1.0"
