"""Daybook: a dated journal with cloud file sync."""

__version__ = "0.1.0"
