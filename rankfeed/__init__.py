"""Decayed popularity ranking and feed aggregation service."""

__version__ = "1.0.0"
