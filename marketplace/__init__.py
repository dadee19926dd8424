"""Marketplace scoring, competitive analysis and pricing core."""

__version__ = "0.1.0"
