"""Hybrid retrieval engine for SDK documentation and code samples."""

__version__ = "1.0.0"
