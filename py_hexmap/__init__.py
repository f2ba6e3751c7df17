"""Procedural hex-grid strategy map generator."""

__version__ = "0.1.0"
