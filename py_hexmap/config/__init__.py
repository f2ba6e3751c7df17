"""
Configuration for map generation and the services around it.
"""

from .config import Settings, settings

__all__ = ['Settings', 'settings']
