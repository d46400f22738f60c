"""
Storage Layer.

This package handles persistence of the optional configuration file.
"""

from .config_manager import ConfigManager

__all__ = ["ConfigManager"]
