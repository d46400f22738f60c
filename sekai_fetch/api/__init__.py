"""
Master Database Layer.

This package handles all communication with the Project SEKAI master
database mirror.
"""

from .client import MasterDbClient

__all__ = ["MasterDbClient"]
