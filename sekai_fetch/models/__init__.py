"""
Data Models Layer.

This package contains the Pydantic models that define the master database
records, the application configuration, and run statistics.
"""

from .config import FetchConfig
from .records import SongAsset, SongResource, SongSchema
from .stats import FetchStats

__all__ = ["FetchConfig", "FetchStats", "SongAsset", "SongResource", "SongSchema"]
