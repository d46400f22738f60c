"""
Media Processing Layer.

This package is responsible for all media file operations: downloading
audio and cover files, and writing metadata tags.
"""

from .downloader import Downloader
from .tagger import MetaflacTagWriter, MutagenTagWriter, apply_tags, build_tags

__all__ = [
    "Downloader",
    "MetaflacTagWriter",
    "MutagenTagWriter",
    "apply_tags",
    "build_tags",
]
