"""
Utilities for deriving remote asset URLs and local destination paths.
"""

import re
from pathlib import Path
from typing import NamedTuple

from sekai_fetch.models.records import SongAsset, SongResource, SongSchema

ASSET_BASE_URL = "https://storage.sekai.best/sekai-jp-assets/music/"
AUDIO_URL_TEMPLATE = ASSET_BASE_URL + "long/{name}/{name}.flac"
COVER_URL_TEMPLATE = ASSET_BASE_URL + "jacket/{name}/{name}.png"

COVER_FILE_NAME = "cover.png"

_FORBIDDEN_CHARS = re.compile(r'[\\/:*?"<>|]')


class ResourcePaths(NamedTuple):
    """Local destinations for a single resource."""

    folder: Path
    audio: Path
    cover: Path


def audio_url(asset: SongAsset) -> str:
    """Builds the FLAC download URL from the vocal asset's bundle name."""
    return AUDIO_URL_TEMPLATE.format(name=asset.assetbundle_name)


def cover_url(schema: SongSchema) -> str:
    """Builds the jacket image URL from the song's bundle name."""
    return COVER_URL_TEMPLATE.format(name=schema.assetbundle_name)


def sanitize_segment(value: str) -> str:
    """Replaces every character that is illegal in a path segment with '_'."""
    return _FORBIDDEN_CHARS.sub("_", value)


def sanitize_caption(caption: str | None) -> str:
    """
    Sanitizes a vocal caption for use in a file name.

    Trailing dots are dropped so "Ver." does not leave a stray dot in front
    of the file extension.
    """
    return sanitize_segment(caption or "").rstrip(".")


def folder_name(title: str) -> str:
    """
    Sanitizes a song title for use as its folder name.

    Titles made only of dots would resolve to the output folder or its
    parent, so each dot becomes '_'.
    """
    name = sanitize_segment(title)
    if name and not name.strip("."):
        return "_" * len(name)
    return name


def audio_file_name(resource: SongResource) -> str:
    title = sanitize_segment(resource.title)
    return f"{title}_{sanitize_caption(resource.asset.caption)}.flac"


def resource_paths(resource: SongResource, output_folder: Path) -> ResourcePaths:
    """Computes the folder, audio file and cover file paths for a resource."""
    folder = Path(output_folder) / folder_name(resource.title)
    return ResourcePaths(
        folder=folder,
        audio=folder / audio_file_name(resource),
        cover=folder / COVER_FILE_NAME,
    )


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)
