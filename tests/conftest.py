"""
Shared factories and fakes for the sekai_fetch tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from sekai_fetch.exceptions import DownloadError, TagWriteError
from sekai_fetch.models.records import SongAsset, SongSchema


def make_schema(music_id: int = 1, **overrides: Any) -> SongSchema:
    data = {
        "id": music_id,
        "title": f"Song {music_id}",
        "composer": "Composer",
        "lyricist": "Lyricist",
        "arranger": "Arranger",
        "assetbundleName": f"jacket_s_{music_id:03d}",
        "publishedAt": 1584230400000,
    }
    data.update(overrides)
    return SongSchema.model_validate(data)


def make_asset(asset_id: int, music_id: int, **overrides: Any) -> SongAsset:
    data = {
        "id": asset_id,
        "musicId": music_id,
        "musicVocalType": "sekai",
        "caption": "セカイver.",
        "assetbundleName": f"{music_id:04d}_{asset_id:02d}",
    }
    data.update(overrides)
    return SongAsset.model_validate(data)


class FakeClient:
    """Stands in for MasterDbClient with fixed collections."""

    def __init__(self, schemas, assets, error: Exception | None = None):
        self.schemas = schemas
        self.assets = assets
        self.error = error
        self.calls: list[str] = []

    async def fetch_song_schemas(self):
        self.calls.append("schemas")
        if self.error:
            raise self.error
        return list(self.schemas)

    async def fetch_song_assets(self):
        self.calls.append("assets")
        return list(self.assets)


class FakeDownloader:
    """Writes a small payload for each URL unless the URL is marked as failing."""

    def __init__(self, failing: set[str] | None = None):
        self.failing = failing or set()
        self.requests: list[tuple[str, Path]] = []

    async def download_file(self, url: str, destination_path: Path) -> int:
        self.requests.append((url, Path(destination_path)))
        if url in self.failing:
            raise DownloadError(f"404 for {url}")
        payload = url.encode()
        Path(destination_path).write_bytes(payload)
        return len(payload)


class RecordingTagWriter:
    """Records every call; optionally fails on set_tag."""

    name = "recording"

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: list[tuple] = []

    def clear_tags(self, path: Path) -> None:
        self.calls.append(("clear", Path(path).name))

    def set_tag(self, path: Path, name: str, value: str) -> None:
        if self.fail:
            raise TagWriteError("disk full")
        self.calls.append(("set", Path(path).name, name, value))


@pytest.fixture
def tag_writer() -> RecordingTagWriter:
    return RecordingTagWriter()
