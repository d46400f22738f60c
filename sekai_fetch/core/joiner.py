"""
Pairs songs with their vocal variants.
"""

import logging
from collections import defaultdict
from typing import Iterable, Optional

from sekai_fetch.models.records import SongAsset, SongResource, SongSchema

log = logging.getLogger(__name__)


def join_resources(
    schemas: Iterable[SongSchema], assets: Iterable[SongAsset]
) -> list[SongResource]:
    """
    Inner-joins songs and vocal assets on ``schema.id == asset.music_id``.

    Output follows the song order first and the asset order within each song.
    Songs without any vocal asset produce nothing.
    """
    assets_by_music: dict[int, list[SongAsset]] = defaultdict(list)
    for asset in assets:
        assets_by_music[asset.music_id].append(asset)

    resources = []
    matched_music_ids = set()
    for schema in schemas:
        matches = assets_by_music.get(schema.id)
        if not matches:
            continue
        matched_music_ids.add(schema.id)
        resources.extend(SongResource(schema, asset) for asset in matches)

    orphaned = sum(
        len(v) for k, v in assets_by_music.items() if k not in matched_music_ids
    )
    if orphaned:
        log.debug(f"{orphaned} vocal assets reference unknown songs and were ignored.")
    return resources


def filter_resources(
    resources: Iterable[SongResource],
    music_ids: Optional[Iterable[int]] = None,
    vocal_types: Optional[Iterable[str]] = None,
) -> list[SongResource]:
    """Keeps only resources for the given song ids and/or vocal types."""
    wanted_ids = set(music_ids or ())
    wanted_types = {t.lower() for t in vocal_types or ()}
    return [
        r
        for r in resources
        if (not wanted_ids or r.schema.id in wanted_ids)
        and (
            not wanted_types
            or (r.asset.music_vocal_type or "").lower() in wanted_types
        )
    ]
