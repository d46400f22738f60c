"""
Async client for the Project SEKAI master database mirror.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional, Type, TypeVar

import aiohttp
from pydantic import BaseModel, ValidationError

from sekai_fetch.exceptions import FetchError
from sekai_fetch.models.config import DEFAULT_MUSIC_VOCALS_URL, DEFAULT_MUSICS_URL
from sekai_fetch.models.records import SongAsset, SongSchema

log = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class MasterDbClient:
    """
    Fetches the song collections from the master database.

    Both collections are plain JSON arrays of flat records. Each one is
    retrieved with a single GET; any failure is fatal for the run.
    """

    def __init__(
        self,
        musics_url: str = DEFAULT_MUSICS_URL,
        music_vocals_url: str = DEFAULT_MUSIC_VOCALS_URL,
        timeout: int = 60,
    ):
        self.musics_url = musics_url
        self.music_vocals_url = music_vocals_url
        self.timeout = timeout
        self._session: Optional[aiohttp.ClientSession] = None

    async def _initialize_session(self) -> None:
        """Ensures an active aiohttp session is available with compression enabled."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "Accept": "application/json",
                    "Accept-Encoding": "gzip, deflate, br",
                },
                timeout=aiohttp.ClientTimeout(total=self.timeout, connect=15),
            )

    async def close(self) -> None:
        """Gracefully closes the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self) -> "MasterDbClient":
        await self._initialize_session()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def fetch_collection(self, url: str) -> List[Dict[str, Any]]:
        """Downloads a JSON array and returns its raw records."""
        await self._initialize_session()
        start_time = time.monotonic()
        try:
            async with self._session.get(url) as r:
                r.raise_for_status()
                payload = await r.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise FetchError(f"Could not fetch '{url}': {e}") from e
        except ValueError as e:
            raise FetchError(f"Response from '{url}' is not valid JSON: {e}") from e

        if not isinstance(payload, list):
            raise FetchError(
                f"Expected a JSON array from '{url}', got {type(payload).__name__}."
            )

        duration_ms = (time.monotonic() - start_time) * 1000
        log.debug(f"Fetched {len(payload)} records from {url} in {duration_ms:.0f} ms")
        return payload

    async def _fetch_records(self, url: str, model: Type[RecordT]) -> List[RecordT]:
        records = []
        for raw in await self.fetch_collection(url):
            try:
                records.append(model.model_validate(raw))
            except ValidationError as e:
                record_id = raw.get("id", "?") if isinstance(raw, dict) else "?"
                log.warning(
                    f"[yellow]⚠ Skipping malformed {model.__name__} record "
                    f"(id={record_id}): {e.error_count()} validation error(s)[/yellow]"
                )
        return records

    # Public API Methods
    async def fetch_song_schemas(self) -> List[SongSchema]:
        return await self._fetch_records(self.musics_url, SongSchema)

    async def fetch_song_assets(self) -> List[SongAsset]:
        return await self._fetch_records(self.music_vocals_url, SongAsset)
