"""
Tests for the HTTP adapters: the master database client and the file downloader.

aiohttp sessions are replaced by small in-memory fakes; nothing touches the
network.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import aiohttp
import pytest

from sekai_fetch.api.client import MasterDbClient
from sekai_fetch.exceptions import DownloadError, FetchError
from sekai_fetch.media import downloader as downloader_module
from sekai_fetch.media.downloader import Downloader


class FakeContent:
    def __init__(self, chunks: list[bytes], error: Exception | None = None):
        self.chunks = chunks
        self.error = error

    async def _stream(self):
        for chunk in self.chunks:
            yield chunk
        if self.error:
            raise self.error

    def iter_chunked(self, size: int):
        return self._stream()


class FakeResponse:
    def __init__(
        self,
        payload: Any = None,
        chunks: list[bytes] | None = None,
        status_error: Exception | None = None,
        stream_error: Exception | None = None,
    ):
        self.payload = payload
        self.status_error = status_error
        self.content = FakeContent(chunks or [], stream_error)

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    def raise_for_status(self) -> None:
        if self.status_error:
            raise self.status_error

    async def json(self, content_type: str | None = "application/json") -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, responses: dict[str, FakeResponse]):
        self.responses = responses
        self.closed = False
        self.requested: list[str] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.requested.append(url)
        response = self.responses.get(url)
        if response is None:
            raise aiohttp.ClientConnectionError(f"cannot connect to {url}")
        return response

    async def close(self) -> None:
        self.closed = True


# =============================================================================
# MasterDbClient
# =============================================================================


class TestMasterDbClient:
    MUSICS = "https://example.test/musics.json"
    VOCALS = "https://example.test/musicVocals.json"

    def _client(self, responses: dict[str, FakeResponse]) -> MasterDbClient:
        client = MasterDbClient(self.MUSICS, self.VOCALS, timeout=5)
        client._session = FakeSession(responses)
        return client

    async def test_parses_song_schemas(self) -> None:
        payload = [
            {
                "id": 1,
                "title": "Tell Your World",
                "pronunciation": "てるゆあわーるど",
                "composer": "kz",
                "lyricist": "kz",
                "arranger": "kz",
                "assetbundleName": "jacket_s_001",
                "publishedAt": 1584230400000,
                "categories": ["mv"],
                "dancerCount": 4,
            }
        ]
        client = self._client({self.MUSICS: FakeResponse(payload)})

        (schema,) = await client.fetch_song_schemas()

        assert schema.id == 1
        assert schema.assetbundle_name == "jacket_s_001"
        assert schema.published_at == 1584230400000
        assert schema.categories == ["mv"]
        assert schema.model_extra == {"dancerCount": 4}

    async def test_parses_song_assets(self) -> None:
        payload = [
            {
                "id": 10,
                "musicId": 1,
                "musicVocalType": "sekai",
                "caption": "",
                "assetbundleName": "0001_01",
                "characters": [{"characterId": 1}],
            }
        ]
        client = self._client({self.VOCALS: FakeResponse(payload)})

        (asset,) = await client.fetch_song_assets()

        assert asset.music_id == 1
        assert asset.caption == ""
        assert asset.music_vocal_type == "sekai"

    async def test_malformed_records_are_skipped(self) -> None:
        payload = [
            {"id": 1, "title": "ok", "assetbundleName": "a"},
            {"id": 2, "title": "missing bundle"},
            "not a record",
        ]
        client = self._client({self.MUSICS: FakeResponse(payload)})

        schemas = await client.fetch_song_schemas()

        assert [s.id for s in schemas] == [1]

    async def test_network_error_raises_fetch_error(self) -> None:
        client = self._client({})
        with pytest.raises(FetchError, match="musics.json"):
            await client.fetch_song_schemas()

    async def test_status_error_raises_fetch_error(self) -> None:
        response = FakeResponse(status_error=aiohttp.ClientPayloadError("503"))
        client = self._client({self.VOCALS: response})
        with pytest.raises(FetchError):
            await client.fetch_song_assets()

    async def test_invalid_json_raises_fetch_error(self) -> None:
        client = self._client({self.MUSICS: FakeResponse(ValueError("Expecting value"))})
        with pytest.raises(FetchError, match="not valid JSON"):
            await client.fetch_song_schemas()

    async def test_non_array_payload_raises_fetch_error(self) -> None:
        client = self._client({self.MUSICS: FakeResponse({"error": "nope"})})
        with pytest.raises(FetchError, match="JSON array"):
            await client.fetch_song_schemas()

    async def test_close(self) -> None:
        client = self._client({})
        session = client._session
        await client.close()
        assert session.closed


# =============================================================================
# Downloader
# =============================================================================


class TestDownloader:
    URL = "https://example.test/file.flac"

    @pytest.fixture
    def use_session(self, monkeypatch: pytest.MonkeyPatch):
        def install(responses: dict[str, FakeResponse]) -> FakeSession:
            session = FakeSession(responses)

            async def fake_pool(timeout: int = 300) -> FakeSession:
                return session

            monkeypatch.setattr(downloader_module, "get_connection_pool", fake_pool)
            return session

        return install

    async def test_writes_file(self, tmp_path: Path, use_session) -> None:
        use_session({self.URL: FakeResponse(chunks=[b"fLaC", b"data"])})
        destination = tmp_path / "song.flac"

        size = await Downloader().download_file(self.URL, destination)

        assert size == 8
        assert destination.read_bytes() == b"fLaCdata"
        assert not (tmp_path / "song.flac.part").exists()

    async def test_connection_error(self, tmp_path: Path, use_session) -> None:
        use_session({})
        destination = tmp_path / "song.flac"

        with pytest.raises(DownloadError):
            await Downloader().download_file(self.URL, destination)

        assert list(tmp_path.iterdir()) == []

    async def test_interrupted_stream_leaves_nothing(
        self, tmp_path: Path, use_session
    ) -> None:
        use_session(
            {
                self.URL: FakeResponse(
                    chunks=[b"partial"],
                    stream_error=aiohttp.ClientPayloadError("connection reset"),
                )
            }
        )
        destination = tmp_path / "song.flac"

        with pytest.raises(DownloadError, match="song.flac"):
            await Downloader().download_file(self.URL, destination)

        assert list(tmp_path.iterdir()) == []

    async def test_status_error(self, tmp_path: Path, use_session) -> None:
        use_session(
            {self.URL: FakeResponse(status_error=aiohttp.ClientPayloadError("404"))}
        )
        with pytest.raises(DownloadError):
            await Downloader().download_file(self.URL, tmp_path / "cover.png")

    async def test_missing_folder_is_an_io_error(self, tmp_path: Path, use_session) -> None:
        use_session({self.URL: FakeResponse(chunks=[b"x"])})
        with pytest.raises(DownloadError):
            await Downloader().download_file(self.URL, tmp_path / "nope" / "a.flac")

    async def test_overwrites_existing_file(self, tmp_path: Path, use_session) -> None:
        destination = tmp_path / "cover.png"
        destination.write_bytes(b"old")
        use_session({self.URL: FakeResponse(chunks=[b"new"])})

        await Downloader().download_file(self.URL, destination)

        assert destination.read_bytes() == b"new"
