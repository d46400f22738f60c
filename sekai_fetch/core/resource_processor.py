"""
Handles the processing of a single resource, from download to tagging.
"""

import asyncio
import logging
from pathlib import Path
from typing import Dict, Optional

from rich.markup import escape

from sekai_fetch.exceptions import DownloadError, TagWriteError
from sekai_fetch.media import Downloader
from sekai_fetch.media.tagger import TagWriter, apply_tags, build_tags
from sekai_fetch.models.config import FetchConfig
from sekai_fetch.models.records import SongResource
from sekai_fetch.models.stats import FetchStats
from sekai_fetch.utils.formatting import get_display_title
from sekai_fetch.utils.path import audio_url, cover_url, create_dir, resource_paths

log = logging.getLogger(__name__)


class ResourceProcessor:
    """
    Downloads, tags and fetches cover art for one song/vocal pair at a time.
    """

    def __init__(
        self,
        config: FetchConfig,
        stats: FetchStats,
        downloader: Downloader,
        tag_writer: Optional[TagWriter],
    ):
        self.config = config
        self.stats = stats
        self.downloader = downloader
        self.tag_writer = tag_writer
        self.output_folder = Path(config.output_folder)
        # destination -> song id that wrote it during this run
        self._written: Dict[Path, int] = {}

    async def process_resource(self, resource: SongResource) -> None:
        """
        Manages the complete lifecycle of one resource.

        Every step is attempted independently: a failed audio download does
        not stop the cover download, and a tagging failure only leaves the
        audio file untagged.
        """
        paths = resource_paths(resource, self.output_folder)
        bundle = resource.asset.assetbundle_name
        log.info(
            f"\n[bold cyan]▶ {escape(get_display_title(resource))}[/bold cyan] "
            f"[dim]({escape(bundle)})[/dim]"
        )

        if self.config.dry_run:
            planned = [paths.audio]
            if self.config.download_covers:
                planned.append(paths.cover)
            for path in planned:
                log.info(
                    f"  [cyan]→ (Dry Run)[/] Would save to [dim]{escape(str(path))}[/dim]"
                )
            return

        try:
            create_dir(paths.folder)
        except OSError as e:
            log.error(
                f"  [red]✗ Failed:[/] {escape(resource.title)} "
                f"{escape(f'[{bundle}]')} could not create "
                f"[dim]{escape(str(paths.folder))}[/dim] ({escape(str(e))})"
            )
            self.stats.audio_failed += 1
            if self.config.download_covers:
                self.stats.covers_failed += 1
            return

        url = audio_url(resource.asset)
        self._check_collision(paths.audio, resource, same_song_ok=False)
        if await self._download(resource, url, paths.audio, "audio"):
            self.stats.audio_downloaded += 1
            if self.tag_writer is not None:
                await self._tag(resource, paths.audio)
        else:
            self.stats.audio_failed += 1

        if self.config.download_covers:
            url = cover_url(resource.schema)
            self._check_collision(paths.cover, resource, same_song_ok=True)
            if await self._download(resource, url, paths.cover, "cover"):
                self.stats.covers_downloaded += 1
            else:
                self.stats.covers_failed += 1

    def _check_collision(
        self, path: Path, resource: SongResource, same_song_ok: bool
    ) -> None:
        """Warns when a path written earlier in this run is about to be overwritten."""
        previous_song = self._written.get(path)
        self._written[path] = resource.schema.id
        if previous_song is None:
            return
        if same_song_ok and previous_song == resource.schema.id:
            return
        self.stats.collisions += 1
        log.warning(
            f"  [yellow]⚠ '{escape(path.name)}' was already written by song "
            f"{previous_song} in this run and will be overwritten.[/yellow]"
        )

    async def _download(
        self, resource: SongResource, url: str, destination: Path, kind: str
    ) -> bool:
        try:
            size = await self.downloader.download_file(url, destination)
        except DownloadError as e:
            bundle = escape(f"[{resource.asset.assetbundle_name}]")
            log.error(
                f"  [red]✗ Failed {kind}:[/] {escape(resource.title)} {bundle} "
                f"{escape(url)} ({escape(str(e))})",
                exc_info=log.getEffectiveLevel() == logging.DEBUG,
            )
            return False
        self.stats.total_size_downloaded += size
        log.info(f"  [green]✓ Saved {kind}:[/] [dim]{escape(destination.name)}[/dim]")
        return True

    async def _tag(self, resource: SongResource, audio_path: Path) -> None:
        try:
            tags = build_tags(resource)
            await asyncio.to_thread(apply_tags, self.tag_writer, audio_path, tags)
        except TagWriteError as e:
            self.stats.tags_failed += 1
            log.error(
                f"  [red]✗ Failed to tag:[/] [dim]{escape(audio_path.name)}[/dim] "
                f"({escape(str(e))})"
            )
            return
        self.stats.tracks_tagged += 1
        log.debug(
            f"Wrote {len(tags)} tags to '{audio_path.name}' with {self.tag_writer.name}"
        )
