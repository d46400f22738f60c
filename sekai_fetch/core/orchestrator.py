"""
The main orchestrator: fetches both collections, joins them, and walks the
resulting resources one by one.
"""

import logging
import time
from enum import Enum
from typing import List, Optional

from rich.markup import escape

from sekai_fetch.api.client import MasterDbClient
from sekai_fetch.media import Downloader
from sekai_fetch.media.tagger import TagWriter
from sekai_fetch.models.config import FetchConfig
from sekai_fetch.models.records import SongResource
from sekai_fetch.models.stats import FetchStats

from .joiner import filter_resources, join_resources
from .resource_processor import ResourceProcessor

log = logging.getLogger(__name__)


class RunState(Enum):
    IDLE = "idle"
    FETCHING_SCHEMAS = "fetching_schemas"
    FETCHING_ASSETS = "fetching_assets"
    JOINING = "joining"
    PER_RESOURCE_LOOP = "per_resource_loop"
    DONE = "done"


class FetchOrchestrator:
    """Orchestrates the entire fetch run."""

    def __init__(
        self,
        config: FetchConfig,
        client: MasterDbClient,
        tag_writer: Optional[TagWriter],
        downloader: Optional[Downloader] = None,
    ):
        self.config = config
        self.client = client
        self.stats = FetchStats(dry_run=config.dry_run)
        self.state = RunState.IDLE
        self.resource_processor = ResourceProcessor(
            config,
            self.stats,
            downloader or Downloader(timeout=config.download_timeout),
            tag_writer,
        )

    def _enter(self, state: RunState) -> None:
        log.debug(f"State: {self.state.value} -> {state.value}")
        self.state = state

    async def collect_resources(self) -> List[SongResource]:
        """
        Fetches both master collections and returns the joined, filtered list.

        Raises:
            FetchError: If either collection cannot be retrieved.
        """
        self._enter(RunState.FETCHING_SCHEMAS)
        schemas = await self.client.fetch_song_schemas()
        log.info(f"Fetched [bold]{len(schemas)}[/bold] songs.")

        self._enter(RunState.FETCHING_ASSETS)
        assets = await self.client.fetch_song_assets()
        log.info(f"Fetched [bold]{len(assets)}[/bold] vocal variants.")

        self._enter(RunState.JOINING)
        resources = join_resources(schemas, assets)
        if self.config.music_ids or self.config.vocal_types:
            total = len(resources)
            resources = filter_resources(
                resources, self.config.music_ids, self.config.vocal_types
            )
            log.info(f"Filters matched {len(resources)} of {total} resources.")
        return resources

    async def run(self) -> FetchStats:
        """Runs every state through to completion and returns the statistics."""
        start_time = time.monotonic()
        resources = await self.collect_resources()
        self.stats.resources_total = len(resources)

        self._enter(RunState.PER_RESOURCE_LOOP)
        if not resources:
            log.warning("[yellow]No resources to process.[/yellow]")
        for resource in resources:
            try:
                await self.resource_processor.process_resource(resource)
            except Exception as e:
                log.error(
                    f"[red]  ✗ An unexpected error occurred for "
                    f"'{escape(resource.title)}': {escape(str(e))}[/red]",
                    exc_info=log.getEffectiveLevel() == logging.DEBUG,
                )

        self._enter(RunState.DONE)
        log.info(
            f"Processed {len(resources)} resources in "
            f"{time.monotonic() - start_time:.1f}s."
        )
        return self.stats
