"""
Dataclass for tracking fetch session statistics.
"""

from dataclasses import dataclass


@dataclass
class FetchStats:
    """Counters for a single fetch run."""

    resources_total: int = 0
    audio_downloaded: int = 0
    audio_failed: int = 0
    covers_downloaded: int = 0
    covers_failed: int = 0
    tracks_tagged: int = 0
    tags_failed: int = 0
    collisions: int = 0
    total_size_downloaded: int = 0
    dry_run: bool = False

    @property
    def failures(self) -> int:
        return self.audio_failed + self.covers_failed + self.tags_failed
