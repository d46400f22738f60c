"""
Maps song metadata to FLAC tags and writes them through a pluggable backend.
"""

import logging
import os
import shutil
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Tuple

from mutagen import MutagenError
from mutagen.flac import FLAC

from sekai_fetch.exceptions import TagToolMissing, TagWriteError
from sekai_fetch.models.records import SongResource

log = logging.getLogger(__name__)

# --- Constants ---
VARIOUS_ARTISTS = "Various Artists"
METAFLAC = "metaflac"

Tag = Tuple[str, str]


def published_year(published_at: Optional[int]) -> Optional[str]:
    """Returns the four-digit UTC year for a millisecond timestamp, if known."""
    if not published_at or published_at <= 0:
        return None
    try:
        published = datetime.fromtimestamp(published_at / 1000, tz=timezone.utc)
    except (OverflowError, ValueError, OSError):
        log.debug(f"Ignoring out-of-range publishedAt {published_at}")
        return None
    return f"{published.year:04d}"


def build_tags(resource: SongResource) -> List[Tag]:
    """
    Builds the ordered tag list for a resource's audio file.

    TITLE, ARTIST, ALBUMARTIST and ALBUM are always present. Credits and
    DATE are only emitted when the song has a value for them. The
    "Various Artists" fallback applies to the artist fields only, never to
    COMPOSER.
    """
    schema = resource.schema
    caption = resource.caption

    title = f"{schema.title} - {caption}" if caption else schema.title
    artist = schema.composer or VARIOUS_ARTISTS

    tags: List[Tag] = [
        ("TITLE", title),
        ("ARTIST", artist),
        ("ALBUMARTIST", artist),
        ("ALBUM", schema.title),
    ]
    for name, value in (
        ("COMPOSER", schema.composer),
        ("LYRICIST", schema.lyricist),
        ("ARRANGER", schema.arranger),
        ("DATE", published_year(schema.published_at)),
    ):
        if value:
            tags.append((name, value))
    return tags


class TagWriter(Protocol):
    """The two operations a tagging backend has to provide."""

    name: str

    def clear_tags(self, path: Path) -> None: ...

    def set_tag(self, path: Path, name: str, value: str) -> None: ...


class MetaflacTagWriter:
    """Writes Vorbis comments by invoking the external ``metaflac`` tool."""

    name = METAFLAC

    def __init__(self, executable: str):
        self.executable = executable

    @classmethod
    def locate(cls) -> "MetaflacTagWriter":
        """
        Locates ``metaflac`` on PATH.

        Raises:
            TagToolMissing: If the tool is not installed.
        """
        executable = shutil.which(METAFLAC)
        if not executable:
            raise TagToolMissing(f"'{METAFLAC}' was not found on PATH.")
        return cls(executable)

    def _run(self, *args: str) -> None:
        command = [self.executable, *args]
        try:
            result = subprocess.run(command, capture_output=True, text=True)
        except OSError as e:
            raise TagWriteError(f"Could not run {METAFLAC}: {e}") from e
        if result.returncode != 0:
            raise TagWriteError(
                f"{METAFLAC} exited with code {result.returncode}: "
                f"{(result.stderr or '').strip()}"
            )

    def clear_tags(self, path: Path) -> None:
        self._run("--remove-all-tags", str(path))

    def set_tag(self, path: Path, name: str, value: str) -> None:
        self._run(f"--set-tag={name}={value}", str(path))


class MutagenTagWriter:
    """Writes Vorbis comments in-process with mutagen."""

    name = "mutagen"

    def _open(self, path: Path) -> FLAC:
        try:
            return FLAC(str(path))
        except MutagenError as e:
            raise TagWriteError(f"Could not open '{os.path.basename(path)}': {e}") from e

    def clear_tags(self, path: Path) -> None:
        audio = self._open(path)
        if audio.tags is None:
            return
        try:
            audio.delete()
        except MutagenError as e:
            raise TagWriteError(f"Could not save '{os.path.basename(path)}': {e}") from e

    def set_tag(self, path: Path, name: str, value: str) -> None:
        audio = self._open(path)
        audio[name] = [value]
        try:
            audio.save()
        except MutagenError as e:
            raise TagWriteError(f"Could not save '{os.path.basename(path)}': {e}") from e


def apply_tags(writer: TagWriter, path: Path, tags: Iterable[Tag]) -> None:
    """Replaces every tag on ``path`` with ``tags``, in order."""
    writer.clear_tags(path)
    for name, value in tags:
        writer.set_tag(path, name, value)


def resolve_tag_writer(choice: str) -> Optional[TagWriter]:
    """
    Picks the tagging backend once, before any resource is processed.

    Returns None when tagging is disabled or the external tool is missing;
    the run then downloads files without tagging them.
    """
    if choice == "none":
        log.info("[dim]Tagging disabled.[/dim]")
        return None
    if choice == "mutagen":
        return MutagenTagWriter()
    try:
        return MetaflacTagWriter.locate()
    except TagToolMissing as e:
        log.warning(
            f"[yellow]⚠ {e} Files will be downloaded without tags. "
            "Install FLAC tools or use --tagger mutagen.[/yellow]"
        )
        return None
