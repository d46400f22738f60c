"""
Pydantic models for the two master database collections and their join result.

Records mirror the JSON shape of ``musics.json`` and ``musicVocals.json``.
Keys are camelCase on the wire and snake_case on the models. Any field the
application does not use is kept as an extra attribute so that nothing in the
source record is lost. A key that is missing or ``null`` becomes ``None``,
which is never the same as an empty string.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _MasterRecord(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class SongSchema(_MasterRecord):
    """One entry of ``musics.json``."""

    id: int
    title: str
    pronunciation: Optional[str] = None
    composer: Optional[str] = None
    lyricist: Optional[str] = None
    arranger: Optional[str] = None
    assetbundle_name: str
    published_at: Optional[int] = None
    release_condition_id: Optional[int] = None
    categories: list[str] = Field(default_factory=list)


class SongAsset(_MasterRecord):
    """One entry of ``musicVocals.json``: a vocal variant of a song."""

    id: int
    music_id: int
    music_vocal_type: Optional[str] = None
    caption: Optional[str] = None
    assetbundle_name: str


@dataclass(frozen=True)
class SongResource:
    """A song paired with one of its vocal variants."""

    schema: SongSchema
    asset: SongAsset

    def __post_init__(self):
        if self.asset.music_id != self.schema.id:
            raise ValueError(
                f"Asset {self.asset.id} belongs to music {self.asset.music_id}, "
                f"not {self.schema.id}."
            )

    @property
    def title(self) -> str:
        return self.schema.title

    @property
    def caption(self) -> str:
        return self.asset.caption or ""
