"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pathvalidate import ValidationError as PathValidationError
from pathvalidate import validate_filepath
from pydantic import BaseModel, ConfigDict, Field, field_validator

MASTER_DB_BASE_URL = "https://sekai-world.github.io/sekai-master-db-diff/"
DEFAULT_MUSICS_URL = MASTER_DB_BASE_URL + "musics.json"
DEFAULT_MUSIC_VOCALS_URL = MASTER_DB_BASE_URL + "musicVocals.json"
DEFAULT_OUTPUT_FOLDER = "output"

# Tag backends selectable from the CLI or config file
TAGGER_CHOICES = ("metaflac", "mutagen", "none")


class FetchConfig(BaseModel):
    """A validated configuration model for the application."""

    model_config = ConfigDict(validate_assignment=True, str_strip_whitespace=True)

    # Sources
    musics_url: str = DEFAULT_MUSICS_URL
    music_vocals_url: str = DEFAULT_MUSIC_VOCALS_URL
    request_timeout: int = 60
    download_timeout: int = 300

    # Output
    output_folder: str = DEFAULT_OUTPUT_FOLDER
    tagger: str = "metaflac"
    download_covers: bool = True
    dry_run: bool = False

    # Filtering Options
    music_ids: list[int] = Field(default_factory=list)
    vocal_types: list[str] = Field(default_factory=list)

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    @field_validator("output_folder")
    @classmethod
    def validate_output_folder(cls, v: str) -> str:
        """Ensures the output folder is a usable path on this platform."""
        if not v:
            raise ValueError("Output folder cannot be empty.")
        try:
            validate_filepath(v, platform="auto")
        except PathValidationError as e:
            raise ValueError(f"Output folder '{v}' is not a valid path: {e}") from e
        return v

    @field_validator("tagger")
    @classmethod
    def validate_tagger(cls, v: str) -> str:
        v = v.lower()
        if v not in TAGGER_CHOICES:
            raise ValueError(f"Tagger must be one of: {', '.join(TAGGER_CHOICES)}.")
        return v

    @field_validator("music_ids")
    @classmethod
    def validate_music_ids(cls, v: list[int]) -> list[int]:
        if any(music_id <= 0 for music_id in v):
            raise ValueError("Music IDs must be positive integers.")
        return v

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Ensures a reasonable request timeout."""
        if v < 1 or v > 600:
            raise ValueError("Request timeout must be between 1 and 600 seconds.")
        return v

    @field_validator("download_timeout")
    @classmethod
    def validate_download_timeout(cls, v: int) -> int:
        """Bounds the per-file timeout used for audio and cover downloads."""
        if v < 1 or v > 3600:
            raise ValueError("Download timeout must be between 1 and 3600 seconds.")
        return v

    @field_validator("musics_url", "music_vocals_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Source URL must be http(s): {v}")
        return v

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path", "dry_run"}
        return {key for key in cls.model_fields if key not in internal_fields}
