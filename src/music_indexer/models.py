"""Pydantic v2 data models for scanned songs, tags and scan results."""

from enum import IntEnum

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Tag view
# ---------------------------------------------------------------------------

class PictureType(IntEnum):
    """Embedded picture roles, numbered as in ID3 APIC and FLAC PICTURE."""

    OTHER = 0
    FILE_ICON = 1
    OTHER_FILE_ICON = 2
    FRONT_COVER = 3
    BACK_COVER = 4
    LEAFLET_PAGE = 5
    MEDIA = 6
    LEAD_ARTIST = 7
    ARTIST = 8
    CONDUCTOR = 9
    BAND = 10
    COMPOSER = 11
    LYRICIST = 12
    RECORDING_LOCATION = 13
    DURING_RECORDING = 14
    DURING_PERFORMANCE = 15
    SCREEN_CAPTURE = 16
    FISH = 17
    ILLUSTRATION = 18
    BAND_LOGOTYPE = 19
    PUBLISHER_LOGOTYPE = 20

    @classmethod
    def from_raw(cls, value: object) -> "PictureType":
        """Map a container's numeric picture type, unknown values to OTHER."""
        try:
            return cls(int(value))  # type: ignore[call-overload]
        except (TypeError, ValueError):
            return cls.OTHER


class Picture(BaseModel):
    """One embedded image inside a tag block."""

    picture_type: PictureType = PictureType.OTHER
    mime_type: str | None = Field(None, description="Declared MIME type, if any")
    data: bytes

    model_config = {"frozen": True}


class TagFields(BaseModel):
    """Format-neutral view of a single tag block."""

    title: str | None = None
    artist: str | None = None
    album: str | None = None
    pictures: list[Picture] = Field(default_factory=list)

    model_config = {"frozen": True}


class AudioProperties(BaseModel):
    """Container-level stream properties."""

    duration: float = Field(ge=0.0, description="Length in seconds")
    sample_rate: int | None = None
    channels: int | None = None
    bitrate: int | None = None

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Song (central entity)
# ---------------------------------------------------------------------------

class Song(BaseModel):
    """Normalized metadata snapshot of one audio file."""

    id: str = Field(description="Lowercase hex digest of the path string")
    title: str = Field(min_length=1)
    artist: str = Field(min_length=1)
    album: str = Field(min_length=1)
    duration: float = Field(ge=0.0, description="Seconds, from container properties")
    path: str
    cover: str | None = Field(None, description="data: URI, only when requested")

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# ScanResult
# ---------------------------------------------------------------------------

class ScanResult(BaseModel):
    """Songs that were read plus one '<path>: <reason>' string per failure."""

    songs: list[Song] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    def merged(self, other: "ScanResult") -> "ScanResult":
        """Concatenate two results, self first."""
        return ScanResult(
            songs=[*self.songs, *other.songs],
            errors=[*self.errors, *other.errors],
        )
