"""Scan configuration -- the audio extension allow-list and traversal options."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

AUDIO_EXTENSIONS: frozenset[str] = frozenset(
    {"mp3", "wav", "flac", "ogg", "m4a", "aac", "opus"}
)


class ScanConfig(BaseModel):
    """Immutable settings shared by the classifier and the scanners."""

    audio_extensions: frozenset[str] = Field(
        default=AUDIO_EXTENSIONS,
        description="Lowercase extensions without the leading dot",
    )
    follow_symlinks: bool = Field(
        default=True, description="Descend into symlinked directories"
    )

    model_config = {"frozen": True}

    @field_validator("audio_extensions", mode="before")
    @classmethod
    def _normalize_extensions(cls, value: object) -> frozenset[str]:
        """Accept '.MP3', 'mp3' or 'Mp3' alike."""
        if isinstance(value, str):
            value = [value]
        return frozenset(str(ext).lower().lstrip(".") for ext in value)  # type: ignore[union-attr]


DEFAULT_CONFIG = ScanConfig()
