"""Metadata extraction: tag fields normalized into a Song."""

from __future__ import annotations

import hashlib
import logging
import os
from pathlib import Path

from music_indexer.analysis.tags import TagReader
from music_indexer.models import Song, TagFields

logger = logging.getLogger(__name__)

UNKNOWN_TITLE = "Unknown"
UNKNOWN_ARTIST = "Unknown Artist"
UNKNOWN_ALBUM = "Unknown Album"


class MetadataExtractor:
    """Builds a Song from a file's container properties and best tag."""

    def __init__(self, tag_reader: TagReader | None = None) -> None:
        self.tag_reader = tag_reader or TagReader()

    def extract(self, file_path: Path | str) -> Song:
        """Extract normalized metadata from an audio file.

        Missing or empty tag fields fall back to the file stem,
        'Unknown Artist' and 'Unknown Album'. Never reads cover art.
        Raises TagOpenError / TagReadError from the tag reader unchanged.
        """
        path_str = display_path(file_path)
        tagged = self.tag_reader.open(file_path)
        tag = tagged.best_tag()

        if tag is None:
            logger.debug("No tag block in %s, using fallbacks", path_str)
            title, artist, album = _fallback_title(path_str), UNKNOWN_ARTIST, UNKNOWN_ALBUM
        else:
            title, artist, album = _normalize_fields(tag, path_str)

        return Song(
            id=song_id(path_str),
            title=title,
            artist=artist,
            album=album,
            duration=tagged.properties().duration,
            path=path_str,
        )


def display_path(file_path: Path | str) -> str:
    """Lossy UTF-8 rendering of a path; undecodable bytes become U+FFFD."""
    return os.fsencode(file_path).decode("utf-8", errors="replace")


def song_id(path: Path | str) -> str:
    """Stable identifier for a path string: hex MD5 of its UTF-8 bytes.

    Depends only on the string form, so the same path yields the same id
    in every process and on every platform.
    """
    return hashlib.md5(display_path(path).encode("utf-8")).hexdigest()


def _normalize_fields(tag: TagFields, path_str: str) -> tuple[str, str, str]:
    return (
        _non_empty(tag.title) or _fallback_title(path_str),
        _non_empty(tag.artist) or UNKNOWN_ARTIST,
        _non_empty(tag.album) or UNKNOWN_ALBUM,
    )


def _fallback_title(path_str: str) -> str:
    """File name without extension, or 'Unknown' when there is none."""
    return Path(path_str).stem or UNKNOWN_TITLE


def _non_empty(value: str | None) -> str | None:
    if value is None or not value.strip():
        return None
    return value
