"""Embedded cover art selection and data URI encoding."""

from __future__ import annotations

import base64
import logging
from pathlib import Path

from music_indexer.analysis.tags import TagReader
from music_indexer.errors import TagReaderError
from music_indexer.models import Picture, PictureType, Song

logger = logging.getLogger(__name__)

DEFAULT_MIME = "image/jpeg"


def select_picture(pictures: list[Picture]) -> Picture | None:
    """First front cover, else the first picture of any type, else None."""
    for picture in pictures:
        if picture.picture_type == PictureType.FRONT_COVER:
            return picture
    return pictures[0] if pictures else None


def encode_data_uri(data: bytes, mime_type: str | None = None) -> str:
    """Wrap raw image bytes as ``data:<mime>;base64,<payload>``."""
    b64 = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or DEFAULT_MIME};base64,{b64}"


def extract_cover(
    file_path: Path | str, tag_reader: TagReader | None = None
) -> str | None:
    """Return the cover of an audio file as a data URI, or None.

    A file without any tag block, or a tag without pictures, is not an
    error. Raises TagOpenError / TagReadError like TagReader.open.
    """
    tagged = (tag_reader or TagReader()).open(file_path)
    tag = tagged.best_tag()
    if tag is None:
        return None

    picture = select_picture(tag.pictures)
    if picture is None:
        return None
    return encode_data_uri(picture.data, picture.mime_type)


def attach_covers(
    songs: list[Song], tag_reader: TagReader | None = None
) -> list[Song]:
    """Return copies of ``songs`` with their cover field populated.

    Songs whose file can no longer be read keep ``cover=None``.
    """
    reader = tag_reader or TagReader()
    result: list[Song] = []
    for song in songs:
        try:
            cover = extract_cover(song.path, reader)
        except TagReaderError as exc:
            logger.debug("No cover for %s: %s", song.path, exc)
            cover = None
        result.append(song.model_copy(update={"cover": cover}))
    return result
