"""Tag container probing using mutagen.

``TagReader.open`` detects the container from file content and turns
whatever tag blocks it carries into format-neutral ``TagFields``. Callers
never see mutagen types.
"""

from __future__ import annotations

import base64
import logging
import mimetypes
import os
import stat
import struct
from pathlib import Path
from typing import Any, Callable

import mutagen
from mutagen._riff import RiffFile
from mutagen.aac import AAC
from mutagen.apev2 import APEv2
from mutagen.flac import Picture as FLACPicture
from mutagen.id3 import ID3
from mutagen.mp3 import MP3
from mutagen.mp4 import MP4Cover, MP4Tags
from mutagen.wave import WAVE

from music_indexer.errors import TagOpenError, TagReadError
from music_indexer.models import AudioProperties, Picture, PictureType, TagFields

logger = logging.getLogger(__name__)

# Containers that may carry a trailing APEv2 block next to their own tag.
_APE_HOSTS: tuple[type, ...] = (MP3, AAC, WAVE)

# RIFF LIST/INFO item ids mapped to TagFields attributes.
_RIFF_INFO_FIELDS = {"INAM": "title", "IART": "artist", "IPRD": "album"}

_MP4_COVER_MIME = {
    MP4Cover.FORMAT_JPEG: "image/jpeg",
    MP4Cover.FORMAT_PNG: "image/png",
}

_APE_COVER_TYPES = {
    "cover art (front)": PictureType.FRONT_COVER,
    "cover art (back)": PictureType.BACK_COVER,
}


class TaggedFile:
    """Probed audio file: stream properties plus zero or more tag blocks."""

    def __init__(
        self,
        path: str,
        file_type: str,
        properties: AudioProperties,
        tags: list[TagFields],
        primary_index: int | None = None,
    ) -> None:
        self.path = path
        self.file_type = file_type
        self._properties = properties
        self._tags = tags
        self._primary_index = primary_index

    def properties(self) -> AudioProperties:
        return self._properties

    def tags(self) -> list[TagFields]:
        return list(self._tags)

    def primary_tag(self) -> TagFields | None:
        """The container's own tag block, if present."""
        if self._primary_index is None:
            return None
        return self._tags[self._primary_index]

    def first_tag(self) -> TagFields | None:
        return self._tags[0] if self._tags else None

    def best_tag(self) -> TagFields | None:
        """Primary tag, falling back to the first block of any kind."""
        return self.primary_tag() or self.first_tag()

    def __repr__(self) -> str:
        return (
            f"TaggedFile(path={self.path!r}, file_type={self.file_type!r}, "
            f"tags={len(self._tags)})"
        )


class TagReader:
    """Opens one file at a time and probes its container format."""

    def open(self, path: Path | str) -> TaggedFile:
        """Probe ``path`` and return its properties and tag blocks.

        Raises TagOpenError if the file cannot be opened.
        Raises TagReadError if the content is not a recognized container.
        The file handle is released before returning.
        """
        path_str = os.fsdecode(path)
        try:
            mode = os.stat(path).st_mode
        except OSError as exc:
            raise TagOpenError(path_str, _os_reason(exc)) from exc
        # Opening a FIFO or device for reading can block indefinitely.
        if not (stat.S_ISREG(mode) or stat.S_ISDIR(mode)):
            raise TagOpenError(path_str, "Not a regular file")
        try:
            fileobj = open(os.fspath(path), "rb")
        except OSError as exc:
            raise TagOpenError(path_str, _os_reason(exc)) from exc

        with fileobj:
            try:
                audio = mutagen.File(fileobj)
            except Exception as exc:
                raise TagReadError(path_str, str(exc) or type(exc).__name__) from exc
            if audio is None:
                raise TagReadError(path_str, "No supported audio format detected")

            blocks: list[TagFields] = []
            primary_index: int | None = None
            if audio.tags is not None:
                blocks.append(_read_tag_block(audio, audio.tags))
                primary_index = 0
            if isinstance(audio, WAVE):
                info = _probe_riff_info(fileobj)
                if info is not None:
                    blocks.append(info)
            if isinstance(audio, _APE_HOSTS) and not isinstance(audio.tags, APEv2):
                ape = _probe_apev2(fileobj)
                if ape is not None:
                    blocks.append(_read_apev2(audio, ape))

        properties = _read_properties(audio)
        logger.debug(
            "Probed %s as %s (%d tag blocks, %.2fs)",
            path_str, type(audio).__name__, len(blocks), properties.duration,
        )
        return TaggedFile(
            path=path_str,
            file_type=type(audio).__name__,
            properties=properties,
            tags=blocks,
            primary_index=primary_index,
        )


def _os_reason(exc: OSError) -> str:
    """Render an OSError without repeating the path."""
    return exc.strerror or str(exc)


def _read_properties(audio: Any) -> AudioProperties:
    info = getattr(audio, "info", None)
    length = getattr(info, "length", None) or 0.0
    return AudioProperties(
        duration=max(0.0, float(length)),
        sample_rate=getattr(info, "sample_rate", None) or None,
        channels=getattr(info, "channels", None) or None,
        bitrate=getattr(info, "bitrate", None) or None,
    )


def _probe_apev2(fileobj: Any) -> APEv2 | None:
    try:
        return APEv2(fileobj)
    except mutagen.MutagenError:
        return None


def _probe_riff_info(fileobj: Any) -> TagFields | None:
    """First LIST/INFO chunk of a RIFF file as a tag block, if any."""
    try:
        riff = RiffFile(fileobj)
        info = next(
            (
                chunk
                for chunk in riff.root.subchunks()
                if chunk.id == "LIST" and getattr(chunk, "name", None) == "INFO"
            ),
            None,
        )
        if info is None:
            return None
        values: dict[str, str | None] = {}
        for item in info.subchunks():
            field = _RIFF_INFO_FIELDS.get(item.id)
            if field and values.get(field) is None:
                values[field] = _riff_text(item.read())
    except mutagen.MutagenError as exc:
        logger.debug("Skipping unreadable RIFF INFO chunk: %s", exc)
        return None
    return TagFields(**values)


# ---------------------------------------------------------------------------
# Per-container readers
# ---------------------------------------------------------------------------

def _read_tag_block(audio: Any, tags: Any) -> TagFields:
    for tag_type, reader in _TAG_READERS:
        if isinstance(tags, tag_type):
            return reader(audio, tags)
    return _read_vorbis(audio, tags)


def _read_id3(audio: Any, tags: ID3) -> TagFields:
    pictures = []
    for frame in tags.getall("APIC"):
        # "-->" marks a URL reference, not embedded data.
        if frame.mime == "-->" or not frame.data:
            continue
        pictures.append(
            Picture(
                picture_type=PictureType.from_raw(frame.type),
                mime_type=frame.mime or None,
                data=frame.data,
            )
        )
    return TagFields(
        title=_first_text(tags.get("TIT2")),
        artist=_first_text(tags.get("TPE1")),
        album=_first_text(tags.get("TALB")),
        pictures=pictures,
    )


def _read_mp4(audio: Any, tags: MP4Tags) -> TagFields:
    pictures = [
        Picture(
            picture_type=PictureType.OTHER,
            mime_type=_MP4_COVER_MIME.get(cover.imageformat),
            data=bytes(cover),
        )
        for cover in tags.get("covr", [])
        if len(cover) > 0
    ]
    return TagFields(
        title=_first_value(tags.get("\xa9nam")),
        artist=_first_value(tags.get("\xa9ART")),
        album=_first_value(tags.get("\xa9alb")),
        pictures=pictures,
    )


def _read_apev2(audio: Any, tags: APEv2) -> TagFields:
    pictures = []
    for key in tags.keys():
        lowered = key.lower()
        if not lowered.startswith("cover art"):
            continue
        raw = getattr(tags[key], "value", None)
        if not isinstance(raw, bytes):
            continue
        filename, sep, data = raw.partition(b"\x00")
        if not sep:
            filename, data = b"", raw
        if not data:
            continue
        mime, _ = mimetypes.guess_type(filename.decode("utf-8", errors="replace"))
        pictures.append(
            Picture(
                picture_type=_APE_COVER_TYPES.get(lowered, PictureType.OTHER),
                mime_type=mime,
                data=data,
            )
        )
    return TagFields(
        title=_ape_text(tags, "Title"),
        artist=_ape_text(tags, "Artist"),
        album=_ape_text(tags, "Album"),
        pictures=pictures,
    )


def _read_vorbis(audio: Any, tags: Any) -> TagFields:
    """Vorbis comments (FLAC, Ogg Vorbis, Opus) and other list-valued dicts."""
    pictures: list[Picture] = []
    # FLAC keeps pictures in METADATA_BLOCK_PICTURE blocks, not in the comment.
    for pic in getattr(audio, "pictures", None) or []:
        if pic.data:
            pictures.append(_from_flac_picture(pic))
    for encoded in _get_list(tags, "metadata_block_picture"):
        try:
            pic = FLACPicture(base64.b64decode(encoded))
        except (ValueError, struct.error, mutagen.MutagenError) as exc:
            logger.debug("Skipping undecodable picture block: %s", exc)
            continue
        if pic.data:
            pictures.append(_from_flac_picture(pic))
    legacy = _get_list(tags, "coverart")
    if legacy:
        mimes = _get_list(tags, "coverartmime")
        for i, encoded in enumerate(legacy):
            try:
                data = base64.b64decode(encoded)
            except ValueError:
                continue
            if data:
                pictures.append(
                    Picture(mime_type=mimes[i] if i < len(mimes) else None, data=data)
                )
    return TagFields(
        title=_first_value(_get_list(tags, "title")),
        artist=_first_value(_get_list(tags, "artist")),
        album=_first_value(_get_list(tags, "album")),
        pictures=pictures,
    )


_TAG_READERS: list[tuple[type, Callable[[Any, Any], TagFields]]] = [
    (ID3, _read_id3),
    (MP4Tags, _read_mp4),
    (APEv2, _read_apev2),
]


# ---------------------------------------------------------------------------
# Value helpers
# ---------------------------------------------------------------------------

def _from_flac_picture(pic: FLACPicture) -> Picture:
    return Picture(
        picture_type=PictureType.from_raw(pic.type),
        mime_type=pic.mime or None,
        data=pic.data,
    )


def _first_text(frame: Any) -> str | None:
    """First text value of an ID3 text frame, or None."""
    if frame is None:
        return None
    return _first_value(getattr(frame, "text", None))


def _first_value(values: Any) -> str | None:
    if not values:
        return None
    return str(values[0])


def _get_list(tags: Any, key: str) -> list:
    try:
        values = tags.get(key)
    except (KeyError, ValueError, TypeError):
        return []
    if values is None:
        return []
    if isinstance(values, (str, bytes)):
        return [values]
    return list(values)


def _riff_text(raw: bytes) -> str | None:
    """INFO values are NUL-terminated; the encoding is not declared."""
    text = raw.split(b"\x00", 1)[0]
    try:
        decoded = text.decode("utf-8")
    except UnicodeDecodeError:
        decoded = text.decode("latin-1")
    return decoded or None


def _ape_text(tags: APEv2, key: str) -> str | None:
    text = getattr(tags.get(key), "value", None)
    if not isinstance(text, str):
        return None
    return _first_value(text.split("\x00"))
