"""Shared test fixtures: real MP3/WAV files with ID3 tags, and JPEG bytes."""

import io
import struct
import wave
from pathlib import Path

import pytest
from mutagen.id3 import APIC, ID3, TALB, TIT2, TPE1, PictureType
from mutagen.wave import WAVE

# One MPEG-1 Layer III frame: 128 kbps, 44.1 kHz, joint stereo, no padding.
_MP3_FRAME = b"\xff\xfb\x90\x64" + b"\x00" * 413


def _id3_frames(title=None, artist=None, album=None, pictures=()):
    frames = []
    if title is not None:
        frames.append(TIT2(encoding=3, text=[title]))
    if artist is not None:
        frames.append(TPE1(encoding=3, text=[artist]))
    if album is not None:
        frames.append(TALB(encoding=3, text=[album]))
    for i, (pic_type, mime, data) in enumerate(pictures):
        frames.append(
            APIC(encoding=3, mime=mime, type=pic_type, desc=f"pic{i}", data=data)
        )
    return frames


def write_mp3(path: Path, frames: int = 40, tagged: bool = True, **tags) -> Path:
    """Write a silent CBR MP3. ``tagged`` adds an ID3v2 block (possibly empty)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(_MP3_FRAME * frames)
    if tagged:
        id3 = ID3()
        for frame in _id3_frames(**tags):
            id3.add(frame)
        id3.save(str(path))
    return path


def write_wav(path: Path, seconds: float = 1.0, tagged: bool = True, **tags) -> Path:
    """Write a silent 8 kHz mono WAV, optionally with an ID3 chunk."""
    path.parent.mkdir(parents=True, exist_ok=True)
    rate = 8000
    with wave.open(str(path), "wb") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(rate)
        w.writeframes(b"\x00\x00" * int(rate * seconds))
    if tagged:
        audio = WAVE(str(path))
        audio.add_tags()
        for frame in _id3_frames(**tags):
            audio.tags.add(frame)
        audio.save()
    return path


def add_riff_info(path: Path, **items: str | bytes) -> Path:
    """Append a LIST/INFO chunk, e.g. ``INAM="Title"``, to a WAV file."""
    body = b"INFO"
    for key, value in items.items():
        data = (value if isinstance(value, bytes) else value.encode("utf-8")) + b"\x00"
        if len(data) % 2:
            data += b"\x00"
        body += struct.pack("<4sI", key.encode("ascii"), len(data)) + data
    with open(path, "r+b") as f:
        f.seek(0, 2)
        f.write(struct.pack("<4sI", b"LIST", len(body)) + body)
        riff_size = f.tell() - 8
        f.seek(4)
        f.write(struct.pack("<I", riff_size))
    return path


def make_jpeg(width: int = 16, height: int = 16) -> bytes:
    """Create a minimal valid JPEG for testing."""
    from PIL import Image

    img = Image.new("RGB", (width, height), (255, 0, 0))
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=50)
    return buf.getvalue()


FRONT = PictureType.COVER_FRONT
BACK = PictureType.COVER_BACK
OTHER = PictureType.OTHER


@pytest.fixture
def jpeg_bytes() -> bytes:
    return make_jpeg()


@pytest.fixture
def tagged_mp3(tmp_path: Path) -> Path:
    return write_mp3(
        tmp_path / "tagged.mp3", title="Song A", artist="Artist A", album="Album A"
    )


@pytest.fixture
def untagged_wav(tmp_path: Path) -> Path:
    return write_wav(tmp_path / "plain.wav", tagged=False)


@pytest.fixture
def corrupt_flac(tmp_path: Path) -> Path:
    path = tmp_path / "broken.flac"
    path.write_bytes(b"this is not a flac stream" * 10)
    return path
