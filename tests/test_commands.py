"""Tests for boundary commands: validation, delegation and argv filtering."""

import base64
import os
from pathlib import Path

import pytest

from conftest import FRONT, write_mp3, write_wav
from music_indexer.commands import (
    filter_audio_args,
    format_duration,
    get_cover,
    get_metadata,
    scan_files,
    scan_folder,
)
from music_indexer.errors import TagOpenError, TagReadError, ValidationError


class TestScanFolder:
    def test_missing_folder(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="^Folder not found$"):
            scan_folder(tmp_path / "nope")

    def test_not_a_folder(self, tagged_mp3: Path) -> None:
        with pytest.raises(ValidationError, match="^Path is not a folder$"):
            scan_folder(tagged_mp3)

    def test_scans_folder(self, tmp_path: Path) -> None:
        write_mp3(tmp_path / "a.mp3", title="Song A")
        (tmp_path / "c.flac").write_bytes(b"corrupt")

        result = scan_folder(str(tmp_path))
        assert [s.title for s in result.songs] == ["Song A"]
        assert len(result.errors) == 1

    def test_progress_forwarded(self, tmp_path: Path) -> None:
        write_mp3(tmp_path / "a.mp3")
        seen = []
        scan_folder(tmp_path, progress_callback=lambda name, i: seen.append(name))
        assert seen == ["a.mp3"]


class TestScanFiles:
    def test_never_raises(self, tmp_path: Path) -> None:
        result = scan_files([str(tmp_path / "missing.mp3"), str(tmp_path)])
        assert result.songs == [] and result.errors == []

    def test_mixed_input(self, tmp_path: Path, tagged_mp3: Path) -> None:
        text = tmp_path / "x.txt"
        text.write_text("hello")
        result = scan_files([str(tagged_mp3), str(text), str(tmp_path / "gone.flac")])
        assert len(result.songs) == 1
        assert result.errors == []


class TestGetMetadata:
    def test_returns_song(self, tagged_mp3: Path) -> None:
        song = get_metadata(str(tagged_mp3))
        assert song.title == "Song A"
        assert song.cover is None

    def test_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="^File not found$"):
            get_metadata(tmp_path / "missing.mp3")

    def test_extraction_error(self, corrupt_flac: Path) -> None:
        with pytest.raises(TagReadError):
            get_metadata(corrupt_flac)

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="FIFOs unsupported")
    def test_fifo_rejected_without_blocking(self, tmp_path: Path) -> None:
        fifo = tmp_path / "pipe.flac"
        os.mkfifo(fifo)
        with pytest.raises(TagOpenError, match="Not a regular file"):
            get_metadata(fifo)
        with pytest.raises(TagOpenError, match="Not a regular file"):
            get_cover(fifo)


class TestGetCover:
    def test_returns_data_uri(self, tmp_path: Path, jpeg_bytes: bytes) -> None:
        path = write_mp3(tmp_path / "c.mp3", pictures=[(FRONT, "image/jpeg", jpeg_bytes)])
        uri = get_cover(path)
        assert uri.startswith("data:image/jpeg;base64,")
        assert base64.b64decode(uri.split(",", 1)[1]) == jpeg_bytes

    def test_none_without_tag(self, untagged_wav: Path) -> None:
        assert get_cover(untagged_wav) is None

    def test_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError, match="^File not found$"):
            get_cover(tmp_path / "missing.mp3")


class TestFilterAudioArgs:
    def test_program_name_dropped(self, tagged_mp3: Path) -> None:
        assert filter_audio_args([str(tagged_mp3)]) == []

    def test_keeps_existing_audio_files(self, tmp_path: Path, tagged_mp3: Path) -> None:
        wav = write_wav(tmp_path / "b.WAV")
        text = tmp_path / "notes.txt"
        text.write_text("x")
        argv = [
            "/usr/bin/player",
            str(tagged_mp3),
            "--flag",
            str(text),
            str(tmp_path / "missing.mp3"),
            str(tmp_path),
            str(wav),
        ]
        assert filter_audio_args(argv) == [str(tagged_mp3), str(wav)]

    def test_empty_argv(self) -> None:
        assert filter_audio_args([]) == []


class TestFormatDuration:
    @pytest.mark.parametrize(
        "seconds, expected",
        [(0, "0:00"), (59.9, "0:59"), (61, "1:01"), (3600, "1:00:00"), (3725.4, "1:02:05")],
    )
    def test_format(self, seconds: float, expected: str) -> None:
        assert format_duration(seconds) == expected
