"""Boundary operations for a host process or presentation layer.

Each function validates its input path, then delegates to the scanners
and extractors. Single-file operations raise; batch operations return a
partial ScanResult instead.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Sequence

from music_indexer.analysis.artwork import extract_cover
from music_indexer.analysis.classifier import AudioClassifier
from music_indexer.analysis.metadata import MetadataExtractor
from music_indexer.analysis.scanner import BatchScanner, DirectoryScanner, ProgressCallback
from music_indexer.config import DEFAULT_CONFIG, ScanConfig
from music_indexer.errors import ValidationError
from music_indexer.models import ScanResult, Song

logger = logging.getLogger(__name__)


def scan_folder(
    path: Path | str,
    config: ScanConfig = DEFAULT_CONFIG,
    progress_callback: ProgressCallback | None = None,
) -> ScanResult:
    """Scan a folder recursively.

    Raises ValidationError("Folder not found") or
    ValidationError("Path is not a folder").
    """
    folder = Path(path)
    if not folder.exists():
        raise ValidationError("Folder not found")
    if not folder.is_dir():
        raise ValidationError("Path is not a folder")
    return DirectoryScanner(config).scan(path, progress_callback)


def scan_files(
    paths: Iterable[Path | str],
    config: ScanConfig = DEFAULT_CONFIG,
    progress_callback: ProgressCallback | None = None,
) -> ScanResult:
    """Scan an explicit list of files. Never raises."""
    return BatchScanner(config).scan(paths, progress_callback)


def get_metadata(path: Path | str) -> Song:
    """Metadata of one file. Raises ValidationError or TagReaderError."""
    _require_exists(path)
    return MetadataExtractor().extract(path)


def get_cover(path: Path | str) -> str | None:
    """Cover art data URI of one file, or None if it has no picture."""
    _require_exists(path)
    return extract_cover(path)


def filter_audio_args(
    argv: Sequence[str], config: ScanConfig = DEFAULT_CONFIG
) -> list[str]:
    """Audio file paths from a process argument vector.

    ``argv[0]`` (the program) is dropped; the remaining entries are kept
    when they are existing regular files with an audio extension. Used for
    both launch arguments and second-instance notifications.
    """
    classifier = AudioClassifier(config)
    files = [arg for arg in argv[1:] if os.path.isfile(arg) and classifier.is_audio(arg)]
    logger.debug("Accepted %d of %d arguments as audio files", len(files), len(argv[1:]))
    return files


def format_duration(seconds: float) -> str:
    """Format seconds as M:SS or H:MM:SS."""
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def _require_exists(path: Path | str) -> None:
    if not os.path.exists(path):
        raise ValidationError("File not found")
