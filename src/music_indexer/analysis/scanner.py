"""Audio file discovery and folder/file-list scanning."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Iterable, Iterator

from music_indexer.analysis.classifier import AudioClassifier
from music_indexer.analysis.metadata import MetadataExtractor, display_path
from music_indexer.config import DEFAULT_CONFIG, ScanConfig
from music_indexer.errors import TagReaderError
from music_indexer.models import ScanResult, Song

logger = logging.getLogger(__name__)

# callback(filename, processed_count)
ProgressCallback = Callable[[str, int], None]


class ScanAccumulator:
    """Folds per-file outcomes into songs and error strings."""

    def __init__(self) -> None:
        self.songs: list[Song] = []
        self.errors: list[str] = []

    def add_song(self, song: Song) -> None:
        self.songs.append(song)

    def add_error(self, path: str, message: str) -> None:
        self.errors.append(f"{path}: {message}")

    @property
    def processed(self) -> int:
        return len(self.songs) + len(self.errors)

    def result(self) -> ScanResult:
        return ScanResult(songs=list(self.songs), errors=list(self.errors))


def extract_into(
    accumulator: ScanAccumulator,
    extractor: MetadataExtractor,
    path: Path | str,
) -> None:
    """Extract one candidate and record exactly one outcome for it."""
    try:
        accumulator.add_song(extractor.extract(path))
    except TagReaderError as exc:
        logger.warning("Failed to read %s: %s", path, exc)
        accumulator.add_error(display_path(path), str(exc))


class DirectoryScanner:
    """Recursively scans a folder for audio files and extracts each one.

    The caller validates that the root exists and is a directory.
    Unreadable directories and broken links are skipped silently; only
    extraction failures appear in ``ScanResult.errors``.
    """

    def __init__(
        self,
        config: ScanConfig = DEFAULT_CONFIG,
        classifier: AudioClassifier | None = None,
        extractor: MetadataExtractor | None = None,
    ) -> None:
        self.config = config
        self.classifier = classifier or AudioClassifier(config)
        self.extractor = extractor or MetadataExtractor()

    def iter_candidates(self, root: Path | str) -> Iterator[str]:
        """Yield regular files under ``root`` that pass classification.

        A directory whose (device, inode) is already among its own
        ancestors is a symlink cycle and is not entered. The same directory
        reached through two sibling paths is scanned under both.
        Entries are yielded in name order per directory.
        """
        # dirpath -> (device, inode) keys of its ancestors, parent included
        ancestry: dict[str, frozenset[tuple[int, int]]] = {}

        def _on_error(exc: OSError) -> None:
            logger.debug("Skipping unreadable entry %s: %s", exc.filename, exc)

        for dirpath, dirnames, filenames in os.walk(
            root, onerror=_on_error, followlinks=self.config.follow_symlinks
        ):
            ancestors = ancestry.pop(dirpath, frozenset())
            key = _dir_key(dirpath)
            if key is None or key in ancestors:
                logger.debug("Not descending into %s (symlink cycle)", dirpath)
                dirnames[:] = []
                continue
            dirnames.sort()
            chain = ancestors | {key}
            for name in dirnames:
                ancestry[os.path.join(dirpath, name)] = chain

            for name in sorted(filenames):
                path = os.path.join(dirpath, name)
                if not self.classifier.is_audio(name):
                    continue
                # isfile follows links; broken links and sockets are skipped
                if os.path.isfile(path):
                    yield path

    def scan(
        self,
        root: Path | str,
        progress_callback: ProgressCallback | None = None,
    ) -> ScanResult:
        """Traverse ``root`` and extract every audio file found."""
        acc = ScanAccumulator()
        for path in self.iter_candidates(root):
            extract_into(acc, self.extractor, path)
            if progress_callback:
                progress_callback(os.path.basename(path), acc.processed)

        logger.info(
            "Scanned %s: %d songs, %d errors", root, len(acc.songs), len(acc.errors)
        )
        return acc.result()


class BatchScanner:
    """Extracts an explicit list of files; no traversal.

    Paths that are not existing regular files, or are not audio by
    extension, are dropped without an error entry.
    """

    def __init__(
        self,
        config: ScanConfig = DEFAULT_CONFIG,
        classifier: AudioClassifier | None = None,
        extractor: MetadataExtractor | None = None,
    ) -> None:
        self.classifier = classifier or AudioClassifier(config)
        self.extractor = extractor or MetadataExtractor()

    def scan(
        self,
        paths: Iterable[Path | str],
        progress_callback: ProgressCallback | None = None,
    ) -> ScanResult:
        acc = ScanAccumulator()
        for path in paths:
            if not os.path.isfile(path) or not self.classifier.is_audio(path):
                logger.debug("Ignoring %s", path)
                continue
            extract_into(acc, self.extractor, path)
            if progress_callback:
                progress_callback(os.path.basename(path), acc.processed)

        logger.info("Scanned file list: %d songs, %d errors", len(acc.songs), len(acc.errors))
        return acc.result()


def _dir_key(dirpath: str) -> tuple[int, int] | None:
    try:
        st = os.stat(dirpath)
    except OSError as exc:
        logger.debug("Cannot stat %s: %s", dirpath, exc)
        return None
    return st.st_dev, st.st_ino
