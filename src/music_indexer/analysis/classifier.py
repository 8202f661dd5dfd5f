"""Audio file classification by extension."""

from __future__ import annotations

import os
from pathlib import Path

from music_indexer.config import DEFAULT_CONFIG, ScanConfig


class AudioClassifier:
    """Decides whether a path names a supported audio file.

    Purely lexical: the file is never touched.
    """

    def __init__(self, config: ScanConfig = DEFAULT_CONFIG) -> None:
        self.extensions = config.audio_extensions

    def is_audio(self, path: Path | str) -> bool:
        suffix = Path(os.fsdecode(path)).suffix
        if not suffix:
            return False
        return suffix[1:].lower() in self.extensions

    def __call__(self, path: Path | str) -> bool:
        return self.is_audio(path)


def is_audio_file(path: Path | str) -> bool:
    """Check ``path`` against the default allow-list."""
    return _DEFAULT_CLASSIFIER.is_audio(path)


_DEFAULT_CLASSIFIER = AudioClassifier()
