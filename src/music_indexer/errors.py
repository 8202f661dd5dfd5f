"""Exception hierarchy for library scanning.

Single-file operations raise these to the caller. Batch scans convert
``TagReaderError`` into ``"<path>: <message>"`` entries instead.
"""

from __future__ import annotations


class LibraryError(Exception):
    """Base class for all music_indexer errors."""


class ValidationError(LibraryError):
    """The caller supplied a path that is missing or of the wrong kind."""


class TagReaderError(LibraryError):
    """A candidate file could not be turned into tag data."""

    prefix = "Failed to process file"

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{self.prefix}: {reason}")


class TagOpenError(TagReaderError):
    """The file could not be opened (missing, permission denied, directory)."""

    prefix = "Failed to open file"


class TagReadError(TagReaderError):
    """The content is not a recognized tagged audio container."""

    prefix = "Failed to read file"
