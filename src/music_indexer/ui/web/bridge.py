"""Python-side QWebChannel bridge exposing library commands to JavaScript."""

from __future__ import annotations

import json
import logging

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from music_indexer import commands
from music_indexer.errors import LibraryError
from music_indexer.ui.web.serializers import (
    error_envelope,
    ok_envelope,
    serialize_scan_result,
    serialize_song,
)

logger = logging.getLogger(__name__)


class LibraryBridge(QObject):
    """Bridge object exposed to JavaScript via QWebChannel.

    Every slot returns a JSON envelope: ``{"ok": true, "data": ...}`` on
    success or ``{"ok": false, "error": "..."}`` when the command failed.
    """

    # Audio file paths handed over by launch args or a second instance
    open_files = pyqtSignal(list)
    js_ready = pyqtSignal()

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)

    # --- Slots called by JavaScript ---

    @pyqtSlot(str, result=str)
    def scan_folder(self, path: str) -> str:
        logger.debug("JS scan_folder: %s", path)
        try:
            result = commands.scan_folder(path)
        except LibraryError as exc:
            return error_envelope(str(exc))
        return ok_envelope(serialize_scan_result(result))

    @pyqtSlot(str, result=str)
    def scan_files(self, paths_json: str) -> str:
        """Takes a JSON array of paths."""
        logger.debug("JS scan_files: %s", paths_json)
        try:
            paths = json.loads(paths_json)
        except json.JSONDecodeError as exc:
            return error_envelope(f"Invalid path list: {exc}")
        if not isinstance(paths, list):
            return error_envelope("Invalid path list: expected an array")
        result = commands.scan_files([str(p) for p in paths])
        return ok_envelope(serialize_scan_result(result))

    @pyqtSlot(str, result=str)
    def get_metadata(self, path: str) -> str:
        logger.debug("JS get_metadata: %s", path)
        try:
            song = commands.get_metadata(path)
        except LibraryError as exc:
            return error_envelope(str(exc))
        return ok_envelope(serialize_song(song))

    @pyqtSlot(str, result=str)
    def get_cover(self, path: str) -> str:
        try:
            cover = commands.get_cover(path)
        except LibraryError as exc:
            logger.debug("No cover art for %s: %s", path, exc)
            return error_envelope(str(exc))
        return ok_envelope(cover)

    @pyqtSlot()
    def on_js_ready(self) -> None:
        """Called when the JS side has fully initialized."""
        logger.info("JS bridge ready")
        self.js_ready.emit()

    @pyqtSlot(str)
    def log(self, message: str) -> None:
        """Allow JS to log messages through Python's logging."""
        logger.info("[JS] %s", message)

    # --- Host process hooks ---

    def on_second_instance(self, argv: list[str]) -> list[str]:
        """Forward audio files from another instance's argv to the frontend."""
        files = commands.filter_audio_args(argv)
        if files:
            logger.info("Opening %d files from another instance", len(files))
            self.open_files.emit(files)
        return files
