"""Serialize songs and scan results to JSON for the web frontend."""

from __future__ import annotations

import json
from typing import Any

from music_indexer.commands import format_duration
from music_indexer.models import ScanResult, Song


def serialize_song(song: Song) -> dict:
    """Song fields plus a pre-formatted duration for display."""
    data = song.model_dump(mode="json")
    data["duration_formatted"] = format_duration(song.duration)
    return data


def serialize_scan_result(result: ScanResult) -> dict:
    return {
        "songs": [serialize_song(s) for s in result.songs],
        "errors": list(result.errors),
    }


def ok_envelope(data: Any) -> str:
    return json.dumps({"ok": True, "data": data})


def error_envelope(message: str) -> str:
    return json.dumps({"ok": False, "error": message})
