"""Entry point for music-indexer.

Usage:
    python -m music_indexer ~/Music             # scan a folder
    python -m music_indexer a.mp3 b.flac        # scan explicit files
    python -m music_indexer --covers ~/Music    # include cover data URIs
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

from music_indexer.analysis.artwork import attach_covers
from music_indexer.commands import filter_audio_args, scan_files, scan_folder
from music_indexer.errors import ValidationError
from music_indexer.models import ScanResult

logger = logging.getLogger("music_indexer")


def _setup_logging(level: str, log_file: str | None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="music-indexer",
        description="Scan audio folders/files and print their metadata as JSON.",
    )
    parser.add_argument("paths", nargs="+", help="Folders or audio files")
    parser.add_argument(
        "--covers", action="store_true", help="Embed cover art as data URIs"
    )
    parser.add_argument("--log-level", default="WARNING", help="Logging level")
    parser.add_argument("--log-file", default=None, help="Also log to this file")
    return parser


def parse_args(argv: list[str]) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


def run(args: argparse.Namespace) -> ScanResult:
    """Scan every folder in ``args.paths`` and the audio files among the rest."""
    result = ScanResult()

    folders = [p for p in args.paths if os.path.isdir(p)]
    for folder in folders:
        try:
            result = result.merged(scan_folder(folder))
        except ValidationError as exc:
            result = result.merged(ScanResult(errors=[f"{folder}: {exc}"]))

    # Same filtering a host applies to launch arguments: argv[0] is skipped.
    files = filter_audio_args(["music-indexer", *args.paths])
    if files:
        result = result.merged(scan_files(files))

    if args.covers:
        result = ScanResult(songs=attach_covers(result.songs), errors=result.errors)
    return result


def main(argv: list[str] | None = None) -> int:
    """Run a scan and write the ScanResult as JSON to stdout."""
    argv = sys.argv[1:] if argv is None else argv
    args = parse_args(argv)
    _setup_logging(args.log_level, args.log_file)
    logger.info("Starting music-indexer on %d paths", len(args.paths))

    result = run(args)
    sys.stdout.write(result.model_dump_json(indent=2))
    sys.stdout.write("\n")
    return 1 if result.errors and not result.songs else 0


if __name__ == "__main__":
    sys.exit(main())
