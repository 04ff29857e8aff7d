#!/usr/bin/env python3
"""
ffparse CLI - read captured ffmpeg stderr and print what it says.

Commands:
- parse:   one JSON object per recognised line
- summary: first video/audio stream, clip facts, final progress and a
           human-readable ETA and size as JSON

Input is a file path, or stdin when omitted or "-". The CLI never starts
ffmpeg itself; capture stderr first, e.g.

    ffmpeg -i in.mov out.mp4 2> ffmpeg.log
    ffparse summary ffmpeg.log

Exit Codes:
===========
- 0: Success
- 4: Input file not found or unreadable
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from datetime import timedelta
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, TextIO

from . import __version__
from .errors import SettingsError
from .extractors import (
    extract_audio_stream,
    extract_video_stream,
    is_conversion_finished,
    is_media_info,
    is_progress_data,
)
from .models import InputFile
from .session import TranscodeSession, format_eta, format_size, iter_stderr_lines
from .settings import LOG_LEVELS, get_settings


EXIT_OK = 0
EXIT_INPUT_ERROR = 4


def _jsonable(value: Any) -> Any:
    """Convert timedeltas to seconds, recursively."""
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    return value


def iter_events(lines) -> Iterator[Dict[str, Any]]:
    """
    Classify each line independently.

    Every stream announcement is reported, not just the first of each kind.
    """
    for line in lines:
        scratch = InputFile()
        if extract_video_stream(line, scratch):
            yield {"kind": "video", **_jsonable(scratch.meta_data.video_data.model_dump())}
            continue
        if extract_audio_stream(line, scratch):
            yield {"kind": "audio", **_jsonable(scratch.meta_data.audio_data.model_dump())}
            continue

        found, media_info = is_media_info(line)
        if found:
            yield {"kind": "media_info", **_jsonable(media_info.model_dump())}
            continue

        found, progress_data = is_progress_data(line)
        if found:
            yield {"kind": "progress", **_jsonable(progress_data.model_dump())}

            finished, final_size_kb = is_conversion_finished(line)
            if finished:
                yield {"kind": "finished", "size_kb": final_size_kb}


def summarize(lines) -> Dict[str, Any]:
    """Run a TranscodeSession over the lines and report its final state."""
    session = TranscodeSession()
    session.feed_lines(lines)

    meta_data = session.input_file.meta_data
    snapshot = session.snapshot
    return {
        "meta_data": _jsonable(meta_data.model_dump()) if meta_data else None,
        "progress": asdict(snapshot),
        "display": {
            "eta": format_eta(snapshot.eta_seconds),
            "size": format_size(snapshot.final_size_kb or snapshot.current_size_kb),
        },
    }


def _open_input(path: Optional[str]) -> TextIO:
    if path is None or path == "-":
        return sys.stdin

    input_path = Path(path)
    if not input_path.is_file():
        print(f"ERROR: Input file not found: {input_path}", file=sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    try:
        return open(input_path, "r", encoding="utf-8", errors="replace")
    except OSError as e:
        print(f"ERROR: Cannot read {input_path}: {e}", file=sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)


def _configure_logging(level: Optional[str]) -> None:
    if level is None:
        try:
            level = get_settings().log_level
        except SettingsError as e:
            print(f"WARNING: {e}", file=sys.stderr)
            level = "WARNING"

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S',
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ffparse",
        description="Extract progress and stream facts from ffmpeg stderr output",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # One JSON object per recognised line
  ffparse parse ffmpeg.log

  # Final stream facts and progress
  ffmpeg -i in.mov out.mp4 2>&1 | ffparse summary
        """
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=list(LOG_LEVELS),
        help="Log level (default: FFPARSE_LOG_LEVEL or WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")
    subparsers.required = True

    parse_parser = subparsers.add_parser("parse", help="Print one JSON object per recognised line")
    parse_parser.add_argument("input", nargs="?", help="ffmpeg stderr capture (default: stdin)")

    summary_parser = subparsers.add_parser("summary", help="Print final stream facts and progress")
    summary_parser.add_argument("input", nargs="?", help="ffmpeg stderr capture (default: stdin)")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.log_level)

    stream = _open_input(args.input)
    try:
        lines = iter_stderr_lines(stream)

        if args.command == "parse":
            for event in iter_events(lines):
                print(json.dumps(event))
        elif args.command == "summary":
            print(json.dumps(summarize(lines), indent=2))
    finally:
        if stream is not sys.stdin:
            stream.close()

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
