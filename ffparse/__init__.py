"""
Structured facts from ffmpeg stderr.

This package turns the diagnostic text ffmpeg writes while transcoding into
typed records. It never starts ffmpeg and never builds its arguments.

Scope:
- Container bitrate and duration from the Duration: header
- First announced video and audio stream per transcode
- Progress lines (time=, frame=, fps=, size=, bitrate=)
- Per-transcode percentage and ETA tracking

Usage:
    from ffparse import InputFile, is_progress_data, extract_video_stream

    input_file = InputFile(path="/path/to/source.mov")
    for line in stderr_lines:
        extract_video_stream(line, input_file)
        found, progress = is_progress_data(line)
        if found:
            print(progress.processed_duration)
"""

__version__ = "0.1.0"

from .errors import (
    FFParseError,
    PatternRegistryError,
    SettingsError,
)
from .patterns import (
    Find,
    get_pattern,
    registered_tags,
)
from .models import (
    ProgressData,
    MediaInfo,
    VideoStreamInfo,
    AudioStreamInfo,
    MetaData,
    InputFile,
)
from .coercion import (
    parse_int,
    parse_long,
    parse_float,
    parse_invariant_float,
    parse_large_duration,
)
from .extractors import (
    is_progress_data,
    is_media_info,
    extract_video_stream,
    extract_audio_stream,
    is_clip_bitrate,
    is_conversion_finished,
)
from .session import (
    ProgressSnapshot,
    TranscodeSession,
    format_eta,
    format_size,
    iter_stderr_lines,
)
from .settings import (
    NumberFormat,
    ParserSettings,
    get_settings,
    load_settings,
    reset_settings,
)

__all__ = [
    # Errors
    "FFParseError",
    "PatternRegistryError",
    "SettingsError",
    # Patterns
    "Find",
    "get_pattern",
    "registered_tags",
    # Models
    "ProgressData",
    "MediaInfo",
    "VideoStreamInfo",
    "AudioStreamInfo",
    "MetaData",
    "InputFile",
    # Coercion
    "parse_int",
    "parse_long",
    "parse_float",
    "parse_invariant_float",
    "parse_large_duration",
    # Extraction
    "is_progress_data",
    "is_media_info",
    "extract_video_stream",
    "extract_audio_stream",
    "is_clip_bitrate",
    "is_conversion_finished",
    # Session
    "ProgressSnapshot",
    "TranscodeSession",
    "format_eta",
    "format_size",
    "iter_stderr_lines",
    # Settings
    "NumberFormat",
    "ParserSettings",
    "get_settings",
    "load_settings",
    "reset_settings",
]
