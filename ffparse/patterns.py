"""
Pattern registry for ffmpeg stderr extraction.

One compiled regular expression per extraction intent. The table is built
once at import time, checked against the Find enum, and exposed read-only.
Compiled patterns are immutable, so concurrent readers need no locking.

The literal anchors (frame=, fps=, size=, Lsize=, time=, bitrate=...kbits/s,
Duration:, Stream #n:n ... Audio:/Video:, tbr) are ffmpeg's own wire format
and must match it byte-for-byte.
"""

import re
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .errors import PatternRegistryError


class Find(str, Enum):
    """
    Closed set of extraction intents.

    Every member has exactly one compiled pattern in the registry.
    """

    AUDIO_FORMAT_HZ_CHANNEL = "audio_format_hz_channel"
    CONVERT_PROGRESS_BITRATE = "convert_progress_bitrate"
    CONVERT_PROGRESS_FPS = "convert_progress_fps"
    CONVERT_PROGRESS_FRAME = "convert_progress_frame"
    CONVERT_PROGRESS_SIZE = "convert_progress_size"
    CONVERT_PROGRESS_FINISHED = "convert_progress_finished"
    CONVERT_PROGRESS_TIME = "convert_progress_time"
    DURATION = "duration"
    CLIP_BITRATE = "clip_bitrate"
    META_AUDIO = "meta_audio"
    META_VIDEO = "meta_video"
    BIT_RATE = "bit_rate"
    VIDEO_FORMAT_COLOR_SIZE = "video_format_color_size"
    VIDEO_FPS = "video_fps"


# Matches: 128 kb/s
_BIT_RATE = r'([0-9]*)\s*kb/s'

# Matches: Duration: 00:01:30.50, start: 0.000000, bitrate: 5000 kb/s
_CLIP_BITRATE = r'bitrate: ([0-9]*)\s*kb/s '
_DURATION = r'Duration: ([^,]*), '

# Matches: frame=  120 fps= 29.97 q=-1.0 size=    2048kB time=00:00:04.00 bitrate=4194.3kbits/s
_PROGRESS_FRAME = r'frame=\s*([0-9]*)'
_PROGRESS_FPS = r'fps=\s*([0-9]*\.?[0-9]*)'
_PROGRESS_SIZE = r'size=\s*([0-9]*)kB'
_PROGRESS_FINISHED = r'Lsize=\s*([0-9]*)kB'
_PROGRESS_TIME = r'time=\s*([^ ]*)'
_PROGRESS_BITRATE = r'bitrate=\s*([0-9]*\.?[0-9]*?)kbits/s'

# Matches: Stream #0:1(eng): Audio: aac (LC), 48000 Hz, stereo, fltp, 128 kb/s
_META_AUDIO = r'(Stream\s*#[0-9]*:[0-9]*\(?[^\)]*?\)?: Audio:.*)'
_AUDIO_FORMAT_HZ_CHANNEL = r'Audio:\s*([^,]*),\s([^,]*),\s([^,]*)'

# Matches: Stream #0:0(und): Video: h264 (High), yuv420p(tv, bt709, progressive), 1920x1080, 29.97 tbr
# The color descriptor may itself hold commas inside a parenthesised group.
_META_VIDEO = r'(Stream\s*#[0-9]*:[0-9]*\(?[^\)]*?\)?: Video:.*)'
_VIDEO_FORMAT_COLOR_SIZE = (
    r'Video:\s*([^,]*),\s*((?:[^,]*,?[^,]*?)(?:\(.*\))?),\s*'
    r'(?=[0-9]*x[0-9]*)([0-9]*x[0-9]*)'
)
_VIDEO_FPS = r'([0-9\.]*)\s*tbr'


def _build_index() -> Mapping[Find, "re.Pattern[str]"]:
    """
    Compile the pattern table and verify it covers every Find member.

    Raises:
        PatternRegistryError: If a member has no pattern
    """
    table = {
        Find.BIT_RATE: re.compile(_BIT_RATE),
        Find.CLIP_BITRATE: re.compile(_CLIP_BITRATE),
        Find.DURATION: re.compile(_DURATION),
        Find.CONVERT_PROGRESS_FRAME: re.compile(_PROGRESS_FRAME),
        Find.CONVERT_PROGRESS_FPS: re.compile(_PROGRESS_FPS),
        Find.CONVERT_PROGRESS_SIZE: re.compile(_PROGRESS_SIZE),
        Find.CONVERT_PROGRESS_FINISHED: re.compile(_PROGRESS_FINISHED),
        Find.CONVERT_PROGRESS_TIME: re.compile(_PROGRESS_TIME),
        Find.CONVERT_PROGRESS_BITRATE: re.compile(_PROGRESS_BITRATE),
        Find.META_AUDIO: re.compile(_META_AUDIO),
        Find.AUDIO_FORMAT_HZ_CHANNEL: re.compile(_AUDIO_FORMAT_HZ_CHANNEL),
        Find.META_VIDEO: re.compile(_META_VIDEO),
        Find.VIDEO_FORMAT_COLOR_SIZE: re.compile(_VIDEO_FORMAT_COLOR_SIZE),
        Find.VIDEO_FPS: re.compile(_VIDEO_FPS),
    }

    missing = [tag for tag in Find if tag not in table]
    if missing:
        raise PatternRegistryError(missing[0], "no pattern registered")

    return MappingProxyType(table)


_index = _build_index()


def get_pattern(tag: Find) -> "re.Pattern[str]":
    """
    Look up the compiled pattern for an extraction intent.

    Args:
        tag: Extraction intent

    Returns:
        Compiled pattern

    Raises:
        PatternRegistryError: If tag is not a Find member
    """
    if not isinstance(tag, Find):
        raise PatternRegistryError(tag, "not a Find member")
    return _index[tag]


def registered_tags() -> tuple[Find, ...]:
    """Return every tag in the registry, in enum order."""
    return tuple(tag for tag in Find if tag in _index)
