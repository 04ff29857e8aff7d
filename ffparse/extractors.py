"""
Line extractors for ffmpeg stderr.

Each extractor looks at one raw line and reports whether it recognised it.
Nothing here raises on unexpected text:

- A missing anchor (time=, Duration:, Stream ... Video:) means the line is
  not of that kind. The extractor returns False and no record.
- An optional field that is missing or unparsable becomes None (or the
  per-field default) and extraction still succeeds.
- The media-info bitrate is mandatory once matched. If its digits do not
  parse, the whole extraction fails.

ffmpeg prints numbers period-decimal on every host, so every numeric field
is parsed with the invariant NumberFormat, whatever FFPARSE_NUMBER_LOCALE says.

The extractors are independent and stateless apart from the MetaData
accumulator that extract_video_stream and extract_audio_stream fill in.
"""

import logging
import re
from typing import Optional

from .coercion import (
    parse_float,
    parse_int,
    parse_invariant_float,
    parse_large_duration,
    parse_long,
)
from .models import (
    AudioStreamInfo,
    InputFile,
    MediaInfo,
    ProgressData,
    VideoStreamInfo,
)
from .patterns import Find, get_pattern
from .settings import INVARIANT_NUMBER_FORMAT


logger = logging.getLogger(__name__)


def _group_value(match: Optional["re.Match[str]"], index: int = 1) -> Optional[str]:
    """Captured text of a group, or None if the pattern did not match."""
    if match is None:
        return None
    return match.group(index)


def _group_text(match: Optional["re.Match[str]"], index: int) -> str:
    """Captured text of a group, or empty string if unmatched."""
    if match is None:
        return ""
    return match.group(index) or ""


def is_progress_data(line: Optional[str]) -> tuple[bool, Optional[ProgressData]]:
    """
    Establish whether a line carries transcode progress.

    time= is the anchor; frame=, fps=, size= and bitrate= are best-effort.

    Args:
        line: Single line from ffmpeg stderr

    Returns:
        Tuple of (is_progress, progress_data)
        progress_data is None if the line has no time= token
    """
    if not line:
        return False, None

    match_time = get_pattern(Find.CONVERT_PROGRESS_TIME).search(line)
    if not match_time:
        return False, None

    match_frame = get_pattern(Find.CONVERT_PROGRESS_FRAME).search(line)
    match_fps = get_pattern(Find.CONVERT_PROGRESS_FPS).search(line)
    match_size = get_pattern(Find.CONVERT_PROGRESS_SIZE).search(line)
    match_bitrate = get_pattern(Find.CONVERT_PROGRESS_BITRATE).search(line)

    time_text = match_time.group(1)
    parsed, processed_duration = parse_large_duration(time_text)
    if not parsed:
        logger.debug(f"[Progress] Unparsable time token {time_text!r}, using zero")

    progress_data = ProgressData(
        processed_duration=processed_duration,
        frame=parse_long(_group_value(match_frame), INVARIANT_NUMBER_FORMAT),
        fps=parse_invariant_float(_group_value(match_fps)),
        size_kb=parse_int(_group_value(match_size), INVARIANT_NUMBER_FORMAT),
        bitrate=parse_float(_group_value(match_bitrate), INVARIANT_NUMBER_FORMAT),
    )

    return True, progress_data


def is_media_info(line: Optional[str]) -> tuple[bool, Optional[MediaInfo]]:
    """
    Establish whether a line is the container Duration:/bitrate header.

    Both the bitrate and Duration: tokens must be present, and the bitrate
    must parse.

    Args:
        line: Single line from ffmpeg stderr

    Returns:
        Tuple of (is_media_info, media_info)
    """
    if not line:
        return False, None

    match_bitrate = get_pattern(Find.BIT_RATE).search(line)
    match_duration = get_pattern(Find.DURATION).search(line)

    if not match_bitrate or not match_duration:
        return False, None

    duration_text = match_duration.group(1)
    parsed, clip_duration = parse_large_duration(duration_text)
    if not parsed:
        logger.debug(f"[MediaInfo] Unparsable duration {duration_text!r}, using zero")

    bitrate = parse_float(match_bitrate.group(1), INVARIANT_NUMBER_FORMAT)
    if bitrate is None:
        logger.debug(f"[MediaInfo] Unparsable bitrate {match_bitrate.group(1)!r}")
        return False, None

    return True, MediaInfo(bitrate=bitrate, duration=clip_duration)


def extract_video_stream(line: Optional[str], input_file: InputFile) -> bool:
    """
    Record the first video stream announced on a line.

    Lines without a "Stream #n:n ...: Video:" announcement are ignored.
    The descriptor is only stored if input_file has none yet.
    A blank or unparsable frame rate becomes 0.0; a missing or unparsable
    bitrate becomes None.

    Args:
        line: Single line from ffmpeg stderr
        input_file: Owner of the MetaData accumulator

    Returns:
        True if the line announced a video stream
    """
    if not line:
        return False

    match_meta_video = get_pattern(Find.META_VIDEO).search(line)
    if not match_meta_video:
        return False

    full_metadata = match_meta_video.group(1)

    match_format_color_size = get_pattern(Find.VIDEO_FORMAT_COLOR_SIZE).search(full_metadata)
    match_fps = get_pattern(Find.VIDEO_FPS).search(full_metadata)
    match_bitrate = get_pattern(Find.BIT_RATE).search(full_metadata)

    fps = parse_invariant_float(_group_value(match_fps))

    video = VideoStreamInfo(
        format=_group_text(match_format_color_size, 1),
        color_model=_group_text(match_format_color_size, 2),
        frame_size=_group_text(match_format_color_size, 3),
        fps=fps if fps is not None else 0.0,
        bitrate_kbs=parse_int(_group_value(match_bitrate), INVARIANT_NUMBER_FORMAT),
    )

    input_file.ensure_meta_data().set_video_if_absent(video)
    return True


def extract_audio_stream(line: Optional[str], input_file: InputFile) -> bool:
    """
    Record the first audio stream announced on a line.

    Lines without a "Stream #n:n ...: Audio:" announcement are ignored.
    The descriptor is only stored if input_file has none yet.
    A missing or unparsable bitrate becomes 0.

    Args:
        line: Single line from ffmpeg stderr
        input_file: Owner of the MetaData accumulator

    Returns:
        True if the line announced an audio stream
    """
    if not line:
        return False

    match_meta_audio = get_pattern(Find.META_AUDIO).search(line)
    if not match_meta_audio:
        return False

    full_metadata = match_meta_audio.group(1)

    match_format_hz_channel = get_pattern(Find.AUDIO_FORMAT_HZ_CHANNEL).search(full_metadata)
    match_bitrate = get_pattern(Find.BIT_RATE).search(full_metadata)

    bitrate_kbs = parse_int(_group_value(match_bitrate), INVARIANT_NUMBER_FORMAT)

    audio = AudioStreamInfo(
        format=_group_text(match_format_hz_channel, 1),
        sample_rate=_group_text(match_format_hz_channel, 2),
        channel_output=_group_text(match_format_hz_channel, 3),
        bitrate_kbs=bitrate_kbs if bitrate_kbs is not None else 0,
    )

    input_file.ensure_meta_data().set_audio_if_absent(audio)
    return True


def is_clip_bitrate(line: Optional[str]) -> tuple[bool, Optional[int]]:
    """
    Extract the container bitrate from a "bitrate: N kb/s " header.

    Returns:
        Tuple of (matched, bitrate_kbs)
    """
    if not line:
        return False, None

    match = get_pattern(Find.CLIP_BITRATE).search(line)
    if not match:
        return False, None

    bitrate = parse_int(match.group(1), INVARIANT_NUMBER_FORMAT)
    if bitrate is None:
        return False, None
    return True, bitrate


def is_conversion_finished(line: Optional[str]) -> tuple[bool, Optional[int]]:
    """
    Establish whether a line is ffmpeg's final "Lsize=" report.

    Returns:
        Tuple of (finished, final_size_kb)
    """
    if not line:
        return False, None

    match = get_pattern(Find.CONVERT_PROGRESS_FINISHED).search(line)
    if not match:
        return False, None

    return True, parse_int(match.group(1), INVARIANT_NUMBER_FORMAT)
