"""
Per-transcode tracking on top of the line extractors.

ffmpeg writes a header, then progress lines, to stderr:

    Duration: 00:02:00.00, start: 0.000000, bitrate: 5000 kb/s
      Stream #0:0(und): Video: h264 (High), yuv420p, 1920x1080, 4800 kb/s, 25 fps, 25 tbr
      Stream #0:1(und): Audio: aac (LC), 48000 Hz, stereo, fltp, 192 kb/s
    frame=   24 fps= 12 q=28.0 size=       0kB time=00:00:01.00 bitrate=   0.0kbits/s
    ...
    frame= 3000 fps=120 q=-1.0 Lsize=   73242kB time=00:02:00.00 bitrate=5000.0kbits/s

TranscodeSession feeds each line to every extractor, keeps the first
stream and container facts in the InputFile accumulator, and turns
progress lines into a running snapshot:
- time= against the clip duration gives the percentage
- a rolling window of (wall clock, media time) samples gives the ETA
- Lsize= marks the transcode complete

A session belongs to one transcode and must be fed from a single thread.
"""

import logging
import time
from collections import deque
from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Iterable, Optional

from .extractors import (
    extract_audio_stream,
    extract_video_stream,
    is_conversion_finished,
    is_media_info,
    is_progress_data,
)
from .models import InputFile, ProgressData
from .settings import ParserSettings, get_settings


logger = logging.getLogger(__name__)


@dataclass
class ProgressSnapshot:
    """Running progress state for one transcode."""

    # Progress percentage (0-100)
    progress_percent: float = 0.0

    # Current position in seconds
    current_time: float = 0.0

    # Total duration in seconds (from the Duration: header)
    total_duration: float = 0.0

    current_frame: Optional[int] = None

    # Encoding speed (fps)
    encoding_fps: Optional[float] = None

    # Estimated time remaining in seconds
    eta_seconds: Optional[float] = None

    current_size_kb: Optional[int] = None
    estimated_size_kb: Optional[int] = None

    completed: bool = False
    final_size_kb: Optional[int] = None

    # Number of progress lines seen
    updates: int = 0


class TranscodeSession:
    """
    Track one ffmpeg transcode from its stderr lines.

    Usage:
        session = TranscodeSession(on_progress=update_ui)
        for line in ffmpeg_stderr:
            session.feed(line)
        print(session.input_file.meta_data)
    """

    def __init__(
        self,
        input_file: Optional[InputFile] = None,
        on_progress: Optional[Callable[[ProgressData, ProgressSnapshot], None]] = None,
        on_complete: Optional[Callable[[ProgressSnapshot], None]] = None,
        settings: Optional[ParserSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize a session.

        Args:
            input_file: Accumulator owner; a fresh InputFile if omitted
            on_progress: Called with each filled-in ProgressData and the snapshot
            on_complete: Called once when the final Lsize= line arrives
            settings: Parser settings; process-wide settings if omitted
            clock: Monotonic seconds source used for ETA
        """
        self.input_file = input_file if input_file is not None else InputFile()
        self.on_progress = on_progress
        self.on_complete = on_complete
        self.settings = settings if settings is not None else get_settings()
        self._clock = clock

        self._snapshot = ProgressSnapshot()

        # (wall clock, media seconds) pairs for ETA
        self._samples: deque[tuple[float, float]] = deque(maxlen=self.settings.eta_window)

    @property
    def total_duration(self) -> timedelta:
        """Clip duration from the Duration: header, zero until seen."""
        meta_data = self.input_file.meta_data
        if meta_data is None or meta_data.file_info is None:
            return timedelta(0)
        return meta_data.file_info.duration

    def feed(self, line: str) -> Optional[ProgressData]:
        """
        Process a single line of ffmpeg stderr.

        Args:
            line: Single line from ffmpeg stderr

        Returns:
            ProgressData with total_duration filled in if the line carried
            progress, None otherwise
        """
        line = line.rstrip("\r\n")

        extract_video_stream(line, self.input_file)
        extract_audio_stream(line, self.input_file)

        found, media_info = is_media_info(line)
        if found:
            if self.input_file.ensure_meta_data().set_file_info_if_absent(media_info):
                logger.debug(
                    f"[Session] Clip duration {media_info.duration}, bitrate {media_info.bitrate} kb/s"
                )
            return None

        found, progress_data = is_progress_data(line)
        if not found:
            return None

        progress_data = progress_data.with_total_duration(self.total_duration)
        self._update(progress_data)

        if self.on_progress:
            self.on_progress(progress_data, self._snapshot)

        finished, final_size_kb = is_conversion_finished(line)
        if finished:
            self._complete(final_size_kb)

        return progress_data

    def feed_lines(self, lines: Iterable[str]) -> list[ProgressData]:
        """Process many lines; return the progress records found."""
        results = []
        for line in lines:
            progress_data = self.feed(line)
            if progress_data is not None:
                results.append(progress_data)
        return results

    def _update(self, progress_data: ProgressData) -> None:
        snapshot = self._snapshot

        current_time = progress_data.processed_duration.total_seconds()
        total = progress_data.total_duration.total_seconds()

        snapshot.current_time = current_time
        snapshot.total_duration = total
        snapshot.updates += 1

        if total > 0:
            snapshot.progress_percent = max(0.0, min(100.0, (current_time / total) * 100.0))
        else:
            snapshot.progress_percent = 0.0

        if progress_data.frame is not None:
            snapshot.current_frame = progress_data.frame
        if progress_data.fps is not None:
            snapshot.encoding_fps = progress_data.fps
        if progress_data.size_kb is not None:
            snapshot.current_size_kb = progress_data.size_kb

        self._samples.append((self._clock(), current_time))

        snapshot.eta_seconds = self._calculate_eta()
        snapshot.estimated_size_kb = self._estimate_final_size()

        logger.debug(
            f"[Session] {snapshot.progress_percent:.1f}% at {current_time:.2f}s, "
            f"ETA {format_eta(snapshot.eta_seconds)}"
        )

    def _complete(self, final_size_kb: Optional[int]) -> None:
        snapshot = self._snapshot
        if snapshot.completed:
            return

        snapshot.completed = True
        snapshot.final_size_kb = final_size_kb
        snapshot.eta_seconds = 0.0
        if snapshot.total_duration > 0:
            snapshot.progress_percent = 100.0

        logger.info(
            f"[Session] Transcode complete after {snapshot.updates} updates, "
            f"final size {format_size(final_size_kb)}"
        )

        if self.on_complete:
            self.on_complete(snapshot)

    def _calculate_eta(self) -> Optional[float]:
        """
        Estimate seconds remaining.

        Uses the oldest and newest samples in the window, so short stalls
        are smoothed out.

        Returns:
            Estimated seconds remaining, or None if not calculable
        """
        total = self._snapshot.total_duration
        if total <= 0 or len(self._samples) < 2:
            return None

        remaining_time = total - self._snapshot.current_time
        if remaining_time <= 0:
            return 0.0

        first_wall, first_media = self._samples[0]
        last_wall, last_media = self._samples[-1]

        encoded = last_media - first_media
        elapsed = last_wall - first_wall
        if encoded <= 0 or elapsed <= 0:
            return None

        # Wall seconds spent per encoded second
        speed_ratio = elapsed / encoded
        return remaining_time * speed_ratio

    def _estimate_final_size(self) -> Optional[int]:
        """Extrapolate the output size from the current size and percentage."""
        percent = self._snapshot.progress_percent
        size_kb = self._snapshot.current_size_kb

        if percent <= 0 or not size_kb:
            return None

        return int(size_kb / (percent / 100.0))

    @property
    def snapshot(self) -> ProgressSnapshot:
        """Current progress snapshot (live, updated in place by feed)."""
        return self._snapshot

    def get_progress(self) -> ProgressSnapshot:
        """Get current progress snapshot."""
        return self._snapshot

    def reset(self) -> None:
        """
        Reset progress state.

        The InputFile accumulator is owned by the caller and kept.
        """
        self._snapshot = ProgressSnapshot()
        self._samples.clear()


def format_eta(eta_seconds: Optional[float]) -> str:
    """
    Render an ETA as a clock, e.g. "2:05" or "1:02:05".

    Unknown ETAs render as "--:--"; finished or overdue ones as "0:00".
    """
    if eta_seconds is None:
        return "--:--"

    remaining = max(0, int(round(eta_seconds)))
    hours, remaining = divmod(remaining, 3600)
    minutes, seconds = divmod(remaining, 60)

    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def format_size(size_kb: Optional[int]) -> str:
    """
    Format an ffmpeg kB size for display.

    Args:
        size_kb: Size in kB (1024 bytes, as ffmpeg reports it)

    Returns:
        Human-readable size string
    """
    if size_kb is None:
        return "Unknown"

    if size_kb < 1024:
        return f"{size_kb} KB"

    if size_kb < 1024 * 1024:
        return f"{size_kb / 1024:.1f} MB"

    return f"{size_kb / (1024 * 1024):.2f} GB"


def iter_stderr_lines(stream: Iterable[str]) -> Iterable[str]:
    """
    Split ffmpeg stderr text into lines.

    ffmpeg ends progress updates with a bare carriage return when writing
    to a terminal, so both \\r and \\n are treated as line ends.
    Empty lines are skipped.

    Args:
        stream: Text chunks, e.g. an open text file or sys.stdin
    """
    pending = ""
    for chunk in stream:
        pending += chunk.replace("\r\n", "\n").replace("\r", "\n")
        *complete, pending = pending.split("\n")
        for line in complete:
            if line:
                yield line
    if pending:
        yield pending
