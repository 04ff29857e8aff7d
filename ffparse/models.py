"""
Data models for facts extracted from ffmpeg stderr.

All models use Pydantic.
Records (ProgressData, MediaInfo, stream descriptors) are frozen once built.
The MetaData accumulator is the only mutable model and only grows:
each slot is filled at most once, through its set-if-absent accessor.
Unknown or unparsable numeric values are explicitly None where the field
allows it.
"""

import logging
from datetime import timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict


logger = logging.getLogger(__name__)


class ProgressData(BaseModel):
    """
    One progress report from a running transcode.

    processed_duration is the position reached in the output.
    total_duration is left at zero by the extractor and filled in later
    by whoever knows the clip length.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    processed_duration: timedelta
    total_duration: timedelta = timedelta(0)
    frame: Optional[int] = None
    fps: Optional[float] = None
    size_kb: Optional[int] = None
    bitrate: Optional[float] = None  # kbits/s

    def with_total_duration(self, total_duration: timedelta) -> "ProgressData":
        """Return a copy with total_duration set."""
        return self.model_copy(update={"total_duration": total_duration})


class MediaInfo(BaseModel):
    """Container-level facts from the Duration: header line."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    bitrate: float  # kb/s
    duration: timedelta


class VideoStreamInfo(BaseModel):
    """
    First announced video stream.

    color_model keeps ffmpeg's combined pixel format and color
    descriptor, e.g. "yuv420p(tv, bt709, progressive)".
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    format: str
    color_model: str
    frame_size: str  # e.g., "1920x1080"
    fps: float = 0.0
    bitrate_kbs: Optional[int] = None


class AudioStreamInfo(BaseModel):
    """First announced audio stream."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    format: str
    sample_rate: str  # e.g., "48000 Hz"
    channel_output: str  # e.g., "stereo"
    bitrate_kbs: int = 0


class MetaData(BaseModel):
    """
    Per-transcode accumulator of stream and container facts.

    Holds at most one descriptor per kind. The first stored value wins;
    later set attempts are ignored. Not thread-safe: one transcode's
    lines must be fed from a single thread.
    """

    model_config = ConfigDict(extra="forbid")

    video_data: Optional[VideoStreamInfo] = None
    audio_data: Optional[AudioStreamInfo] = None
    file_info: Optional[MediaInfo] = None

    def set_video_if_absent(self, video: VideoStreamInfo) -> bool:
        """
        Store the video descriptor unless one is already held.

        Returns:
            True if stored, False if an earlier descriptor was kept
        """
        if self.video_data is not None:
            logger.debug(f"[MetaData] Ignoring later video stream: {video.format}")
            return False
        self.video_data = video
        return True

    def set_audio_if_absent(self, audio: AudioStreamInfo) -> bool:
        """
        Store the audio descriptor unless one is already held.

        Returns:
            True if stored, False if an earlier descriptor was kept
        """
        if self.audio_data is not None:
            logger.debug(f"[MetaData] Ignoring later audio stream: {audio.format}")
            return False
        self.audio_data = audio
        return True

    def set_file_info_if_absent(self, file_info: MediaInfo) -> bool:
        """Store the container facts unless already held."""
        if self.file_info is not None:
            return False
        self.file_info = file_info
        return True


class InputFile(BaseModel):
    """
    The transcode input as seen by the orchestration layer.

    meta_data is created lazily by the stream extractors.
    """

    model_config = ConfigDict(extra="forbid")

    path: Optional[str] = None
    meta_data: Optional[MetaData] = None

    def ensure_meta_data(self) -> MetaData:
        """Return the accumulator, creating it if absent."""
        if self.meta_data is None:
            self.meta_data = MetaData()
        return self.meta_data
