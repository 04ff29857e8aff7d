"""
Pytest configuration for ffparse tests.

Settings are cached per process, so every test starts from a clean
environment and an empty cache.
"""

import pytest

from ffparse.settings import (
    ENV_ETA_WINDOW,
    ENV_LOG_LEVEL,
    ENV_NUMBER_LOCALE,
    reset_settings,
)


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    """Drop FFPARSE_* variables and the settings cache around each test."""
    for name in (ENV_LOG_LEVEL, ENV_NUMBER_LOCALE, ENV_ETA_WINDOW):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def transcode_log():
    """A short but realistic ffmpeg stderr capture."""
    return [
        "Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'in.mov':",
        "  Duration: 00:00:10.00, start: 0.000000, bitrate: 5000 kb/s",
        "    Stream #0:0(und): Video: h264 (High) (avc1 / 0x31637661), yuv420p(tv, bt709, progressive), "
        "1920x1080, 4800 kb/s, 25 fps, 25 tbr, 12800 tbn (default)",
        "    Stream #0:1(und): Audio: aac (LC) (mp4a / 0x6134706D), 48000 Hz, stereo, fltp, 192 kb/s (default)",
        "Output #0, mp4, to 'out.mp4':",
        "    Stream #0:0(und): Video: h264 (libx264), yuv420p(progressive), 1280x720, q=2-31, 25 fps, 12800 tbn (default)",
        "    Stream #0:1(und): Audio: aac (LC), 44100 Hz, mono, fltp, 128 kb/s (default)",
        "frame=  125 fps= 50 q=28.0 size=    1024kB time=00:00:05.00 bitrate=1677.7kbits/s speed=2x",
        "frame=  250 fps= 50 q=-1.0 Lsize=    2048kB time=00:00:10.00 bitrate=1677.7kbits/s speed=2x",
    ]
