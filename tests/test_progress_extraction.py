"""
Tests for progress line extraction.

time= is the only mandatory token. Everything else is best-effort and
maps to None when missing or unparsable.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from ffparse.extractors import is_conversion_finished, is_progress_data


FULL_LINE = "frame= 120 fps= 29.97 q=-1.0 size=    2048kB time=00:00:04.00 bitrate=4194.3kbits/s"


class TestProgressExtraction:
    """Recognising progress lines."""

    def test_full_progress_line(self):
        ok, progress = is_progress_data(FULL_LINE)

        assert ok
        assert progress.frame == 120
        assert progress.fps == pytest.approx(29.97)
        assert progress.size_kb == 2048
        assert progress.processed_duration == timedelta(seconds=4)
        assert progress.bitrate == pytest.approx(4194.3)

    def test_total_duration_is_placeholder(self):
        ok, progress = is_progress_data(FULL_LINE)
        assert ok
        assert progress.total_duration == timedelta(0)

    @pytest.mark.parametrize("line", [
        "",
        None,
        "Press [q] to stop, [?] for help",
        "  Duration: 00:01:30.50, start: 0.000000, bitrate: 5000 kb/s",
        "frame=  120 fps= 29.97 size=    2048kB bitrate=4194.3kbits/s",
    ])
    def test_lines_without_time_are_not_progress(self, line):
        assert is_progress_data(line) == (False, None)


class TestOptionalFields:
    """Missing optional tokens become None without failing extraction."""

    def test_time_only(self):
        ok, progress = is_progress_data("time=00:00:01.50")

        assert ok
        assert progress.processed_duration == timedelta(seconds=1.5)
        assert progress.frame is None
        assert progress.fps is None
        assert progress.size_kb is None
        assert progress.bitrate is None

    @pytest.mark.parametrize("line,present", [
        ("frame=10 time=00:00:01.00", {"frame": 10}),
        ("fps=25 time=00:00:01.00", {"fps": 25.0}),
        ("size=   512kB time=00:00:01.00", {"size_kb": 512}),
        ("time=00:00:01.00 bitrate= 800.5kbits/s", {"bitrate": 800.5}),
        ("frame=10 fps=25 time=00:00:01.00", {"frame": 10, "fps": 25.0}),
    ])
    def test_any_combination(self, line, present):
        ok, progress = is_progress_data(line)

        assert ok
        for field in ("frame", "fps", "size_kb", "bitrate"):
            assert getattr(progress, field) == present.get(field)

    def test_not_available_values(self):
        line = "frame=    0 fps=0.0 q=0.0 size=N/A time=N/A bitrate=N/A speed=N/A"
        ok, progress = is_progress_data(line)

        assert ok
        assert progress.processed_duration == timedelta(0)
        assert progress.frame == 0
        assert progress.fps == 0.0
        assert progress.size_kb is None
        assert progress.bitrate is None

    def test_first_progress_line_with_zero_bitrate(self):
        line = "frame=   24 fps= 12 q=28.0 size=       0kB time=00:00:01.00 bitrate=   0.0kbits/s"
        ok, progress = is_progress_data(line)

        assert ok
        assert progress.frame == 24
        assert progress.fps == 12.0
        assert progress.size_kb == 0
        assert progress.bitrate == 0.0

    def test_hours_beyond_a_day(self):
        ok, progress = is_progress_data("frame=1 time=26:00:00.00")
        assert ok
        assert progress.processed_duration == timedelta(hours=26)


class TestHostNumberLocale:
    """ffmpeg prints period-decimal numbers whatever the host locale is."""

    @pytest.fixture
    def comma_decimal_host(self, monkeypatch):
        monkeypatch.setattr(
            "ffparse.settings.locale.localeconv",
            lambda: {"decimal_point": ",", "thousands_sep": "."},
        )
        monkeypatch.setenv("FFPARSE_NUMBER_LOCALE", "host")

    def test_progress_fields_stay_period_decimal(self, comma_decimal_host):
        ok, progress = is_progress_data(FULL_LINE)

        assert ok
        assert progress.frame == 120
        assert progress.fps == pytest.approx(29.97)
        assert progress.size_kb == 2048
        assert progress.bitrate == pytest.approx(4194.3)

    def test_final_size_stays_period_decimal(self, comma_decimal_host):
        line = "frame=  250 fps= 50 q=-1.0 Lsize=    2048kB time=00:00:10.00 bitrate=1677.7kbits/s"
        assert is_conversion_finished(line) == (True, 2048)


class TestRecordImmutability:

    def test_progress_record_is_frozen(self):
        _, progress = is_progress_data(FULL_LINE)
        with pytest.raises(ValidationError):
            progress.frame = 1

    def test_with_total_duration_copies(self):
        _, progress = is_progress_data(FULL_LINE)
        filled = progress.with_total_duration(timedelta(seconds=10))

        assert filled.total_duration == timedelta(seconds=10)
        assert progress.total_duration == timedelta(0)
        assert filled.frame == progress.frame


class TestConversionFinished:
    """The final Lsize= line."""

    def test_final_line(self):
        line = "frame=  250 fps= 50 q=-1.0 Lsize=    2048kB time=00:00:10.00 bitrate=1677.7kbits/s"
        assert is_conversion_finished(line) == (True, 2048)

    def test_final_line_is_also_progress(self):
        line = "frame=  250 fps= 50 q=-1.0 Lsize=    2048kB time=00:00:10.00 bitrate=1677.7kbits/s"
        ok, progress = is_progress_data(line)
        assert ok
        assert progress.size_kb == 2048

    def test_running_line_is_not_final(self):
        assert is_conversion_finished(FULL_LINE) == (False, None)
