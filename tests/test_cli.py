"""
Tests for the ffparse CLI.

The CLI reads captured stderr text; it is exercised here with temp files.
"""

import json

import pytest

from ffparse.cli import EXIT_INPUT_ERROR, EXIT_OK, main


@pytest.fixture
def log_file(tmp_path, transcode_log):
    path = tmp_path / "ffmpeg.log"
    # Progress lines separated by carriage returns, as ffmpeg writes them
    header = "\n".join(transcode_log[:-2])
    progress = "\r".join(transcode_log[-2:])
    path.write_text(header + "\n" + progress + "\n", encoding="utf-8")
    return path


class TestParseCommand:

    def test_one_event_per_recognised_line(self, log_file, capsys):
        assert main(["parse", str(log_file)]) == EXIT_OK

        events = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
        kinds = [event["kind"] for event in events]

        assert kinds == [
            "media_info",
            "video",
            "audio",
            "video",
            "audio",
            "progress",
            "progress",
            "finished",
        ]

    def test_event_fields(self, log_file, capsys):
        main(["parse", str(log_file)])
        events = [json.loads(line) for line in capsys.readouterr().out.splitlines()]

        assert events[0] == {"kind": "media_info", "bitrate": 5000.0, "duration": 10.0}
        assert events[1]["color_model"] == "yuv420p(tv, bt709, progressive)"
        assert events[4]["sample_rate"] == "44100 Hz"
        assert events[5]["processed_duration"] == 5.0
        assert events[5]["size_kb"] == 1024
        assert events[-1] == {"kind": "finished", "size_kb": 2048}


class TestSummaryCommand:

    def test_summary(self, log_file, capsys):
        assert main(["summary", str(log_file)]) == EXIT_OK

        summary = json.loads(capsys.readouterr().out)
        assert summary["meta_data"]["video_data"]["frame_size"] == "1920x1080"
        assert summary["meta_data"]["audio_data"]["bitrate_kbs"] == 192
        assert summary["meta_data"]["file_info"]["duration"] == 10.0
        assert summary["progress"]["completed"] is True
        assert summary["progress"]["final_size_kb"] == 2048

    def test_summary_display(self, log_file, capsys):
        main(["summary", str(log_file)])

        summary = json.loads(capsys.readouterr().out)
        assert summary["display"] == {"eta": "0:00", "size": "2.0 MB"}

    def test_empty_input(self, tmp_path, capsys):
        empty = tmp_path / "empty.log"
        empty.write_text("", encoding="utf-8")

        assert main(["summary", str(empty)]) == EXIT_OK

        summary = json.loads(capsys.readouterr().out)
        assert summary["meta_data"] is None
        assert summary["progress"]["updates"] == 0
        assert summary["display"] == {"eta": "--:--", "size": "Unknown"}


class TestInputErrors:

    def test_missing_file(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["parse", str(tmp_path / "missing.log")])

        assert exc_info.value.code == EXIT_INPUT_ERROR
        assert "not found" in capsys.readouterr().err

    def test_command_required(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2
