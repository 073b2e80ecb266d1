"""Unit tests for introspector/parsers.py."""

from pathlib import Path

import pytest

from moviemaker.exceptions import EngineError
from moviemaker.introspector.parsers import (
    parse_audio_stream,
    parse_ffprobe_output,
    parse_float,
    parse_frame_rate,
    parse_int,
    parse_video_stream,
)

SAMPLE = {
    "streams": [
        {
            "index": 0,
            "codec_type": "video",
            "codec_name": "h264",
            "width": 1920,
            "height": 1080,
            "r_frame_rate": "30000/1001",
            "pix_fmt": "yuv420p",
        },
        {
            "index": 1,
            "codec_type": "audio",
            "codec_name": "aac",
            "sample_rate": "48000",
            "channels": 2,
        },
    ],
    "format": {
        "format_name": "mov,mp4,m4a,3gp,3g2,mj2",
        "duration": "12.345000",
        "size": "1048576",
        "bit_rate": "679000",
    },
}


class TestParseFrameRate:
    """Tests for parse_frame_rate()."""

    def test_ntsc_rational(self) -> None:
        assert parse_frame_rate("30000/1001") == pytest.approx(29.97002997)

    def test_integer_rate(self) -> None:
        assert parse_frame_rate("25") == 25.0

    def test_simple_fraction(self) -> None:
        assert parse_frame_rate("25/1") == 25.0

    @pytest.mark.parametrize(
        "value", [None, "", "0/0", "0/1", "-25/1", "abc", "1e400"]
    )
    def test_unusable_rates(self, value) -> None:
        assert parse_frame_rate(value) is None

    def test_does_not_evaluate_expressions(self) -> None:
        """Text that would be code is rejected, not evaluated."""
        assert parse_frame_rate("__import__('os').getpid()") is None
        assert parse_frame_rate("2**10") is None


class TestParseNumbers:
    """Tests for parse_float() and parse_int()."""

    def test_parse_float(self) -> None:
        assert parse_float("12.5") == 12.5
        assert parse_float(None) is None
        assert parse_float("N/A") is None
        assert parse_float("nan") is None
        assert parse_float("-1") is None

    def test_parse_int(self) -> None:
        assert parse_int("48000") == 48000
        assert parse_int(2) == 2
        assert parse_int(True) is None
        assert parse_int("x") is None
        assert parse_int(-3) is None


class TestParseStreams:
    """Tests for stream parsers."""

    def test_video_stream(self) -> None:
        video = parse_video_stream(SAMPLE["streams"][0])
        assert video.codec == "h264"
        assert (video.width, video.height) == (1920, 1080)
        assert video.pixel_format == "yuv420p"

    def test_video_falls_back_to_avg_rate(self) -> None:
        video = parse_video_stream({"codec_type": "video", "avg_frame_rate": "24/1"})
        assert video.frame_rate == 24.0

    def test_audio_stream(self) -> None:
        audio = parse_audio_stream(SAMPLE["streams"][1])
        assert audio.codec == "aac"
        assert audio.sample_rate == 48000
        assert audio.channels == 2


class TestParseFfprobeOutput:
    """Tests for parse_ffprobe_output()."""

    def test_full_document(self) -> None:
        result = parse_ffprobe_output(Path("/x/a.mp4"), SAMPLE)

        assert result.path == Path("/x/a.mp4")
        assert result.duration == pytest.approx(12.345)
        assert result.size == 1048576
        assert result.bit_rate == 679000
        assert result.format_name.startswith("mov")
        assert result.video is not None
        assert result.audio is not None

    def test_image_has_no_audio(self) -> None:
        data = {
            "streams": [
                {"codec_type": "video", "codec_name": "png", "width": 10, "height": 10}
            ],
            "format": {"format_name": "png_pipe"},
        }
        result = parse_ffprobe_output(Path("a.png"), data)

        assert result.audio is None
        assert result.duration is None
        assert result.video.codec == "png"

    def test_skips_cover_art(self) -> None:
        data = {
            "streams": [
                {"codec_type": "audio", "codec_name": "mp3"},
                {
                    "codec_type": "video",
                    "codec_name": "mjpeg",
                    "disposition": {"attached_pic": 1},
                },
            ],
            "format": {"format_name": "mp3", "duration": "3.0"},
        }
        result = parse_ffprobe_output(Path("a.mp3"), data)

        assert result.video is None
        assert result.audio.codec == "mp3"

    @pytest.mark.parametrize("data", [{}, {"streams": []}, [], None, {"format": "x"}])
    def test_missing_format_raises(self, data) -> None:
        with pytest.raises(EngineError, match="format"):
            parse_ffprobe_output(Path("a.mp4"), data)
