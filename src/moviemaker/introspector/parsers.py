"""Pure parsing functions for ffprobe JSON output.

These functions transform ffprobe JSON data into ProbeResult objects.
All functions are pure (no I/O, no side effects) for easy testing.

Engine output is untrusted text. Numbers are parsed with int(), float()
and Fraction() only, never evaluated as expressions.
"""

import logging
import math
from fractions import Fraction
from pathlib import Path
from typing import Any

from moviemaker.exceptions import EngineError
from moviemaker.introspector.types import (
    AudioStreamInfo,
    ProbeResult,
    VideoStreamInfo,
)

logger = logging.getLogger(__name__)


def parse_frame_rate(value: str | None) -> float | None:
    """Parse an ffprobe frame rate such as "30000/1001" or "25".

    The rational is divided exactly and only then converted to float.

    Returns:
        Frames per second, or None for missing, malformed, zero or
        undefined ("0/0") rates.
    """
    if not value:
        return None
    try:
        rate = Fraction(value.strip())
    except (ValueError, ZeroDivisionError):
        logger.debug("Unparsable frame rate: %r", value)
        return None
    if rate <= 0:
        return None
    try:
        return float(rate)
    except OverflowError:
        logger.debug("Frame rate out of range: %r", value)
        return None


def parse_float(value: Any) -> float | None:
    """Parse a finite non-negative float from an ffprobe field."""
    if value is None:
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result) or result < 0:
        return None
    return result


def parse_int(value: Any) -> int | None:
    """Parse a non-negative integer from an ffprobe field."""
    if value is None or isinstance(value, bool):
        return None
    try:
        result = int(value)
    except (TypeError, ValueError):
        return None
    return result if result >= 0 else None


def _first_stream(streams: list[dict], codec_type: str) -> dict | None:
    for stream in streams:
        if stream.get("codec_type") != codec_type:
            continue
        # Cover art is reported as a video stream; it is not a video track
        if codec_type == "video" and stream.get("disposition", {}).get(
            "attached_pic"
        ):
            continue
        return stream
    return None


def parse_video_stream(stream: dict) -> VideoStreamInfo:
    """Parse one ffprobe video stream dict."""
    return VideoStreamInfo(
        codec=stream.get("codec_name"),
        width=parse_int(stream.get("width")),
        height=parse_int(stream.get("height")),
        frame_rate=parse_frame_rate(
            stream.get("r_frame_rate") or stream.get("avg_frame_rate")
        ),
        pixel_format=stream.get("pix_fmt"),
    )


def parse_audio_stream(stream: dict) -> AudioStreamInfo:
    """Parse one ffprobe audio stream dict."""
    return AudioStreamInfo(
        codec=stream.get("codec_name"),
        sample_rate=parse_int(stream.get("sample_rate")),
        channels=parse_int(stream.get("channels")),
    )


def parse_ffprobe_output(path: Path, data: Any) -> ProbeResult:
    """Parse ffprobe ``-show_format -show_streams`` JSON into a ProbeResult.

    Args:
        path: Probed file path.
        data: Decoded JSON document.

    Returns:
        ProbeResult with video/audio set to None when the stream is absent.

    Raises:
        EngineError: If the document lacks the format section.
    """
    if not isinstance(data, dict) or not isinstance(data.get("format"), dict):
        raise EngineError(
            f"Missing 'format' in ffprobe output for {path.name}. "
            "File may be corrupted or not a valid media file."
        )

    fmt = data["format"]
    streams = [s for s in data.get("streams") or [] if isinstance(s, dict)]

    video = _first_stream(streams, "video")
    audio = _first_stream(streams, "audio")

    return ProbeResult(
        path=path,
        duration=parse_float(fmt.get("duration")),
        size=parse_int(fmt.get("size")),
        bit_rate=parse_int(fmt.get("bit_rate")),
        format_name=fmt.get("format_name"),
        video=parse_video_stream(video) if video else None,
        audio=parse_audio_stream(audio) if audio else None,
    )
