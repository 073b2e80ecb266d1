"""Formatters for probe results.

Shared by the CLI and the HTTP API so both render the same fields.
"""

import json
from typing import Any

from moviemaker.introspector.types import ProbeResult


def probe_result_to_dict(result: ProbeResult) -> dict[str, Any]:
    """Convert a ProbeResult to the JSON shape used by the HTTP API."""
    video = None
    if result.video is not None:
        video = {
            "codec": result.video.codec,
            "width": result.video.width,
            "height": result.video.height,
            "frameRate": result.video.frame_rate,
            "pixelFormat": result.video.pixel_format,
        }
    audio = None
    if result.audio is not None:
        audio = {
            "codec": result.audio.codec,
            "sampleRate": result.audio.sample_rate,
            "channels": result.audio.channels,
        }
    return {
        "duration": result.duration,
        "size": result.size,
        "bitRate": result.bit_rate,
        "format": result.format_name,
        "video": video,
        "audio": audio,
    }


def format_json(result: ProbeResult) -> str:
    """Format a probe result as indented JSON."""
    return json.dumps(probe_result_to_dict(result), indent=2)


def format_fps(frame_rate: float | None) -> str:
    """Render a frame rate compactly (e.g. 25 or 29.97)."""
    if frame_rate is None:
        return "unknown"
    if frame_rate == int(frame_rate):
        return str(int(frame_rate))
    return f"{frame_rate:.3f}".rstrip("0").rstrip(".")


def format_human(result: ProbeResult) -> str:
    """Format a probe result for terminal output."""
    lines = [f"File: {result.path}"]
    if result.format_name:
        lines.append(f"Container: {result.format_name.split(',')[0]}")
    if result.duration is not None:
        lines.append(f"Duration: {result.duration:.3f}s")
    if result.bit_rate is not None:
        lines.append(f"Bitrate: {result.bit_rate // 1000} kb/s")
    lines.append("")

    if result.video is not None:
        v = result.video
        size = f"{v.width}x{v.height}" if v.width and v.height else "unknown size"
        lines.append(
            f"Video: {v.codec or 'unknown'} {size} "
            f"@ {format_fps(v.frame_rate)} fps ({v.pixel_format or '?'})"
        )
    else:
        lines.append("Video: none")

    if result.audio is not None:
        a = result.audio
        rate = f"{a.sample_rate} Hz" if a.sample_rate else "unknown rate"
        channels = f"{a.channels} ch" if a.channels else "? ch"
        lines.append(f"Audio: {a.codec or 'unknown'} {rate} {channels}")
    else:
        lines.append("Audio: none")

    return "\n".join(lines)
