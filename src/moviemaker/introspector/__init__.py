"""Introspector module for Movie Maker.

This module provides media probing capabilities:

- MediaProbe: Protocol defining the probe interface
- FFprobeProbe: Production implementation using ffprobe

Formatters for probe results:
- format_human: Human-readable output
- format_json: JSON output
- probe_result_to_dict: API dictionary shape
"""

from moviemaker.introspector.ffprobe import FFprobeProbe
from moviemaker.introspector.formatters import (
    format_human,
    format_json,
    probe_result_to_dict,
)
from moviemaker.introspector.interface import MediaProbe
from moviemaker.introspector.parsers import parse_ffprobe_output, parse_frame_rate
from moviemaker.introspector.types import (
    AudioStreamInfo,
    ProbeResult,
    VideoStreamInfo,
)

__all__ = [
    "MediaProbe",
    "FFprobeProbe",
    "ProbeResult",
    "VideoStreamInfo",
    "AudioStreamInfo",
    "parse_ffprobe_output",
    "parse_frame_rate",
    # Formatters
    "format_human",
    "format_json",
    "probe_result_to_dict",
]
