"""Probe result types."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class VideoStreamInfo:
    """Attributes of the primary video stream."""

    codec: str | None
    width: int | None
    height: int | None
    frame_rate: float | None
    """Frames per second, computed exactly from the engine's rational."""
    pixel_format: str | None


@dataclass(frozen=True)
class AudioStreamInfo:
    """Attributes of the primary audio stream."""

    codec: str | None
    sample_rate: int | None
    channels: int | None


@dataclass(frozen=True)
class ProbeResult:
    """Normalized media metadata for one file.

    Recomputed on every request and never cached. A missing stream is
    represented by None, never by a zero-valued descriptor.
    """

    path: Path
    duration: float | None
    size: int | None
    bit_rate: int | None
    format_name: str | None
    video: VideoStreamInfo | None = None
    audio: AudioStreamInfo | None = None
