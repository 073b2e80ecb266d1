"""Invocation plan types for the media engine."""

from dataclasses import dataclass
from pathlib import Path

from moviemaker.domain.enums import Operation


@dataclass(frozen=True)
class InvocationPlan:
    """Fully resolved, engine-agnostic description of one engine call.

    Plans are immutable and carry absolute input paths plus the final
    output name. Where the engine actually writes (a temp path) is decided
    by the job executor when the plan runs.
    """

    operation: Operation
    inputs: tuple[Path, ...]
    output_name: str
    output_path: Path

    seek: float | None = None
    """Start offset in seconds, applied before the input."""

    duration: float | None = None
    """Length of the time window in seconds."""

    filter_graph: str | None = None
    """Video filter expression, e.g. ``eq=brightness=0.1``."""

    muxer: str | None = None
    """Forced output container (engine format name)."""

    video_bitrate: str | None = None
    audio_bitrate: str | None = None

    stream_copy: bool = False
    """Copy all streams without re-encoding."""

    @property
    def is_concat(self) -> bool:
        return self.operation is Operation.CONCAT

    def describe(self) -> str:
        """Short human-readable summary for logs."""
        names = ", ".join(p.name for p in self.inputs)
        return f"{self.operation.value} [{names}] -> {self.output_name}"
