"""MediaProbe interface for media metadata extraction."""

from pathlib import Path
from typing import Protocol

from moviemaker.introspector.types import ProbeResult


class MediaProbe(Protocol):
    """Protocol for probe implementations.

    The orchestrator depends on this protocol, so tests can substitute a
    fake that never spawns the engine.
    """

    def probe(self, path: Path) -> ProbeResult:
        """Extract metadata from a media file.

        Raises:
            NotFoundError: If the file does not exist.
            EngineError: If the engine fails or its output is unusable.
        """
        ...
