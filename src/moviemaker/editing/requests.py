"""Typed edit requests.

Each request variant maps one-to-one to an HTTP edit route and to one
Operation. Requests name their sources by stored filename; resolution to
paths happens in the orchestrator.
"""

from dataclasses import dataclass
from typing import ClassVar, Union

from moviemaker.domain.enums import Operation, QualityTier


@dataclass(frozen=True)
class TrimRequest:
    """Cut the [start, end) window out of one source, in seconds."""

    operation: ClassVar[Operation] = Operation.TRIM

    source: str
    start: float
    end: float

    @property
    def source_names(self) -> tuple[str, ...]:
        return (self.source,)


@dataclass(frozen=True)
class ConcatRequest:
    """Append two or more sources in list order."""

    operation: ClassVar[Operation] = Operation.CONCAT

    sources: tuple[str, ...]

    @property
    def source_names(self) -> tuple[str, ...]:
        return tuple(self.sources)


@dataclass(frozen=True)
class ConvertRequest:
    """Re-encode one source into another container.

    A quality of None keeps the engine's default bitrates.
    """

    operation: ClassVar[Operation] = Operation.CONVERT

    source: str
    format: str
    quality: QualityTier | None = None

    @property
    def source_names(self) -> tuple[str, ...]:
        return (self.source,)


@dataclass(frozen=True)
class FilterRequest:
    """Apply an equalizer filter; omitted parameters stay unchanged."""

    operation: ClassVar[Operation] = Operation.FILTER

    source: str
    brightness: float | None = None
    contrast: float | None = None
    saturation: float | None = None

    @property
    def source_names(self) -> tuple[str, ...]:
        return (self.source,)


EditRequest = Union[TrimRequest, ConcatRequest, ConvertRequest, FilterRequest]
