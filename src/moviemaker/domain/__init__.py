"""Domain types for Movie Maker."""

from moviemaker.domain.enums import (
    QUALITY_BITRATES,
    MediaKind,
    Operation,
    QualityTier,
)
from moviemaker.domain.models import (
    Asset,
    OutputArtifact,
    media_kind_for,
    operation_for,
)

__all__ = [
    "QUALITY_BITRATES",
    "Asset",
    "MediaKind",
    "Operation",
    "OutputArtifact",
    "QualityTier",
    "media_kind_for",
    "operation_for",
]
