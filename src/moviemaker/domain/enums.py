"""Domain enums for Movie Maker.

Enums shared by the stores, the command builder and the HTTP layer.
"""

from enum import Enum


class MediaKind(Enum):
    """Coarse media type inferred from a file extension."""

    VIDEO = "video"
    IMAGE = "image"
    UNKNOWN = "unknown"


class Operation(Enum):
    """Editing operation that produced an output artifact."""

    TRIM = "trim"
    CONCAT = "concat"
    CONVERT = "convert"
    FILTER = "filter"

    @property
    def tag(self) -> str:
        """Filename prefix used for outputs of this operation."""
        return _OPERATION_TAGS[self]

    @classmethod
    def from_tag(cls, tag: str) -> "Operation | None":
        """Map a filename prefix back to its operation, or None if unknown."""
        for operation, operation_tag in _OPERATION_TAGS.items():
            if operation_tag == tag:
                return operation
        return None


_OPERATION_TAGS: dict[Operation, str] = {
    Operation.TRIM: "trimmed",
    Operation.CONCAT: "concat",
    Operation.CONVERT: "converted",
    Operation.FILTER: "filtered",
}


class QualityTier(Enum):
    """Convert quality presets."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# (video bitrate, audio bitrate) per tier
QUALITY_BITRATES: dict[QualityTier, tuple[str, str]] = {
    QualityTier.LOW: ("500k", "64k"),
    QualityTier.MEDIUM: ("1000k", "128k"),
    QualityTier.HIGH: ("2000k", "128k"),
}
