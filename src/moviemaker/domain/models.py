"""Domain models for stored files.

Asset and OutputArtifact are immutable snapshots built from a directory
entry. The directory itself is the index, so these records are recomputed
on every listing rather than cached.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from moviemaker.core.datetime_utils import to_iso_utc
from moviemaker.domain.enums import MediaKind, Operation

VIDEO_EXTENSIONS = frozenset({"mp4", "avi", "mov", "wmv", "mkv", "webm", "flv", "m4v"})
IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif"})


def media_kind_for(filename: str) -> MediaKind:
    """Infer the media kind from a filename's extension."""
    ext = Path(filename).suffix.lower().lstrip(".")
    if ext in VIDEO_EXTENSIONS:
        return MediaKind.VIDEO
    if ext in IMAGE_EXTENSIONS:
        return MediaKind.IMAGE
    return MediaKind.UNKNOWN


def operation_for(filename: str) -> Operation | None:
    """Recover the producing operation from an output filename prefix."""
    tag, sep, _ = filename.partition("-")
    if not sep:
        return None
    return Operation.from_tag(tag)


@dataclass(frozen=True)
class Asset:
    """A stored source file available for editing."""

    filename: str
    path: Path
    size: int
    created_at: datetime
    media_kind: MediaKind
    original_name: str | None = None
    """Client-supplied name; only known when the asset was just registered."""

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape used by the HTTP API."""
        data: dict[str, Any] = {
            "filename": self.filename,
            "size": self.size,
            "uploadedAt": to_iso_utc(self.created_at),
            "mediaKind": self.media_kind.value,
        }
        if self.original_name is not None:
            data["originalname"] = self.original_name
        return data


@dataclass(frozen=True)
class OutputArtifact:
    """A file produced by a successfully completed job."""

    filename: str
    path: Path
    size: int
    created_at: datetime
    operation: Operation | None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape used by the HTTP API."""
        return {
            "filename": self.filename,
            "size": self.size,
            "createdAt": to_iso_utc(self.created_at),
            "operation": self.operation.value if self.operation else None,
        }
