"""Directory-backed stores for uploaded assets and job outputs.

The directory listing is the index. Nothing is cached between calls, so a
listing always reflects what is on disk at that moment. The only mutations
are "create a new uniquely named file" and "delete by exact name", which
keeps concurrent callers safe without locking.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, TypeVar

from moviemaker.core.datetime_utils import from_timestamp
from moviemaker.domain.models import (
    Asset,
    OutputArtifact,
    media_kind_for,
    operation_for,
)
from moviemaker.exceptions import NotFoundError
from moviemaker.storage.naming import temp_name, upload_filename, validate_name

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", Asset, OutputArtifact)

# Retries when an exclusive create hits an existing name
_MAX_NAME_ATTEMPTS = 3


class DirectoryStore(ABC, Generic[RecordT]):
    """List, resolve and delete regular files in a single directory."""

    kind: str = "file"

    def __init__(self, root: Path, *, create: bool = True) -> None:
        self._root = Path(root)
        if create:
            self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        """Directory backing this store."""
        return self._root

    @abstractmethod
    def _make_record(self, path: Path, stat: os.stat_result) -> RecordT:
        """Build the record for one directory entry."""

    def list(self) -> list[RecordT]:
        """Re-scan the directory and return a record per visible file.

        Hidden entries and anything that is not a regular file are skipped.
        Files that vanish between the scan and the stat are skipped too.
        """
        records: list[RecordT] = []
        try:
            entries = sorted(os.scandir(self._root), key=lambda e: e.name)
        except FileNotFoundError:
            logger.warning("%s directory missing: %s", self.kind, self._root)
            return records

        for entry in entries:
            if entry.name.startswith("."):
                continue
            try:
                if not entry.is_file(follow_symlinks=False):
                    continue
                stat = entry.stat(follow_symlinks=False)
            except FileNotFoundError:
                continue
            records.append(self._make_record(Path(entry.path), stat))
        return records

    def resolve(self, name: str) -> Path:
        """Resolve a name to the path of an existing file.

        Raises:
            InvalidNameError: If the name is malformed. Checked before any
                filesystem access.
            NotFoundError: If no such file exists.
        """
        validate_name(name)
        path = self._root / name
        if not path.is_file():
            raise NotFoundError(self.kind, name)
        return path

    def get(self, name: str) -> RecordT:
        """Return the record for one existing file."""
        path = self.resolve(name)
        try:
            stat = path.stat()
        except FileNotFoundError:
            raise NotFoundError(self.kind, name) from None
        return self._make_record(path, stat)

    def delete(self, name: str) -> None:
        """Delete a file by exact name.

        Raises:
            InvalidNameError: If the name is malformed.
            NotFoundError: If no such file exists, including when a
                concurrent delete won the race.
        """
        path = self.resolve(name)
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFoundError(self.kind, name) from None
        logger.info("Deleted %s %s", self.kind, name)


class AssetStore(DirectoryStore[Asset]):
    """Store of uploaded source files."""

    kind = "asset"

    def _make_record(self, path: Path, stat: os.stat_result) -> Asset:
        return Asset(
            filename=path.name,
            path=path,
            size=stat.st_size,
            created_at=from_timestamp(stat.st_mtime),
            media_kind=media_kind_for(path.name),
        )

    def register(self, original_name: str, data: bytes) -> Asset:
        """Store uploaded bytes under a freshly generated name.

        The bytes are written to a hidden temp file first and renamed into
        place, so a partially written upload is never listed.

        Args:
            original_name: Client-supplied filename; only its extension is
                used for the stored name.
            data: File contents.

        Returns:
            The new Asset, carrying original_name.
        """
        for _ in range(_MAX_NAME_ATTEMPTS):
            name = upload_filename(original_name)
            final_path = self._root / name
            tmp_path = self._root / temp_name(name)
            try:
                with tmp_path.open("xb") as f:
                    f.write(data)
            except FileExistsError:
                continue
            try:
                if final_path.exists():
                    continue
                os.rename(tmp_path, final_path)
            finally:
                if tmp_path.exists():
                    tmp_path.unlink()
            break
        else:
            raise FileExistsError(
                f"Could not allocate a unique name for {original_name!r}"
            )

        stat = final_path.stat()
        logger.info(
            "Registered asset %s (%s, %d bytes)", name, original_name, stat.st_size
        )
        return Asset(
            filename=name,
            path=final_path,
            size=stat.st_size,
            created_at=from_timestamp(stat.st_mtime),
            media_kind=media_kind_for(name),
            original_name=original_name,
        )


class OutputStore(DirectoryStore[OutputArtifact]):
    """Store of artifacts produced by completed jobs."""

    kind = "output"

    def _make_record(self, path: Path, stat: os.stat_result) -> OutputArtifact:
        return OutputArtifact(
            filename=path.name,
            path=path,
            size=stat.st_size,
            created_at=from_timestamp(stat.st_mtime),
            operation=operation_for(path.name),
        )

    def path_for(self, name: str) -> Path:
        """Path a new output with this name would occupy."""
        return self._root / validate_name(name)

    def temp_path_for(self, name: str) -> Path:
        """Hidden path a job writes to before its output is adopted."""
        return self._root / temp_name(validate_name(name))

    def adopt(self, temp_path: Path, final_name: str) -> OutputArtifact:
        """Move a finished temp file into place and return its record.

        Raises:
            InvalidNameError: If final_name is malformed.
            FileNotFoundError: If temp_path does not exist.
        """
        final_path = self.path_for(final_name)
        os.replace(temp_path, final_path)
        logger.debug("Adopted %s as %s", temp_path.name, final_name)
        return self.get(final_name)
