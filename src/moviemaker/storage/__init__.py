"""Directory-backed storage for uploaded assets and job outputs."""

from moviemaker.storage.naming import (
    TEMP_PREFIX,
    generate_token,
    upload_filename,
    validate_name,
)
from moviemaker.storage.store import AssetStore, DirectoryStore, OutputStore

__all__ = [
    "TEMP_PREFIX",
    "AssetStore",
    "DirectoryStore",
    "OutputStore",
    "generate_token",
    "upload_filename",
    "validate_name",
]
