"""Core utilities shared across Movie Maker modules."""

from moviemaker.core.datetime_utils import to_iso_utc
from moviemaker.core.subprocess_utils import run_command, tail_text

__all__ = [
    "run_command",
    "tail_text",
    "to_iso_utc",
]
