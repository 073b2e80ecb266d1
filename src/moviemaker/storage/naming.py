"""Filename generation and validation for stored files.

Generated names must never collide, even when two registrations happen in
the same millisecond from different threads, so every token combines the
wall clock with a per-process counter and random bits.
"""

import itertools
import re
import secrets
import threading
import time
from pathlib import Path

from moviemaker.exceptions import InvalidNameError

# Prefix for in-progress job output; such files never appear in listings.
TEMP_PREFIX = ".moviemaker-tmp-"

_counter = itertools.count()
_counter_lock = threading.Lock()

_EXTENSION_RE = re.compile(r"^\.[a-z0-9]{1,10}$")


def generate_token() -> str:
    """Generate a collision-resistant uniqueness token.

    Format: ``{unix-millis}-{counter-hex}{48 random bits as hex}``.
    """
    with _counter_lock:
        count = next(_counter)
    millis = int(time.time() * 1000)
    return f"{millis}-{count:x}{secrets.token_hex(6)}"


def validate_name(name: str) -> str:
    """Check that a name refers to a single entry inside a store directory.

    Args:
        name: Client-supplied filename.

    Returns:
        The name, unchanged.

    Raises:
        InvalidNameError: If the name is empty, hidden, contains a path
            separator or NUL, or contains a ``..`` segment.
    """
    if not name:
        raise InvalidNameError(name, "name is empty")
    if "\x00" in name:
        raise InvalidNameError(name, "name contains a NUL byte")
    if "/" in name or "\\" in name:
        raise InvalidNameError(name, "name contains a path separator")
    if ".." in name:
        raise InvalidNameError(name, "name contains '..'")
    if name.startswith("."):
        raise InvalidNameError(name, "hidden names are reserved")
    return name


def normalize_extension(original_name: str) -> str:
    """Return the lowercased extension of a client filename, or ''.

    Extensions that are not short and alphanumeric are dropped rather than
    carried into a generated name.
    """
    ext = Path(original_name.replace("\\", "/")).suffix.lower()
    if _EXTENSION_RE.match(ext):
        return ext
    return ""


def upload_filename(original_name: str) -> str:
    """Generate the stored name for an uploaded file."""
    return f"file-{generate_token()}{normalize_extension(original_name)}"


def temp_name(final_name: str) -> str:
    """Name of the hidden temp file a job writes before it is adopted."""
    return f"{TEMP_PREFIX}{final_name}"
