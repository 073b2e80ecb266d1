"""Typed access to MOVIEMAKER_* environment variables.

EnvReader takes the environment as a mapping so tests can pass a plain
dict instead of touching os.environ. Unset and empty variables both fall
back to the caller's default.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})

T = TypeVar("T")


class EnvReader:
    """Read environment variables with type conversion.

    Example:
        reader = EnvReader({"MOVIEMAKER_MAX_WORKERS": "4"})
        reader.get_int("MOVIEMAKER_MAX_WORKERS", 2)  # Returns 4
    """

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env: Mapping[str, str] = env if env is not None else os.environ

    def _raw(self, var: str) -> str | None:
        value = self._env.get(var)
        return value if value else None

    def _convert(
        self, var: str, convert: Callable[[str], T], default: T | None
    ) -> T | None:
        value = self._raw(var)
        if value is None:
            return default
        try:
            return convert(value)
        except ValueError:
            logger.warning(
                "Ignoring %s=%r: expected %s", var, value, convert.__name__
            )
            return default

    def get_str(self, var: str, default: str | None = None) -> str | None:
        value = self._raw(var)
        return default if value is None else value

    def get_int(self, var: str, default: int | None = None) -> int | None:
        """Parse an integer; unparsable values log a warning and give default."""
        return self._convert(var, int, default)

    def get_float(self, var: str, default: float | None = None) -> float | None:
        """Parse a float; unparsable values log a warning and give default."""
        return self._convert(var, float, default)

    def get_bool(self, var: str, default: bool | None = None) -> bool | None:
        """Parse a flag. true/1/yes/on are true, anything else is false."""
        value = self._raw(var)
        if value is None:
            return default
        return value.strip().lower() in _TRUE_VALUES

    def get_path(
        self, var: str, must_exist: bool = False, default: Path | None = None
    ) -> Path | None:
        """Parse a path, expanding ``~``.

        With must_exist, a path that does not exist logs a warning and
        gives default.
        """
        value = self._raw(var)
        if value is None:
            return default
        path = Path(value).expanduser()
        if must_exist and not path.exists():
            logger.warning("%s points to a missing path: %s", var, value)
            return default
        return path
