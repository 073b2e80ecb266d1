"""Request body models for the edit endpoints.

Bodies use the camelCase field names the web client sends. Each model
converts itself to the matching EditRequest; range and consistency checks
beyond basic typing are left to the command builder so that HTTP and CLI
callers get the same errors.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from moviemaker.domain.enums import QualityTier
from moviemaker.editing.requests import (
    ConcatRequest,
    ConvertRequest,
    FilterRequest,
    TrimRequest,
)
from moviemaker.exceptions import RequestValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class _Body(BaseModel):
    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        allow_inf_nan=False,
    )


class TrimBody(_Body):
    """Body of POST /api/video/trim."""

    filename: str = Field(min_length=1)
    start_time: float = Field(alias="startTime")
    end_time: float = Field(alias="endTime")

    def to_request(self) -> TrimRequest:
        return TrimRequest(
            source=self.filename, start=self.start_time, end=self.end_time
        )


class ConcatBody(_Body):
    """Body of POST /api/video/concat."""

    filenames: list[str]

    def to_request(self) -> ConcatRequest:
        return ConcatRequest(sources=tuple(self.filenames))


class ConvertBody(_Body):
    """Body of POST /api/video/convert."""

    filename: str = Field(min_length=1)
    format: str = Field(min_length=1)
    quality: QualityTier | None = None

    @field_validator("format")
    @classmethod
    def normalize_format(cls, v: str) -> str:
        """Accept "MP4" or ".mp4" as well as "mp4"."""
        return v.strip().lower().lstrip(".")

    @field_validator("quality", mode="before")
    @classmethod
    def empty_quality_is_none(cls, v: Any) -> Any:
        """The web client sends "" when no quality is selected."""
        if isinstance(v, str):
            v = v.strip().lower()
            return v or None
        return v

    def to_request(self) -> ConvertRequest:
        return ConvertRequest(
            source=self.filename, format=self.format, quality=self.quality
        )


class FilterBody(_Body):
    """Body of POST /api/video/filter."""

    filename: str = Field(min_length=1)
    brightness: float | None = None
    contrast: float | None = None
    saturation: float | None = None

    def to_request(self) -> FilterRequest:
        return FilterRequest(
            source=self.filename,
            brightness=self.brightness,
            contrast=self.contrast,
            saturation=self.saturation,
        )


EditBody = TrimBody | ConcatBody | ConvertBody | FilterBody


def parse_body(model: type[ModelT], data: Any) -> ModelT:
    """Validate a decoded JSON body against a model.

    Raises:
        RequestValidationError: With one "field: message" entry per problem
            in its ``errors`` attribute.
    """
    if not isinstance(data, dict):
        raise RequestValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}"
            for err in e.errors()
        ]
        exc = RequestValidationError(f"Invalid request: {'; '.join(errors)}")
        exc.errors = errors
        raise exc from e
