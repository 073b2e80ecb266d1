"""Pure mapping from edit requests to engine invocation plans.

Nothing in this module touches the filesystem or spawns processes. The
orchestrator resolves source names to paths, then build_plan() produces an
InvocationPlan and build_ffmpeg_args() renders it as an argument vector.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from pathlib import Path

from moviemaker.domain.enums import QUALITY_BITRATES, QualityTier
from moviemaker.editing.requests import (
    ConcatRequest,
    ConvertRequest,
    EditRequest,
    FilterRequest,
    TrimRequest,
)
from moviemaker.exceptions import RequestValidationError
from moviemaker.executor.types import InvocationPlan
from moviemaker.storage.naming import generate_token

# Output container -> ffmpeg muxer name
CONTAINER_MUXERS: dict[str, str] = {
    "mp4": "mp4",
    "mov": "mov",
    "avi": "avi",
    "mkv": "matroska",
    "webm": "webm",
    "wmv": "asf",
    "flv": "flv",
    "gif": "gif",
}

SUPPORTED_FORMATS = frozenset(CONTAINER_MUXERS)

BASE_ARGS: tuple[str, ...] = ("-hide_banner", "-nostdin", "-y", "-v", "error")

CONCAT_EXTENSION = "mp4"


def _require_finite(value: float, field: str) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RequestValidationError(f"{field} must be a number")
    if not math.isfinite(value):
        raise RequestValidationError(f"{field} must be a finite number")


def validate_request(request: EditRequest) -> None:
    """Check a request's shape and parameter ranges.

    Trim bounds against the source duration are not checked here; that
    needs a probe and is done by the orchestrator.

    Raises:
        RequestValidationError: If the request is malformed.
    """
    if isinstance(request, TrimRequest):
        _require_finite(request.start, "startTime")
        _require_finite(request.end, "endTime")
        if request.start < 0:
            raise RequestValidationError("startTime must be >= 0")
        if request.end <= request.start:
            raise RequestValidationError("endTime must be greater than startTime")
    elif isinstance(request, ConcatRequest):
        if len(request.sources) < 2:
            raise RequestValidationError(
                "At least 2 files are required for concatenation"
            )
    elif isinstance(request, ConvertRequest):
        if request.format not in SUPPORTED_FORMATS:
            supported = ", ".join(sorted(SUPPORTED_FORMATS))
            raise RequestValidationError(
                f"Unsupported format {request.format!r} (supported: {supported})"
            )
        if request.quality is not None and not isinstance(
            request.quality, QualityTier
        ):
            raise RequestValidationError(f"Unknown quality {request.quality!r}")
    elif isinstance(request, FilterRequest):
        for field in ("brightness", "contrast", "saturation"):
            value = getattr(request, field)
            if value is not None:
                _require_finite(value, field)
        if request.contrast is not None and request.contrast < 0:
            raise RequestValidationError("contrast must be >= 0")
        if request.saturation is not None and request.saturation < 0:
            raise RequestValidationError("saturation must be >= 0")
    else:
        raise RequestValidationError(
            f"Unsupported request type: {type(request).__name__}"
        )


def build_output_name(request: EditRequest, token: str) -> str:
    """Generate the output filename for a request.

    ``{operation-tag}-{token}-{source}`` for single-source operations that
    keep the source container, a fixed extension otherwise.
    """
    tag = request.operation.tag
    if isinstance(request, ConcatRequest):
        return f"{tag}-{token}.{CONCAT_EXTENSION}"
    if isinstance(request, ConvertRequest):
        return f"{tag}-{token}.{request.format}"
    return f"{tag}-{token}-{request.source}"


def format_number(value: float) -> str:
    """Render a filter parameter compactly (``%g``)."""
    return "%g" % value


def format_seconds(value: float) -> str:
    """Render a time offset with millisecond precision."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return text or "0"


def build_filter_graph(
    brightness: float | None = None,
    contrast: float | None = None,
    saturation: float | None = None,
) -> str | None:
    """Build an ``eq`` filter from the parameters that are present.

    Parameters are emitted in the fixed order brightness, contrast,
    saturation. Returns None when all are omitted.
    """
    parts = [
        f"{key}={format_number(value)}"
        for key, value in (
            ("brightness", brightness),
            ("contrast", contrast),
            ("saturation", saturation),
        )
        if value is not None
    ]
    if not parts:
        return None
    return "eq=" + ":".join(parts)


def build_plan(
    request: EditRequest,
    sources: Sequence[Path],
    output_dir: Path,
    token: str | None = None,
) -> InvocationPlan:
    """Map a validated request and its resolved sources to a plan.

    Args:
        request: The edit request.
        sources: Resolved input paths, in the request's source order.
        output_dir: Directory the output will be adopted into.
        token: Uniqueness token; generated when None.

    Raises:
        RequestValidationError: If the request is malformed or the number
            of sources does not match it.
    """
    validate_request(request)
    if len(sources) != len(request.source_names):
        raise RequestValidationError(
            f"Expected {len(request.source_names)} resolved sources, "
            f"got {len(sources)}"
        )

    output_name = build_output_name(request, token or generate_token())
    common = {
        "operation": request.operation,
        "inputs": tuple(sources),
        "output_name": output_name,
        "output_path": output_dir / output_name,
    }

    if isinstance(request, TrimRequest):
        return InvocationPlan(
            **common,
            seek=float(request.start),
            duration=float(request.end - request.start),
        )
    if isinstance(request, ConcatRequest):
        return InvocationPlan(**common, stream_copy=True)
    if isinstance(request, ConvertRequest):
        video_bitrate = audio_bitrate = None
        if request.quality is not None:
            video_bitrate, audio_bitrate = QUALITY_BITRATES[request.quality]
        return InvocationPlan(
            **common,
            muxer=CONTAINER_MUXERS[request.format],
            video_bitrate=video_bitrate,
            audio_bitrate=audio_bitrate,
        )
    # FilterRequest
    graph = build_filter_graph(
        request.brightness, request.contrast, request.saturation
    )
    return InvocationPlan(**common, filter_graph=graph, stream_copy=graph is None)


def build_ffmpeg_args(
    plan: InvocationPlan,
    ffmpeg_path: Path | str,
    output_path: Path | None = None,
    concat_list: Path | None = None,
) -> list[str]:
    """Render a plan as an ffmpeg argument vector.

    Args:
        plan: The plan to render.
        ffmpeg_path: ffmpeg executable.
        output_path: Where ffmpeg writes; defaults to plan.output_path.
        concat_list: Concat demuxer list file, required for concat plans.

    Raises:
        ValueError: If a concat plan is rendered without a list file.
    """
    target = output_path or plan.output_path
    args: list[str] = [str(ffmpeg_path), *BASE_ARGS]

    if plan.is_concat:
        if concat_list is None:
            raise ValueError("Concat plans require a concat list file")
        args += ["-f", "concat", "-safe", "0", "-i", str(concat_list)]
    else:
        if plan.seek is not None:
            args += ["-ss", format_seconds(plan.seek)]
        for path in plan.inputs:
            args += ["-i", str(path)]

    if plan.duration is not None:
        args += ["-t", format_seconds(plan.duration)]
    if plan.filter_graph:
        args += ["-vf", plan.filter_graph, "-c:a", "copy"]
    if plan.stream_copy:
        args += ["-c", "copy"]
    if plan.video_bitrate:
        args += ["-b:v", plan.video_bitrate]
    if plan.audio_bitrate:
        args += ["-b:a", plan.audio_bitrate]
    if plan.muxer:
        args += ["-f", plan.muxer]

    args.append(str(target))
    return args


def render_concat_list(inputs: Sequence[Path]) -> str:
    """Render the concat demuxer list for the given inputs."""
    lines = []
    for path in inputs:
        escaped = str(path).replace("'", "'\\''")
        lines.append(f"file '{escaped}'")
    return "\n".join(lines) + "\n"


__all__ = [
    "BASE_ARGS",
    "CONTAINER_MUXERS",
    "SUPPORTED_FORMATS",
    "build_ffmpeg_args",
    "build_filter_graph",
    "build_output_name",
    "build_plan",
    "render_concat_list",
    "validate_request",
]
