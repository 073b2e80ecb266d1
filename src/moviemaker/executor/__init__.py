"""Media engine execution: tool resolution, plans and process supervision."""

from moviemaker.executor.command import (
    SUPPORTED_FORMATS,
    build_ffmpeg_args,
    build_filter_graph,
    build_output_name,
    build_plan,
    render_concat_list,
    validate_request,
)
from moviemaker.executor.ffmpeg_base import FFmpegRunner, RunResult
from moviemaker.executor.interface import (
    get_tool_path,
    require_tool,
)
from moviemaker.executor.types import InvocationPlan

__all__ = [
    "SUPPORTED_FORMATS",
    "FFmpegRunner",
    "InvocationPlan",
    "RunResult",
    "build_ffmpeg_args",
    "build_filter_graph",
    "build_output_name",
    "build_plan",
    "get_tool_path",
    "render_concat_list",
    "require_tool",
    "validate_request",
]
