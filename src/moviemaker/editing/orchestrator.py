"""Single entry point for editing operations.

EditOrchestrator validates a request, resolves every referenced asset,
builds an invocation plan and hands it to the job executor. All checks
that can fail without running the engine happen synchronously in
submit(); engine failures arrive later through the returned JobHandle.
"""

from __future__ import annotations

import logging
from pathlib import Path

from moviemaker.config.models import MovieMakerConfig
from moviemaker.domain.models import Asset, OutputArtifact
from moviemaker.editing.requests import EditRequest, TrimRequest
from moviemaker.exceptions import EngineError, RequestValidationError
from moviemaker.executor.command import build_plan, validate_request
from moviemaker.executor.ffmpeg_base import FFmpegRunner
from moviemaker.introspector.ffprobe import FFprobeProbe
from moviemaker.introspector.interface import MediaProbe
from moviemaker.introspector.types import ProbeResult
from moviemaker.jobs.handle import JobHandle
from moviemaker.jobs.models import Job
from moviemaker.jobs.pool import JobExecutor
from moviemaker.storage.store import AssetStore, OutputStore

logger = logging.getLogger(__name__)


class EditOrchestrator:
    """Coordinate stores, probe, command builder and job executor."""

    def __init__(
        self,
        assets: AssetStore,
        outputs: OutputStore,
        executor: JobExecutor,
        probe: MediaProbe | None = None,
        check_trim_bounds: bool = True,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            assets: Store of uploaded sources.
            outputs: Store finished jobs are adopted into.
            executor: Worker pool that runs plans.
            probe: Media probe; defaults to ffprobe from PATH.
            check_trim_bounds: Probe trim sources and reject end times past
                the source duration before queueing.
        """
        self.assets = assets
        self.outputs = outputs
        self.executor = executor
        self._probe = probe if probe is not None else FFprobeProbe()
        self._check_trim_bounds = check_trim_bounds

    @classmethod
    def from_config(cls, config: MovieMakerConfig) -> EditOrchestrator:
        """Wire the default stack from configuration."""
        outputs = OutputStore(config.output_dir)
        runner = FFmpegRunner(
            ffmpeg_path=config.tools.ffmpeg,
            timeout=config.jobs.timeout_seconds,
            stderr_tail_bytes=config.jobs.stderr_tail_bytes,
        )
        executor = JobExecutor(
            runner,
            outputs,
            max_workers=config.jobs.max_workers,
            max_backlog=config.jobs.max_backlog,
        )
        return cls(
            AssetStore(config.upload_dir),
            outputs,
            executor,
            probe=FFprobeProbe(ffprobe_path=config.tools.ffprobe),
            check_trim_bounds=config.jobs.check_trim_bounds,
        )

    def start(self) -> None:
        self.executor.start()

    def shutdown(self, wait: bool = True, terminate_running: bool = False) -> None:
        self.executor.shutdown(wait=wait, terminate_running=terminate_running)

    def submit(self, request: EditRequest) -> JobHandle:
        """Validate, resolve, plan and queue an edit request.

        Raises:
            RequestValidationError: If the request is malformed, or a trim
                window ends past the source duration.
            InvalidNameError: If a source name is malformed.
            NotFoundError: If a source does not exist.
            ResourceExhaustedError: If the executor backlog is full.
        """
        validate_request(request)
        sources = [self.assets.resolve(name) for name in request.source_names]

        if isinstance(request, TrimRequest) and self._check_trim_bounds:
            self._check_trim_window(request, sources[0])

        plan = build_plan(request, sources, self.outputs.root)
        handle = self.executor.submit(plan)
        logger.debug("Submitted %s as job %s", plan.describe(), handle.job_id[:8])
        return handle

    def _check_trim_window(self, request: TrimRequest, source: Path) -> None:
        try:
            duration = self._probe.probe(source).duration
        except EngineError as e:
            logger.warning("Could not read duration of %s: %s", source.name, e)
            return
        if duration is None:
            logger.debug("Duration of %s unknown; skipping bounds check", source.name)
            return
        if request.end > duration:
            raise RequestValidationError(
                f"endTime {request.end:g}s is past the end of {request.source} "
                f"({duration:g}s)"
            )

    def probe(self, name: str) -> ProbeResult:
        """Probe a stored asset.

        Raises:
            InvalidNameError, NotFoundError: If the name does not resolve.
            EngineError: If the probe fails.
        """
        return self._probe.probe(self.assets.resolve(name))

    def list_assets(self) -> list[Asset]:
        return self.assets.list()

    def list_outputs(self) -> list[OutputArtifact]:
        return self.outputs.list()

    def delete_asset(self, name: str) -> None:
        self.assets.delete(name)

    def delete_output(self, name: str) -> None:
        self.outputs.delete(name)

    def register_upload(self, original_name: str, data: bytes) -> Asset:
        return self.assets.register(original_name, data)

    def active_jobs(self) -> list[Job]:
        return self.executor.active_jobs()
