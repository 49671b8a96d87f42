"""Render adapter around the composition renderer."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from session_renderer.domain.jobs import (
    RenderFailure,
    RenderJob,
    RenderMode,
    RenderResult,
    RenderTarget,
)

_logger = logging.getLogger(__name__)


class CompositionRenderer(Protocol):
    """Interface for the external composition renderer."""

    async def bundle(self, entry_point: str) -> str:
        """Bundle the project once and return the reference to render from."""

    async def discover_targets(self, bundle_reference: str) -> list[RenderTarget]:
        """Return the compositions available in a bundle."""

    async def render_still(
        self,
        target: RenderTarget,
        output_path: Path,
        input_props: dict[str, object],
    ) -> None:
        """Render a single frame to `output_path`."""

    async def render_animated(
        self,
        target: RenderTarget,
        output_path: Path,
        input_props: dict[str, object],
        codec: str,
    ) -> None:
        """Render the full composition to `output_path`."""


@dataclass
class RenderService:
    """Dispatches jobs to still or animated rendering, single attempt."""

    renderer: CompositionRenderer
    asset_dir: Path
    codec: str = "h264"
    timeout_seconds: float | None = None

    def output_path(self, job: RenderJob) -> Path:
        return self.asset_dir / f"{job.id}.{job.mode.extension}"

    async def render(
        self, job: RenderJob, target: RenderTarget
    ) -> RenderResult | RenderFailure:
        """Render a job, converting any renderer error into a failure."""
        output_path = self.output_path(job)
        if job.mode is RenderMode.STILL:
            call = self.renderer.render_still(target, output_path, job.input_props)
        else:
            call = self.renderer.render_animated(
                target, output_path, job.input_props, self.codec
            )
        _logger.info("Rendering %s %s", job.mode.value, output_path.name)
        try:
            await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except TimeoutError:
            cause = f"render timed out after {self.timeout_seconds}s"
            _logger.error("Render failed for %s: %s", job.id, cause)
            return RenderFailure(job_id=job.id, cause=cause)
        except Exception as exc:
            _logger.error("Render failed for %s: %s", job.id, exc)
            return RenderFailure(job_id=job.id, cause=str(exc) or type(exc).__name__)
        _logger.info("Rendered %s", output_path)
        return RenderResult(job_id=job.id, output_path=output_path, mode=job.mode)
