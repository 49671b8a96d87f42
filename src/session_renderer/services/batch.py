"""Batch orchestration: sheet rows in, published media out."""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

from session_renderer.config import BatchConfig
from session_renderer.domain.jobs import RenderFailure, RenderTarget
from session_renderer.domain.report import BatchReport, JobOutcome, JobStatus
from session_renderer.domain.sessions import RawRow, Rejected
from session_renderer.services.normalizer import RecordNormalizer
from session_renderer.services.planner import JobPlanner
from session_renderer.services.publishing import PublishRouter
from session_renderer.services.rendering import CompositionRenderer, RenderService

_logger = logging.getLogger(__name__)


class FatalSetupError(Exception):
    """One-time setup failed; no job may run."""


class Authenticator(Protocol):
    """Interface for the one-time credential setup."""

    async def authenticate(self) -> None:
        """Acquire credentials for the data source and publisher."""


class SheetSource(Protocol):
    """Interface for the tabular data source."""

    async def fetch_rows(self, spreadsheet_id: str, sheet_range: str) -> list[RawRow]:
        """Return header-aligned rows, blank-title rows included."""


@dataclass
class BatchOrchestrator:
    """Runs setup once, then drives every row through plan, render, publish."""

    config: BatchConfig
    authenticator: Authenticator
    source: SheetSource
    renderer: CompositionRenderer
    normalizer: RecordNormalizer
    render_service: RenderService
    publish_router: PublishRouter

    async def run(self) -> BatchReport:
        """Execute one batch and return its report."""
        try:
            target = await self._setup()
        except FatalSetupError as exc:
            _logger.error("Batch setup failed: %s", exc)
            return BatchReport.aborted(str(exc))

        try:
            rows = await self.source.fetch_rows(
                self.config.spreadsheet_id, self.config.sheet_range
            )
        except Exception as exc:
            _logger.exception("Failed to fetch sheet rows")
            return BatchReport.aborted(f"fetching rows failed: {exc}")

        if not rows:
            _logger.info("No data found in the sheet.")
            return BatchReport()
        _logger.info("Fetched %s rows", len(rows))

        self.config.asset_dir.mkdir(parents=True, exist_ok=True)
        planner = JobPlanner(target=target)
        outcomes = await self._process_rows(rows, planner, target)
        report = BatchReport(outcomes=outcomes)
        _logger.info(report.summary())
        return report

    async def _setup(self) -> RenderTarget:
        try:
            await self.authenticator.authenticate()
        except Exception as exc:
            raise FatalSetupError(f"authentication failed: {exc}") from exc

        try:
            bundle_reference = await self.renderer.bundle(self.config.entry_point)
        except Exception as exc:
            raise FatalSetupError(f"bundling failed: {exc}") from exc

        try:
            targets = await self.renderer.discover_targets(bundle_reference)
        except Exception as exc:
            raise FatalSetupError(f"composition discovery failed: {exc}") from exc

        if not targets:
            raise FatalSetupError("no compositions found in the render bundle")
        return select_target(targets, self.config.composition_id)

    async def _process_rows(
        self, rows: Sequence[RawRow], planner: JobPlanner, target: RenderTarget
    ) -> list[JobOutcome]:
        """Process rows in order, optionally with bounded concurrency."""
        numbered = list(enumerate(rows, start=1))
        if self.config.concurrency <= 1:
            return [
                await self._process_row(row, number, planner, target)
                for number, row in numbered
            ]

        semaphore = asyncio.Semaphore(self.config.concurrency)

        async def bounded(number: int, row: RawRow) -> JobOutcome:
            async with semaphore:
                return await self._process_row(row, number, planner, target)

        # gather keeps input order regardless of completion order
        return list(
            await asyncio.gather(*(bounded(number, row) for number, row in numbered))
        )

    async def _process_row(
        self,
        row: RawRow,
        row_number: int,
        planner: JobPlanner,
        target: RenderTarget,
    ) -> JobOutcome:
        record = self.normalizer.normalize(row, row_number=row_number)
        if isinstance(record, Rejected):
            _logger.warning("Skipping row %s: %s", row_number, record.reason)
            return JobOutcome(
                row_number=row_number,
                status=JobStatus.REJECTED_RECORD,
                reason=record.reason,
            )

        job = planner.plan(record)
        _logger.info("Processing session %r (id=%s)", job.title, job.id)
        rendered = await self.render_service.render(job, target)
        if isinstance(rendered, RenderFailure):
            return JobOutcome(
                row_number=row_number,
                status=JobStatus.RENDER_FAILED,
                job_id=job.id,
                mode=job.mode,
                reason=rendered.cause,
                warnings=record.warnings,
            )

        published = await self.publish_router.publish(rendered, job.routing_key)
        warnings = record.warnings
        if published.warning:
            warnings += (published.warning,)
        if not published.succeeded:
            return JobOutcome(
                row_number=row_number,
                status=JobStatus.PUBLISH_FAILED,
                job_id=job.id,
                mode=job.mode,
                reason=published.error,
                warnings=warnings,
            )

        if self.config.delete_after_publish:
            try:
                rendered.output_path.unlink(missing_ok=True)
            except OSError as exc:
                _logger.warning("Could not delete %s: %s", rendered.output_path, exc)
            else:
                _logger.info("Deleted local file %s", rendered.output_path)
        return JobOutcome(
            row_number=row_number,
            status=JobStatus.PUBLISHED,
            job_id=job.id,
            mode=job.mode,
            remote_file=published.remote_file,
            warnings=warnings,
        )


def select_target(targets: Sequence[RenderTarget], composition_id: str) -> RenderTarget:
    """Pick the configured composition or fail setup."""
    for target in targets:
        if target.id == composition_id:
            _logger.info("Using composition %r", target.id)
            return target
    available = ", ".join(target.id for target in targets)
    raise FatalSetupError(
        f"composition {composition_id!r} not found (available: {available})"
    )
