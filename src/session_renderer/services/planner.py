"""Build render jobs from session records."""

import itertools
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from session_renderer.domain.jobs import RenderJob, RenderMode, RenderTarget
from session_renderer.domain.sessions import SessionRecord
from session_renderer.domain.slugs import slugify

_HINTS = {
    "still": RenderMode.STILL,
    "animation": RenderMode.ANIMATED,
    "animated": RenderMode.ANIMATED,
}

_logger = logging.getLogger(__name__)


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class JobPlanner:
    """Derives job identity, render mode and renderer props."""

    target: RenderTarget
    millis_clock: Callable[[], int] = _epoch_millis
    _fallback_sequence: itertools.count = field(
        default_factory=itertools.count, init=False, repr=False
    )

    def plan(self, record: SessionRecord) -> RenderJob:
        """Return the render job for a normalized record."""
        job_id = self.job_id(record.title)
        props = record.model_dump(
            mode="json", by_alias=True, exclude={"start", "warnings"}
        )
        participants = props["participants"]
        props.update(
            id=job_id,
            name=record.title,
            start=int(record.start.timestamp() * 1000),
            speakers=participants,
        )
        return RenderJob(
            id=job_id,
            title=record.title,
            mode=self.mode_for(record),
            input_props=props,
            routing_key=record.stage,
        )

    def job_id(self, title: str) -> str:
        """Slug of the title, or a unique time-based id when the slug is empty."""
        slug = slugify(title)
        if slug:
            return slug
        # unique per planner, even within one millisecond
        return f"session-{self.millis_clock()}-{next(self._fallback_sequence)}"

    def mode_for(self, record: SessionRecord) -> RenderMode:
        """Explicit type hint first, then the composition's duration."""
        hint = record.session_type_hint
        if hint:
            mode = _HINTS.get(hint.strip().lower())
            if mode is not None:
                return mode
            _logger.warning(
                "Unknown session type %r for %s, using composition default",
                hint,
                record.title,
            )
        if self.target.duration_in_frames <= 1:
            return RenderMode.STILL
        return RenderMode.ANIMATED
