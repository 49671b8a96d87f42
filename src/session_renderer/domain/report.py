"""Batch run reporting."""

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum

from session_renderer.domain.jobs import RenderMode
from session_renderer.domain.publishing import RemoteFile


class JobStatus(StrEnum):
    """Terminal state of a single row."""

    PUBLISHED = "published"
    REJECTED_RECORD = "rejected_record"
    RENDER_FAILED = "render_failed"
    PUBLISH_FAILED = "publish_failed"


@dataclass(frozen=True)
class JobOutcome:
    """What happened to one row of the sheet."""

    row_number: int
    status: JobStatus
    job_id: str | None = None
    mode: RenderMode | None = None
    remote_file: RemoteFile | None = None
    reason: str | None = None
    warnings: tuple[str, ...] = ()


@dataclass
class BatchReport:
    """Ordered outcomes of a batch run plus the fatal flag."""

    outcomes: list[JobOutcome] = field(default_factory=list)
    fatal: bool = False
    fatal_reason: str | None = None

    @classmethod
    def aborted(cls, reason: str) -> "BatchReport":
        """Report for a run whose setup failed before any job ran."""
        return cls(fatal=True, fatal_reason=reason)

    @property
    def exit_code(self) -> int:
        return 1 if self.fatal else 0

    def counts(self) -> dict[JobStatus, int]:
        """Number of outcomes per status, zero-filled."""
        tally = Counter(outcome.status for outcome in self.outcomes)
        return {status: tally.get(status, 0) for status in JobStatus}

    def summary(self) -> str:
        """One-line end-of-run summary."""
        if self.fatal:
            return f"Batch aborted: {self.fatal_reason}"
        parts = [f"{status.value}={count}" for status, count in self.counts().items()]
        return f"Batch finished: total={len(self.outcomes)} " + " ".join(parts)

    def to_dict(self) -> dict[str, object]:
        """Serializable view used by the HTTP surface."""
        return {
            "fatal": self.fatal,
            "fatal_reason": self.fatal_reason,
            "counts": {status.value: count for status, count in self.counts().items()},
            "outcomes": [
                {
                    "row_number": outcome.row_number,
                    "status": outcome.status.value,
                    "job_id": outcome.job_id,
                    "mode": outcome.mode.value if outcome.mode else None,
                    "remote_id": outcome.remote_file.remote_id
                    if outcome.remote_file
                    else None,
                    "link": outcome.remote_file.link if outcome.remote_file else None,
                    "reason": outcome.reason,
                    "warnings": list(outcome.warnings),
                }
                for outcome in self.outcomes
            ],
        }
