"""Render job domain models."""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class RenderMode(StrEnum):
    """Kind of media produced for a job."""

    STILL = "still"
    ANIMATED = "animated"

    @property
    def extension(self) -> str:
        return "png" if self is RenderMode.STILL else "mp4"


@dataclass(frozen=True)
class RenderTarget:
    """A composition discovered in the render bundle."""

    id: str
    duration_in_frames: int
    fps: int | None = None
    width: int | None = None
    height: int | None = None
    bundle_reference: str | None = None


@dataclass(frozen=True)
class RenderJob:
    """Everything the renderer needs for one session."""

    id: str
    title: str
    mode: RenderMode
    input_props: dict[str, object]
    routing_key: str | None


@dataclass(frozen=True)
class RenderResult:
    """A successfully rendered file waiting to be published."""

    job_id: str
    output_path: Path
    mode: RenderMode


@dataclass(frozen=True)
class RenderFailure:
    """Renderer error captured for a single job."""

    job_id: str
    cause: str
