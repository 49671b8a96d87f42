"""Route rendered files to their destination folders."""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from session_renderer.config import RoutingTable
from session_renderer.domain.jobs import RenderResult
from session_renderer.domain.publishing import PublishOutcome, RemoteFile

_logger = logging.getLogger(__name__)


class RemotePublisher(Protocol):
    """Interface for the remote file store."""

    async def upload(
        self, local_path: Path, display_name: str, destination_id: str
    ) -> RemoteFile:
        """Upload a local file and return its remote reference."""


@dataclass
class PublishRouter:
    """Resolves destinations and wraps upload errors into outcomes."""

    publisher: RemotePublisher
    routing: RoutingTable
    timeout_seconds: float | None = None

    def resolve_destination(self, routing_key: str | None) -> tuple[str, bool]:
        """Return the destination id and whether the default was used."""
        if routing_key is not None and routing_key in self.routing.routes:
            return self.routing.routes[routing_key], False
        return self.routing.default_destination, True

    async def publish(
        self, result: RenderResult, routing_key: str | None
    ) -> PublishOutcome:
        """Upload a rendered file. The local file is never removed here."""
        destination, used_fallback = self.resolve_destination(routing_key)
        warning = None
        if used_fallback:
            warning = _fallback_warning(routing_key)
            _logger.warning("%s: %s", result.job_id, warning)
        display_name = result.output_path.name
        _logger.info("Uploading %s to folder %s", display_name, destination)
        try:
            remote = await asyncio.wait_for(
                self.publisher.upload(result.output_path, display_name, destination),
                timeout=self.timeout_seconds,
            )
        except TimeoutError:
            error = f"upload timed out after {self.timeout_seconds}s"
            _logger.error("Upload failed for %s: %s", display_name, error)
            return PublishOutcome(
                destination_id=destination,
                used_fallback=used_fallback,
                error=error,
                warning=warning,
            )
        except Exception as exc:
            _logger.error("Upload failed for %s: %s", display_name, exc)
            return PublishOutcome(
                destination_id=destination,
                used_fallback=used_fallback,
                error=str(exc) or type(exc).__name__,
                warning=warning,
            )
        _logger.info("Uploaded %s (id=%s) %s", remote.name, remote.remote_id, remote.link)
        return PublishOutcome(
            destination_id=destination,
            used_fallback=used_fallback,
            remote_file=remote,
            warning=warning,
        )


def _fallback_warning(routing_key: str | None) -> str:
    if routing_key is None:
        return "no stage set, using default folder"
    return f"no destination mapped for {routing_key!r}, using default folder"
