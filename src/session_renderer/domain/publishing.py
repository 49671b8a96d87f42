"""Publishing domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RemoteFile:
    """Durable reference returned by the remote store."""

    remote_id: str
    name: str
    link: str | None = None


@dataclass(frozen=True)
class PublishOutcome:
    """Result of publishing one rendered file."""

    destination_id: str
    used_fallback: bool
    remote_file: RemoteFile | None = None
    error: str | None = None
    warning: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.remote_file is not None
