"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import pytest

from session_renderer.config import BatchConfig, RoutingTable, Settings
from session_renderer.containers import AppContainer
from session_renderer.domain.jobs import RenderTarget
from session_renderer.domain.publishing import RemoteFile
from session_renderer.domain.sessions import RawRow
from session_renderer.services.batch import (
    Authenticator,
    BatchOrchestrator,
    SheetSource,
)
from session_renderer.services.normalizer import RecordNormalizer
from session_renderer.services.publishing import PublishRouter, RemotePublisher
from session_renderer.services.rendering import CompositionRenderer, RenderService

FIXED_NOW = datetime(2024, 7, 1, 9, 0, tzinfo=UTC)


@dataclass
class FakeAuthenticator(Authenticator):
    """Authenticator that can be told to fail."""

    error: Exception | None = None
    calls: int = 0

    async def authenticate(self) -> None:
        self.calls += 1
        if self.error is not None:
            raise self.error


@dataclass
class InMemorySheetSource(SheetSource):
    """Sheet source returning fixed rows."""

    rows: list[RawRow] = field(default_factory=list)
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def fetch_rows(self, spreadsheet_id: str, sheet_range: str) -> list[RawRow]:
        self.calls.append((spreadsheet_id, sheet_range))
        return list(self.rows)


@dataclass
class RecordingRenderer(CompositionRenderer):
    """Renderer that writes placeholder files and records calls."""

    targets: list[RenderTarget] = field(
        default_factory=lambda: [RenderTarget(id="MainComposition", duration_in_frames=175)]
    )
    failing_ids: set[str] = field(default_factory=set)
    bundle_error: Exception | None = None
    discovery_error: Exception | None = None
    bundled: list[str] = field(default_factory=list)
    stills: list[tuple[str, Path, dict[str, object]]] = field(default_factory=list)
    videos: list[tuple[str, Path, dict[str, object], str]] = field(default_factory=list)

    async def bundle(self, entry_point: str) -> str:
        if self.bundle_error is not None:
            raise self.bundle_error
        self.bundled.append(entry_point)
        return "build/remotion-bundle"

    async def discover_targets(self, bundle_reference: str) -> list[RenderTarget]:
        if self.discovery_error is not None:
            raise self.discovery_error
        return self.targets

    async def render_still(
        self,
        target: RenderTarget,
        output_path: Path,
        input_props: dict[str, object],
    ) -> None:
        self._check(input_props)
        self.stills.append((target.id, output_path, input_props))
        output_path.write_bytes(b"png")

    async def render_animated(
        self,
        target: RenderTarget,
        output_path: Path,
        input_props: dict[str, object],
        codec: str,
    ) -> None:
        self._check(input_props)
        self.videos.append((target.id, output_path, input_props, codec))
        output_path.write_bytes(b"mp4")

    @property
    def rendered_ids(self) -> list[str]:
        calls = [props["id"] for _, _, props in self.stills]
        calls += [props["id"] for _, _, props, _ in self.videos]
        return calls

    def _check(self, input_props: dict[str, object]) -> None:
        if input_props["id"] in self.failing_ids:
            raise RuntimeError(f"encoding failed for {input_props['id']}")


@dataclass
class RecordingPublisher(RemotePublisher):
    """Publisher that records uploads and can fail for given names."""

    failing_names: set[str] = field(default_factory=set)
    uploads: list[tuple[Path, str, str]] = field(default_factory=list)

    async def upload(
        self, local_path: Path, display_name: str, destination_id: str
    ) -> RemoteFile:
        if display_name in self.failing_names:
            raise ConnectionError(f"upload rejected for {display_name}")
        self.uploads.append((local_path, display_name, destination_id))
        return RemoteFile(
            remote_id=f"drive-{len(self.uploads)}",
            name=display_name,
            link=f"https://drive.example/{display_name}",
        )


@dataclass
class PipelineFakes:
    """Collaborators shared by an orchestrator under test."""

    authenticator: FakeAuthenticator
    source: InMemorySheetSource
    renderer: RecordingRenderer
    publisher: RecordingPublisher


def build_orchestrator(
    fakes: PipelineFakes,
    asset_dir: Path,
    *,
    routes: dict[str, str] | None = None,
    delete_after_publish: bool = False,
    concurrency: int = 1,
) -> BatchOrchestrator:
    """Wire an orchestrator around fake collaborators."""
    config = BatchConfig(
        spreadsheet_id="sheet-1",
        sheet_range="Sessions!A:Z",
        entry_point="src/index.ts",
        composition_id="MainComposition",
        asset_dir=asset_dir,
        delete_after_publish=delete_after_publish,
        concurrency=concurrency,
    )
    return BatchOrchestrator(
        config=config,
        authenticator=fakes.authenticator,
        source=fakes.source,
        renderer=fakes.renderer,
        normalizer=RecordNormalizer(clock=lambda: FIXED_NOW),
        render_service=RenderService(renderer=fakes.renderer, asset_dir=asset_dir),
        publish_router=PublishRouter(
            publisher=fakes.publisher,
            routing=RoutingTable(
                default_destination="default-folder", routes=routes or {}
            ),
        ),
    )


@pytest.fixture
def fakes() -> PipelineFakes:
    return PipelineFakes(
        authenticator=FakeAuthenticator(),
        source=InMemorySheetSource(),
        renderer=RecordingRenderer(),
        publisher=RecordingPublisher(),
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        google_credentials_file=str(tmp_path / "credentials.json"),
        spreadsheet_id="sheet-1",
        default_folder_id="default-folder",
        stage_folder_map="Main Stage=main-folder",
        asset_dir=str(tmp_path / "assets"),
        admin_token="admin-token",
    )


@pytest.fixture
def container(settings: Settings, fakes: PipelineFakes, tmp_path: Path) -> AppContainer:
    orchestrator = build_orchestrator(fakes, tmp_path / "assets")

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        orchestrator=orchestrator,
        close_resources=close_resources,
    )
