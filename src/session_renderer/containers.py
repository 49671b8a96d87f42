"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo

from session_renderer.adapters.drive_client import HttpxDriveClient
from session_renderer.adapters.google_auth import GoogleServiceAccountAuth
from session_renderer.adapters.remotion_cli import RemotionCliRenderer
from session_renderer.adapters.sheets_client import HttpxSheetsClient
from session_renderer.config import (
    BatchConfig,
    ColumnMapping,
    RoutingTable,
    Settings,
    parse_routing_table,
)
from session_renderer.services.batch import BatchOrchestrator
from session_renderer.services.normalizer import RecordNormalizer
from session_renderer.services.publishing import PublishRouter
from session_renderer.services.rendering import RenderService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    orchestrator: BatchOrchestrator
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None,
    *,
    composition_id: str | None = None,
    concurrency: int | None = None,
) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    overrides: dict[str, object] = {}
    if composition_id:
        overrides["composition_id"] = composition_id
    if concurrency:
        overrides["batch_concurrency"] = concurrency
    if overrides:
        resolved_settings = resolved_settings.model_copy(update=overrides)

    auth = GoogleServiceAccountAuth(resolved_settings.google_credentials_file)
    sheets_client = HttpxSheetsClient.create(
        auth, header_row=resolved_settings.header_row
    )
    drive_client = HttpxDriveClient.create(auth)
    renderer = RemotionCliRenderer.create(
        resolved_settings.remotion_command,
        bundle_dir=Path(resolved_settings.remotion_bundle_dir),
    )
    batch_config = BatchConfig.from_settings(resolved_settings)

    normalizer = RecordNormalizer(
        columns=ColumnMapping.from_settings(resolved_settings),
        timezone=ZoneInfo(resolved_settings.schedule_timezone),
    )
    render_service = RenderService(
        renderer=renderer,
        asset_dir=Path(resolved_settings.asset_dir),
        codec=resolved_settings.video_codec,
        timeout_seconds=resolved_settings.render_timeout_seconds,
    )
    publish_router = PublishRouter(
        publisher=drive_client,
        routing=RoutingTable(
            default_destination=resolved_settings.default_folder_id,
            routes=parse_routing_table(resolved_settings.stage_folder_map),
        ),
        timeout_seconds=resolved_settings.publish_timeout_seconds,
    )
    orchestrator = BatchOrchestrator(
        config=batch_config,
        authenticator=auth,
        source=sheets_client,
        renderer=renderer,
        normalizer=normalizer,
        render_service=render_service,
        publish_router=publish_router,
    )

    async def close_resources() -> None:
        await sheets_client.close()
        await drive_client.close()

    return AppContainer(
        settings=resolved_settings,
        orchestrator=orchestrator,
        close_resources=close_resources,
    )
