"""Application configuration."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    google_credentials_file: str = "credentials.json"
    spreadsheet_id: str
    sheet_name: str = "Sessions"
    sheet_columns: str = "A:Z"
    header_row: int = 1

    title_column: str = "Title of the session"
    description_column: str = "Description"
    stage_column: str = "Stage"
    day_column: str = "Day"
    start_time_column: str = "Start"
    type_column: str = "Type"
    placeholder_url_column: str = "Placeholder URL"
    participant_column_prefix: str = "Speaker"
    participant_slots: int = 6
    schedule_timezone: str = "UTC"

    remotion_entry_point: str = "src/index.ts"
    remotion_bundle_dir: str = "build/remotion-bundle"
    remotion_command: str = "npx remotion"
    composition_id: str = "MainComposition"
    video_codec: str = "h264"
    asset_dir: str = "output_assets"
    delete_after_publish: bool = False

    stage_folder_map: str | None = None
    default_folder_id: str
    render_timeout_seconds: float = 900.0
    publish_timeout_seconds: float = 300.0
    batch_concurrency: int = 1

    log_level: str = "INFO"
    admin_token: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


@dataclass(frozen=True)
class ColumnMapping:
    """Sheet column labels for each record field."""

    title: str = "Title of the session"
    description: str = "Description"
    stage: str = "Stage"
    day: str = "Day"
    start_time: str = "Start"
    session_type: str = "Type"
    placeholder_url: str = "Placeholder URL"
    participant_prefix: str = "Speaker"
    participant_slots: int = 6

    def participant_columns(self) -> list[str]:
        """Return the participant slot labels in order."""
        return [
            f"{self.participant_prefix} {index}"
            for index in range(1, self.participant_slots + 1)
        ]

    @classmethod
    def from_settings(cls, settings: Settings) -> "ColumnMapping":
        return cls(
            title=settings.title_column,
            description=settings.description_column,
            stage=settings.stage_column,
            day=settings.day_column,
            start_time=settings.start_time_column,
            session_type=settings.type_column,
            placeholder_url=settings.placeholder_url_column,
            participant_prefix=settings.participant_column_prefix,
            participant_slots=settings.participant_slots,
        )


@dataclass(frozen=True)
class RoutingTable:
    """Routing key to destination folder, with a default."""

    default_destination: str
    routes: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class BatchConfig:
    """Per-run options handed to the orchestrator."""

    spreadsheet_id: str
    sheet_range: str
    entry_point: str
    composition_id: str
    asset_dir: Path
    delete_after_publish: bool = False
    concurrency: int = 1

    @classmethod
    def from_settings(cls, settings: Settings) -> "BatchConfig":
        return cls(
            spreadsheet_id=settings.spreadsheet_id,
            sheet_range=f"{settings.sheet_name}!{settings.sheet_columns}",
            entry_point=settings.remotion_entry_point,
            composition_id=settings.composition_id,
            asset_dir=Path(settings.asset_dir),
            delete_after_publish=settings.delete_after_publish,
            concurrency=max(1, settings.batch_concurrency),
        )


def parse_routing_table(raw: str | None) -> dict[str, str]:
    """Parse `Stage=folderId,Other Stage=folderId` pairs from env."""
    if raw is None:
        return {}
    routes: dict[str, str] = {}
    for chunk in raw.split(","):
        key, sep, value = chunk.partition("=")
        if not sep:
            continue
        key = key.strip()
        value = value.strip()
        if key and value:
            routes[key] = value
    return routes
