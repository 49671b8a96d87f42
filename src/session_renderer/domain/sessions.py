"""Validated schedule records."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

RawRow = dict[str, str]


class Participant(BaseModel):
    """A named participant of a session."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class SessionRecord(BaseModel):
    """Normalized schedule row. A record without a title cannot be built."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    title: str
    description: str | None = None
    stage: str | None = None
    day: str | None = None
    start_time: str | None = None
    session_type_hint: str | None = None
    placeholder_url: str | None = None
    participants: tuple[Participant, ...] = ()
    start: datetime
    warnings: tuple[str, ...] = ()

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("title must not be empty")
        return cleaned


@dataclass(frozen=True)
class Rejected:
    """Row that could not become a record."""

    row_number: int
    reason: str
