"""Turn raw sheet rows into validated session records."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo

from pydantic import ValidationError

from session_renderer.config import ColumnMapping
from session_renderer.domain.sessions import (
    Participant,
    RawRow,
    Rejected,
    SessionRecord,
)
from session_renderer.domain.slugs import slugify

_DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d.%m.%Y", "%B %d, %Y", "%b %d, %Y")
_TIME_FORMATS = ("%H:%M", "%H:%M:%S", "%I:%M %p", "%I:%M%p")

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class RecordNormalizer:
    """Validates rows and fills in best-effort derived fields."""

    columns: ColumnMapping = field(default_factory=ColumnMapping)
    timezone: tzinfo = UTC
    clock: Callable[[], datetime] = _utc_now

    def normalize(self, row: RawRow, row_number: int = 0) -> SessionRecord | Rejected:
        """Return a record, or a rejection when the title is missing."""
        title = _cell(row, self.columns.title)
        if title is None:
            return Rejected(row_number=row_number, reason="missing title")

        start, warning = self._resolve_start(row)
        warnings = (warning,) if warning else ()
        try:
            return SessionRecord(
                title=title,
                description=_cell(row, self.columns.description),
                stage=_cell(row, self.columns.stage),
                day=_cell(row, self.columns.day),
                start_time=_cell(row, self.columns.start_time),
                session_type_hint=_cell(row, self.columns.session_type),
                placeholder_url=_cell(row, self.columns.placeholder_url),
                participants=self._participants(row),
                start=start,
                warnings=warnings,
            )
        except ValidationError as exc:
            return Rejected(row_number=row_number, reason=str(exc))

    def _participants(self, row: RawRow) -> tuple[Participant, ...]:
        participants = []
        for column in self.columns.participant_columns():
            name = _cell(row, column)
            if name is None:
                continue
            participants.append(Participant(id=slugify(name), name=name))
        return tuple(participants)

    def _resolve_start(self, row: RawRow) -> tuple[datetime, str | None]:
        """Combine day and time cells, falling back to the current time."""
        day = _cell(row, self.columns.day)
        time_of_day = _cell(row, self.columns.start_time)
        if day is None or time_of_day is None:
            warning = "start date or time missing, using current time"
            _logger.warning("%s: %s", _cell(row, self.columns.title), warning)
            return self.clock(), warning

        parsed = parse_schedule_datetime(day, time_of_day, self.timezone)
        if parsed is None:
            warning = f"could not parse start {day!r} {time_of_day!r}, using current time"
            _logger.warning("%s: %s", _cell(row, self.columns.title), warning)
            return self.clock(), warning
        return parsed, None


def parse_schedule_datetime(day: str, time_of_day: str, tz: tzinfo) -> datetime | None:
    """Parse a day and a time cell into an aware datetime."""
    try:
        naive = datetime.fromisoformat(f"{day}T{time_of_day}")
    except ValueError:
        naive = None
    if naive is None:
        for date_format in _DATE_FORMATS:
            for time_format in _TIME_FORMATS:
                try:
                    naive = datetime.strptime(
                        f"{day} {time_of_day}", f"{date_format} {time_format}"
                    )
                except ValueError:
                    continue
                break
            if naive is not None:
                break
    if naive is None:
        return None
    if naive.tzinfo is not None:
        return naive
    return naive.replace(tzinfo=tz)


def _cell(row: RawRow, column: str) -> str | None:
    """Return trimmed cell text, or None when blank or absent."""
    value = row.get(column)
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None
