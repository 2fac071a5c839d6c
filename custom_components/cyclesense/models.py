"""Period records for cyclesense."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from homeassistant.util import dt as dt_util
from homeassistant.util.ulid import ulid_now


def _parse_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    # Web app exports carry full timestamps ("2024-01-01T00:00:00.000Z")
    return date.fromisoformat(str(value)[:10])


@dataclass
class PeriodRecord:
    """A logged menstruation period."""

    id: str
    start: date
    end: date | None = None
    flow: str | None = None
    symptoms: list[str] = field(default_factory=list)
    logged_at: datetime = field(default_factory=dt_util.utcnow)

    @property
    def is_open(self) -> bool:
        """Return true while the period has no end date."""
        return self.end is None

    @property
    def is_completed(self) -> bool:
        """Return true if the period has a valid end date."""
        return self.end is not None and self.end >= self.start

    @property
    def duration(self) -> int | None:
        """Return the inclusive length in days of a completed period."""
        if not self.is_completed:
            return None
        return (self.end - self.start).days + 1  # type: ignore[operator]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "start_date": self.start.isoformat(),
            "end_date": self.end.isoformat() if self.end else None,
            "flow": self.flow,
            "symptoms": list(self.symptoms),
            "logged_at": self.logged_at.isoformat(),
        }

    @staticmethod
    def from_dict(obj: dict[str, Any]) -> PeriodRecord:
        """Build a record from the stored layout or the web app's camelCase layout."""
        start = _parse_date(obj.get("start_date", obj.get("startDate")))
        if start is None:
            raise ValueError(f"Period record without a start date: {obj}")
        end = _parse_date(obj.get("end_date", obj.get("endDate")))
        logged_raw = obj.get("logged_at", obj.get("loggedAt"))
        logged_at = dt_util.parse_datetime(logged_raw) if logged_raw else None
        return PeriodRecord(
            id=str(obj.get("id") or ulid_now()),
            start=start,
            end=end,
            flow=obj.get("flow"),
            symptoms=list(obj.get("symptoms") or []),
            logged_at=logged_at or dt_util.utcnow(),
        )
