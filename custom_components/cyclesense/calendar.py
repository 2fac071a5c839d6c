"""Calendar platform for cyclesense."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.components.calendar import (
    CalendarEntity,
    CalendarEntityFeature,
    CalendarEvent,
)
from homeassistant.exceptions import HomeAssistantError
from homeassistant.util import dt as dt_util
from homeassistant.util.ulid import ulid_now

from .const import CONF_SHOW_FERTILITY_ON_CAL, LOGGER
from .entity import CycleSenseEntity
from .models import PeriodRecord

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import CycleSenseUpdateCoordinator
    from .data import CycleSenseConfigEntry

PERIOD_SUMMARIES = {"menstruation", "period"}


async def async_setup_entry(
    _hass: HomeAssistant,
    entry: CycleSenseConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up calendar entity."""
    async_add_entities([CycleSenseCalendar(entry.runtime_data.coordinator)])


def _to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    if isinstance(value, dict):
        if "date" in value:
            return date.fromisoformat(value["date"])  # all-day
        if "datetime" in value:
            return dt_util.parse_datetime(value["datetime"]).date()  # type: ignore[union-attr]
    raise HomeAssistantError("Unsupported date format for calendar event")


class CycleSenseCalendar(CycleSenseEntity, CalendarEntity):
    """Calendar of recorded and predicted periods."""

    _attr_name = "Cycle"
    _attr_supported_features = CalendarEntityFeature.CREATE_EVENT

    def __init__(self, coordinator: CycleSenseUpdateCoordinator) -> None:
        """Initialize the calendar entity."""
        super().__init__(coordinator, "calendar")

    def _events(self) -> list[CalendarEvent]:
        """Build all-day events; event ends are exclusive."""
        data = self.coordinator.data
        events: list[CalendarEvent] = []

        for p in self.coordinator.storage.periods:
            if p.is_completed:
                last_day = p.end
            elif p.is_open:
                # Show an ongoing period with the average length until it is ended
                last_day = p.start + timedelta(days=data["period_length"] - 1)
            else:
                continue
            events.append(
                CalendarEvent(
                    summary="Menstruation",
                    start=p.start,
                    end=last_day + timedelta(days=1),  # type: ignore[operator]
                    uid=p.id,
                )
            )

        prediction = data.get("prediction")
        if prediction is not None:
            events.append(
                CalendarEvent(
                    summary="Predicted Period",
                    start=prediction.start,
                    end=prediction.end + timedelta(days=1),
                    description=f"Confidence: {prediction.confidence.value}",
                )
            )
            if self.coordinator.config_entry.options.get(CONF_SHOW_FERTILITY_ON_CAL, False):
                events.append(
                    CalendarEvent(
                        summary="Fertility Window",
                        start=prediction.fertile_window_start,
                        end=prediction.fertile_window_end + timedelta(days=1),
                        description=f"Predicted ovulation: {prediction.ovulation_date}",
                    )
                )
        return events

    @property
    def event(self) -> CalendarEvent | None:
        """Return the current or next upcoming event."""
        today = dt_util.now().date()
        upcoming = [e for e in self._events() if e.end > today]
        return min(upcoming, key=lambda e: e.start) if upcoming else None

    async def async_get_events(
        self,
        hass: HomeAssistant,  # noqa: ARG002
        start_date: datetime,
        end_date: datetime,
    ) -> list[CalendarEvent]:
        """Return calendar events within a date range."""
        first, last = start_date.date(), end_date.date()
        return [e for e in self._events() if e.start <= last and e.end > first]

    async def async_create_event(self, **kwargs: Any) -> None:
        """Record a period created through the calendar UI.

        Only events whose summary is "Menstruation" or "Period" are stored.
        """
        summary = str(kwargs.get("summary", "")).strip().lower()
        if summary not in PERIOD_SUMMARIES:
            LOGGER.debug("Ignoring calendar event %r", kwargs.get("summary"))
            return

        start_raw = kwargs.get("dtstart") or kwargs.get("start")
        end_raw = kwargs.get("dtend") or kwargs.get("end")
        if not start_raw:
            raise HomeAssistantError("Calendar event requires a start date")
        start_day = _to_date(start_raw)
        # All-day calendar events carry an exclusive end date
        end_day = _to_date(end_raw) - timedelta(days=1) if end_raw else None
        if end_day is not None and end_day < start_day:
            end_day = start_day

        await self.coordinator.storage.async_add_period(
            PeriodRecord(id=ulid_now(), start=start_day, end=end_day)
        )
        await self.coordinator.async_request_refresh()
