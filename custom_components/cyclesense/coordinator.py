"""Data coordinator for cyclesense."""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator
from homeassistant.util import dt as dt_util

from .const import DOMAIN, LOGGER
from .health import HealthAnalysis, analyze_cycle_health
from .phase import cycle_day, cycle_phase, fertility_score, is_ovulation_phase
from .prediction import PredictionResult, predict_next_period

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .storage import CycleSenseStorage


class CycleSenseUpdateCoordinator(DataUpdateCoordinator[dict[str, Any]]):
    """Compute cycle predictions and analysis from stored history.

    Nothing is cached between refreshes: every refresh derives the
    prediction, health analysis and phase from the current records.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        *,
        config_entry: ConfigEntry,
        storage: CycleSenseStorage,
    ) -> None:
        """Initialize the coordinator."""
        super().__init__(
            hass,
            logger=LOGGER,
            config_entry=config_entry,
            name=DOMAIN,
            # Day of cycle and phase move on at midnight
            update_interval=timedelta(hours=1),
        )
        self.storage = storage

    def predict_next_period(self) -> PredictionResult | None:
        return predict_next_period(self.storage.periods)

    def analyze_cycle_health(self) -> HealthAnalysis:
        return analyze_cycle_health(self.storage.periods)

    def is_ovulation_phase(self, day: date) -> bool:
        snapshot = self.storage.snapshot
        return is_ovulation_phase(snapshot.periods, snapshot.average_cycle_length, day)

    async def _async_update_data(self) -> dict[str, Any]:
        today = dt_util.now().date()
        snapshot = self.storage.snapshot
        prediction = self.predict_next_period()
        health = self.analyze_cycle_health()
        active = self.storage.active_period

        day_of_cycle = cycle_day(snapshot.periods, today)
        phase = (
            cycle_phase(
                day_of_cycle,
                snapshot.average_cycle_length,
                snapshot.average_period_length,
            )
            if day_of_cycle is not None
            else None
        )

        currently_menstruating = active is not None and active.start <= today
        if not currently_menstruating:
            currently_menstruating = any(
                p.is_completed and p.start <= today <= p.end  # type: ignore[operator]
                for p in snapshot.periods
            )

        LOGGER.debug(
            "Refreshed cycle data: day %s, phase %s, next period %s",
            day_of_cycle,
            phase,
            prediction.start if prediction else None,
        )
        return {
            "cycle_length": snapshot.average_cycle_length,
            "period_length": snapshot.average_period_length,
            "day_of_cycle": day_of_cycle,
            "cycle_phase": phase,
            "currently_menstruating": currently_menstruating,
            "active_period": active,
            "ovulation_phase": self.is_ovulation_phase(today),
            "fertility_score": fertility_score(prediction, today),
            "prediction": prediction,
            "health": health,
        }
