"""Sensor platform for cyclesense."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING, Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
)
from homeassistant.const import UnitOfTime

from .entity import CycleSenseEntity
from .health import HealthStatus
from .phase import CyclePhase
from .prediction import Confidence

if TYPE_CHECKING:
    from datetime import date

    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import CycleSenseUpdateCoordinator
    from .data import CycleSenseConfigEntry

ENTITY_DESCRIPTIONS: tuple[SensorEntityDescription, ...] = (
    SensorEntityDescription(
        key="day_of_cycle",
        name="Day of cycle",
        icon="mdi:calendar-today",
    ),
    SensorEntityDescription(
        key="cycle_phase",
        name="Cycle phase",
        icon="mdi:moon-waning-crescent",
        device_class=SensorDeviceClass.ENUM,
        options=[phase.value for phase in CyclePhase],
    ),
    SensorEntityDescription(
        key="next_period_start",
        name="Next period start",
        device_class=SensorDeviceClass.DATE,
    ),
    SensorEntityDescription(
        key="ovulation_date",
        name="Predicted ovulation",
        device_class=SensorDeviceClass.DATE,
        icon="mdi:egg-outline",
    ),
    SensorEntityDescription(
        key="fertile_window",
        name="Predicted fertile window",
        icon="mdi:calendar-heart",
    ),
    SensorEntityDescription(
        key="cycle_length",
        name="Average cycle length",
        icon="mdi:calendar-clock",
        native_unit_of_measurement=UnitOfTime.DAYS,
    ),
    SensorEntityDescription(
        key="period_length",
        name="Average period length",
        icon="mdi:calendar-range",
        native_unit_of_measurement=UnitOfTime.DAYS,
    ),
    SensorEntityDescription(
        key="prediction_confidence",
        name="Prediction confidence",
        icon="mdi:chart-bell-curve",
        device_class=SensorDeviceClass.ENUM,
        options=[level.value for level in Confidence],
    ),
    SensorEntityDescription(
        key="cycle_variation",
        name="Cycle variation",
        icon="mdi:chart-bell-curve-cumulative",
        native_unit_of_measurement=UnitOfTime.DAYS,
    ),
    SensorEntityDescription(
        key="cycle_health",
        name="Cycle health",
        icon="mdi:heart-pulse",
        device_class=SensorDeviceClass.ENUM,
        options=[status.value for status in HealthStatus],
    ),
)


async def async_setup_entry(
    _hass: HomeAssistant,
    entry: CycleSenseConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensor entities."""
    async_add_entities(
        CycleSenseSensor(entry.runtime_data.coordinator, description)
        for description in ENTITY_DESCRIPTIONS
    )


class CycleSenseSensor(CycleSenseEntity, SensorEntity):
    """Representation of a cyclesense sensor."""

    def __init__(
        self,
        coordinator: CycleSenseUpdateCoordinator,
        description: SensorEntityDescription,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator, description.key)
        self.entity_description = description

    @property
    def native_value(self) -> str | int | float | date | None:
        """Return the state of the sensor."""
        data = self.coordinator.data
        prediction = data.get("prediction")
        key = self.entity_description.key
        if key in ("day_of_cycle", "cycle_length", "period_length"):
            return data.get(key)
        if key == "cycle_phase":
            phase = data.get("cycle_phase")
            return phase.value if phase else None
        if key == "cycle_health":
            return data["health"].status.value
        if prediction is None:
            return None
        if key == "next_period_start":
            return prediction.start
        if key == "ovulation_date":
            return prediction.ovulation_date
        if key == "fertile_window":
            return f"{prediction.fertile_window_start} - {prediction.fertile_window_end}"
        if key == "prediction_confidence":
            return prediction.confidence.value
        if key == "cycle_variation":
            return prediction.variation
        return None

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        """Return prediction and analysis details for the richer sensors."""
        data = self.coordinator.data
        key = self.entity_description.key
        if key == "cycle_health":
            health = data["health"]
            return {
                "severity": health.severity.value,
                "message": health.message,
                "recommendations": list(health.recommendations),
                **asdict(health.details),
            }
        prediction = data.get("prediction")
        if key == "next_period_start" and prediction is not None:
            return {
                "predicted_end": prediction.end.isoformat(),
                "earliest_start": prediction.earliest_start.isoformat(),
                "latest_start": prediction.latest_start.isoformat(),
                "is_irregular": prediction.is_irregular,
                "cycles_used": prediction.cycles_used,
                "warnings": list(prediction.warnings),
            }
        if key == "fertile_window":
            return {"fertility_score_today": data.get("fertility_score", 0)}
        return None
