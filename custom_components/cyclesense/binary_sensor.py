"""Binary sensors for cyclesense."""

from __future__ import annotations

from typing import TYPE_CHECKING

from homeassistant.components.binary_sensor import (
    BinarySensorEntity,
    BinarySensorEntityDescription,
)

from .entity import CycleSenseEntity

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .coordinator import CycleSenseUpdateCoordinator
    from .data import CycleSenseConfigEntry

ENTITY_DESCRIPTIONS: tuple[BinarySensorEntityDescription, ...] = (
    BinarySensorEntityDescription(
        key="currently_menstruating",
        name="Currently menstruating",
        icon="mdi:water",
    ),
    BinarySensorEntityDescription(
        key="ovulation_phase",
        name="Ovulation phase",
        icon="mdi:egg-outline",
    ),
    BinarySensorEntityDescription(
        key="irregular_cycle",
        name="Irregular cycle",
        icon="mdi:alert-circle-outline",
    ),
)


async def async_setup_entry(
    _hass: HomeAssistant,
    entry: CycleSenseConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up binary sensor entities."""
    async_add_entities(
        CycleSenseBinarySensor(entry.runtime_data.coordinator, description)
        for description in ENTITY_DESCRIPTIONS
    )


class CycleSenseBinarySensor(CycleSenseEntity, BinarySensorEntity):
    """Representation of a cyclesense binary sensor."""

    def __init__(
        self,
        coordinator: CycleSenseUpdateCoordinator,
        description: BinarySensorEntityDescription,
    ) -> None:
        """Initialize the binary sensor."""
        super().__init__(coordinator, description.key)
        self.entity_description = description

    @property
    def is_on(self) -> bool:
        data = self.coordinator.data
        if self.entity_description.key == "irregular_cycle":
            prediction = data.get("prediction")
            return bool(prediction and prediction.is_irregular)
        return bool(data.get(self.entity_description.key))
