"""Setup for the cyclesense integration."""

from __future__ import annotations

from datetime import date, timedelta
from typing import TYPE_CHECKING

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.const import Platform
from homeassistant.helpers import config_validation as cv
from homeassistant.util.ulid import ulid_now

from .const import (
    CONF_LAST_PERIOD,
    CONF_PERIOD_LENGTH,
    CONF_SHOW_FERTILITY_ON_CAL,
    DEFAULT_PERIOD_LENGTH,
    DOMAIN,
    LOGGER,
)
from .coordinator import CycleSenseUpdateCoordinator
from .data import CycleSenseConfigEntry, CycleSenseData
from .models import PeriodRecord
from .services import async_register_services
from .storage import CycleSenseStorage

if TYPE_CHECKING:
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.typing import ConfigType

PLATFORMS: list[Platform] = [
    Platform.SENSOR,
    Platform.BINARY_SENSOR,
    Platform.CALENDAR,
]


CONFIG_SCHEMA = vol.Schema(
    {
        DOMAIN: vol.Schema(
            {
                vol.Optional(CONF_LAST_PERIOD): cv.date,
                vol.Optional(
                    CONF_PERIOD_LENGTH, default=DEFAULT_PERIOD_LENGTH
                ): cv.positive_int,
                vol.Optional(CONF_SHOW_FERTILITY_ON_CAL, default=False): cv.boolean,
            }
        )
    },
    extra=vol.ALLOW_EXTRA,
)


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up services and import YAML configuration."""
    async_register_services(hass)
    if DOMAIN not in config:
        return True
    conf = config[DOMAIN]
    data = {
        CONF_PERIOD_LENGTH: conf[CONF_PERIOD_LENGTH],
        CONF_SHOW_FERTILITY_ON_CAL: conf[CONF_SHOW_FERTILITY_ON_CAL],
    }
    if CONF_LAST_PERIOD in conf:
        data[CONF_LAST_PERIOD] = conf[CONF_LAST_PERIOD].isoformat()
    hass.async_create_task(
        hass.config_entries.flow.async_init(
            DOMAIN,
            context={"source": config_entries.SOURCE_IMPORT},
            data=data,
        )
    )
    return True


async def _async_seed_last_period(
    storage: CycleSenseStorage, entry: CycleSenseConfigEntry
) -> None:
    """Record the period given during setup while the history is still empty."""
    last_period_str = entry.data.get(CONF_LAST_PERIOD)
    if not last_period_str or storage.periods:
        return
    try:
        start = date.fromisoformat(last_period_str)
    except ValueError:
        LOGGER.warning("Ignoring invalid %s in config entry: %s", CONF_LAST_PERIOD, last_period_str)
        return
    period_len = entry.data.get(CONF_PERIOD_LENGTH, DEFAULT_PERIOD_LENGTH)
    await storage.async_add_period(
        PeriodRecord(
            id=ulid_now(),
            start=start,
            end=start + timedelta(days=max(0, period_len - 1)),
        )
    )


async def async_setup_entry(hass: HomeAssistant, entry: CycleSenseConfigEntry) -> bool:
    """Set up cyclesense from a config entry."""
    storage = CycleSenseStorage(hass, entry.entry_id)
    await storage.async_load()
    await _async_seed_last_period(storage, entry)

    coordinator = CycleSenseUpdateCoordinator(hass, config_entry=entry, storage=storage)
    entry.runtime_data = CycleSenseData(coordinator=coordinator, storage=storage)
    await coordinator.async_config_entry_first_refresh()
    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))
    return True


async def async_unload_entry(hass: HomeAssistant, entry: CycleSenseConfigEntry) -> bool:
    """Unload a config entry."""
    return await hass.config_entries.async_unload_platforms(entry, PLATFORMS)


async def async_reload_entry(hass: HomeAssistant, entry: CycleSenseConfigEntry) -> None:
    """Reload when config entry options change."""
    await hass.config_entries.async_reload(entry.entry_id)
