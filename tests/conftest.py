"""Fixtures for cyclesense tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

import pytest
from homeassistant.core import HomeAssistant
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.cyclesense.const import DOMAIN
from custom_components.cyclesense.coordinator import CycleSenseUpdateCoordinator
from custom_components.cyclesense.data import CycleSenseData
from custom_components.cyclesense.services import async_register_services
from custom_components.cyclesense.storage import CycleSenseStorage

ENTRY_ID = "test_entry"
HISTORY_KEY = f"{DOMAIN}.{ENTRY_ID}.history"
BACKUP_KEY = f"{HISTORY_KEY}.backup"


def stored(data: dict[str, Any], key: str = HISTORY_KEY) -> dict[str, Any]:
    """Wrap data the way Home Assistant's Store persists it."""
    return {"version": 1, "minor_version": 1, "key": key, "data": data}


@pytest.fixture
async def storage(hass: HomeAssistant) -> CycleSenseStorage:
    """Return loaded, empty storage."""
    store = CycleSenseStorage(hass, ENTRY_ID)
    await store.async_load()
    return store


@pytest.fixture
async def config_entry(
    hass: HomeAssistant, storage: CycleSenseStorage
) -> AsyncGenerator[MockConfigEntry]:
    """Return a config entry wired to storage and a coordinator, with services registered."""
    entry = MockConfigEntry(domain=DOMAIN, title="CycleSense", data={}, entry_id=ENTRY_ID)
    entry.add_to_hass(hass)
    coordinator = CycleSenseUpdateCoordinator(hass, config_entry=entry, storage=storage)
    entry.runtime_data = CycleSenseData(coordinator=coordinator, storage=storage)
    async_register_services(hass)
    yield entry
    await coordinator.async_shutdown()
