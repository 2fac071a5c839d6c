"""Tests for the cyclesense data coordinator."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

from homeassistant.core import HomeAssistant
from homeassistant.util import dt as dt_util
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.cyclesense.health import HealthStatus
from custom_components.cyclesense.phase import CyclePhase
from custom_components.cyclesense.storage import CycleSenseStorage

from .common import build_history, make_period


async def test_refresh_without_history(
    hass: HomeAssistant, config_entry: MockConfigEntry
) -> None:
    coordinator = config_entry.runtime_data.coordinator
    await coordinator.async_refresh()

    data = coordinator.data
    assert data["cycle_length"] == 28
    assert data["period_length"] == 5
    assert data["day_of_cycle"] is None
    assert data["cycle_phase"] is None
    assert data["prediction"] is None
    assert data["fertility_score"] == 0
    assert not data["currently_menstruating"]
    assert data["health"].status is HealthStatus.INSUFFICIENT_DATA


async def test_refresh_with_history(
    hass: HomeAssistant, config_entry: MockConfigEntry, storage: CycleSenseStorage
) -> None:
    today = dt_util.now().date()
    first = today - timedelta(days=28 * 3 + 14)
    await storage.async_import_history(build_history(first, [28, 28, 28]))

    coordinator = config_entry.runtime_data.coordinator
    await coordinator.async_refresh()

    data = coordinator.data
    assert data["day_of_cycle"] == 15
    assert data["cycle_phase"] is CyclePhase.FOLLICULAR
    assert data["ovulation_phase"]
    assert data["fertility_score"] == 100
    assert not data["currently_menstruating"]
    assert data["prediction"].start == storage.periods[-1].start + timedelta(days=28)
    assert data["health"].status is HealthStatus.HEALTHY


async def test_open_period_is_menstruating(
    hass: HomeAssistant, config_entry: MockConfigEntry, storage: CycleSenseStorage
) -> None:
    today = dt_util.now().date()
    await storage.async_start_period(make_period(today - timedelta(days=1), None))

    coordinator = config_entry.runtime_data.coordinator
    await coordinator.async_refresh()

    assert coordinator.data["currently_menstruating"]
    assert coordinator.data["day_of_cycle"] == 2
    assert coordinator.data["cycle_phase"] is CyclePhase.MENSTRUAL
    assert coordinator.data["active_period"] == storage.active_period


async def test_refresh_is_recomputed_from_storage(
    hass: HomeAssistant, config_entry: MockConfigEntry, storage: CycleSenseStorage
) -> None:
    coordinator = config_entry.runtime_data.coordinator
    with patch(
        "custom_components.cyclesense.coordinator.predict_next_period",
        return_value=None,
    ) as mock_predict:
        await coordinator.async_refresh()
        await coordinator.async_refresh()
    assert mock_predict.call_count == 2
