"""Tests for the cyclesense config and options flows."""

from __future__ import annotations

from collections.abc import Generator
from unittest.mock import AsyncMock, patch

import pytest
from homeassistant import config_entries
from homeassistant.core import HomeAssistant
from homeassistant.data_entry_flow import FlowResultType
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.cyclesense.const import (
    CONF_LAST_PERIOD,
    CONF_PERIOD_LENGTH,
    CONF_SHOW_FERTILITY_ON_CAL,
    DOMAIN,
)


@pytest.fixture(autouse=True)
def auto_enable_custom_integrations(enable_custom_integrations: None) -> None:
    """Load the integration from custom_components."""


@pytest.fixture
def mock_setup_entry() -> Generator[AsyncMock]:
    with patch(
        "custom_components.cyclesense.async_setup_entry", return_value=True
    ) as mock_setup:
        yield mock_setup


async def test_user_flow(hass: HomeAssistant, mock_setup_entry: AsyncMock) -> None:
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    assert result["type"] is FlowResultType.FORM
    assert result["step_id"] == "user"

    result = await hass.config_entries.flow.async_configure(
        result["flow_id"],
        {CONF_LAST_PERIOD: "2024-03-01", CONF_PERIOD_LENGTH: 4.0},
    )
    assert result["type"] is FlowResultType.CREATE_ENTRY
    assert result["title"] == "CycleSense"
    assert result["data"] == {CONF_LAST_PERIOD: "2024-03-01", CONF_PERIOD_LENGTH: 4}
    assert result["options"] == {CONF_SHOW_FERTILITY_ON_CAL: False}


async def test_user_flow_invalid_date(
    hass: HomeAssistant, mock_setup_entry: AsyncMock
) -> None:
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    result = await hass.config_entries.flow.async_configure(
        result["flow_id"],
        {CONF_LAST_PERIOD: "2024-02-31", CONF_PERIOD_LENGTH: 5},
    )
    assert result["type"] is FlowResultType.FORM
    assert result["errors"] == {CONF_LAST_PERIOD: "invalid_date"}


async def test_single_instance(hass: HomeAssistant, mock_setup_entry: AsyncMock) -> None:
    MockConfigEntry(domain=DOMAIN, unique_id=DOMAIN, data={}).add_to_hass(hass)
    result = await hass.config_entries.flow.async_init(
        DOMAIN, context={"source": config_entries.SOURCE_USER}
    )
    result = await hass.config_entries.flow.async_configure(
        result["flow_id"], {CONF_PERIOD_LENGTH: 5}
    )
    assert result["type"] is FlowResultType.ABORT
    assert result["reason"] == "already_configured"


async def test_import_flow(hass: HomeAssistant, mock_setup_entry: AsyncMock) -> None:
    result = await hass.config_entries.flow.async_init(
        DOMAIN,
        context={"source": config_entries.SOURCE_IMPORT},
        data={CONF_PERIOD_LENGTH: 6, CONF_SHOW_FERTILITY_ON_CAL: True},
    )
    assert result["type"] is FlowResultType.CREATE_ENTRY
    assert result["data"] == {CONF_PERIOD_LENGTH: 6}
    assert result["options"] == {CONF_SHOW_FERTILITY_ON_CAL: True}


async def test_options_flow(hass: HomeAssistant, mock_setup_entry: AsyncMock) -> None:
    entry = MockConfigEntry(domain=DOMAIN, unique_id=DOMAIN, data={}, options={})
    entry.add_to_hass(hass)

    result = await hass.config_entries.options.async_init(entry.entry_id)
    assert result["type"] is FlowResultType.FORM
    assert result["step_id"] == "init"

    result = await hass.config_entries.options.async_configure(
        result["flow_id"], {CONF_SHOW_FERTILITY_ON_CAL: True}
    )
    assert result["type"] is FlowResultType.CREATE_ENTRY
    assert entry.options == {CONF_SHOW_FERTILITY_ON_CAL: True}
