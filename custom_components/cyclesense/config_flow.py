"""Config flow for cyclesense."""

from __future__ import annotations

from datetime import date
from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.helpers import selector

from .const import (
    CONF_LAST_PERIOD,
    CONF_PERIOD_LENGTH,
    CONF_SHOW_FERTILITY_ON_CAL,
    DEFAULT_PERIOD_LENGTH,
    DOMAIN,
)


class CycleSenseFlowHandler(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for the integration."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}
        if user_input is not None:
            data = dict(user_input)
            if data.get(CONF_PERIOD_LENGTH) is not None:
                data[CONF_PERIOD_LENGTH] = int(data[CONF_PERIOD_LENGTH])
            try:
                if data.get(CONF_LAST_PERIOD):
                    date.fromisoformat(data[CONF_LAST_PERIOD])
            except ValueError:
                errors[CONF_LAST_PERIOD] = "invalid_date"
            else:
                await self.async_set_unique_id(DOMAIN)
                self._abort_if_unique_id_configured()
                options = {
                    CONF_SHOW_FERTILITY_ON_CAL: bool(
                        data.pop(CONF_SHOW_FERTILITY_ON_CAL, False)
                    )
                }
                return self.async_create_entry(title="CycleSense", data=data, options=options)

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Optional(CONF_LAST_PERIOD): selector.DateSelector(),
                    vol.Required(
                        CONF_PERIOD_LENGTH, default=DEFAULT_PERIOD_LENGTH
                    ): selector.NumberSelector(
                        selector.NumberSelectorConfig(
                            min=1, max=14, mode=selector.NumberSelectorMode.BOX
                        )
                    ),
                }
            ),
            errors=errors,
        )

    async def async_step_import(
        self, import_data: dict[str, Any]
    ) -> config_entries.ConfigFlowResult:
        """Handle import from YAML."""
        return await self.async_step_user(import_data)

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: config_entries.ConfigEntry,
    ) -> config_entries.OptionsFlow:
        return CycleSenseOptionsFlow()


class CycleSenseOptionsFlow(config_entries.OptionsFlow):
    """Handle options for the integration."""

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> config_entries.ConfigFlowResult:
        if user_input is not None:
            return self.async_create_entry(data=user_input)

        current = self.config_entry.options
        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Optional(
                        CONF_SHOW_FERTILITY_ON_CAL,
                        default=bool(current.get(CONF_SHOW_FERTILITY_ON_CAL, False)),
                    ): selector.BooleanSelector(),
                }
            ),
        )
