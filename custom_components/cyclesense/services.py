"""Services for cyclesense."""

from __future__ import annotations

from dataclasses import replace
import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import voluptuous as vol
from homeassistant.core import (
    HomeAssistant,
    ServiceCall,
    ServiceResponse,
    SupportsResponse,
    callback,
)
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv, entity_registry as er
from homeassistant.util import dt as dt_util
from homeassistant.util.ulid import ulid_now

from .const import DOMAIN, FLOW_LEVELS, LOGGER
from .models import PeriodRecord
from .storage import PeriodStateError

if TYPE_CHECKING:
    from .data import CycleSenseData

SERVICE_ADD_PERIOD = "add_period"
SERVICE_UPDATE_PERIOD = "update_period"
SERVICE_DELETE_PERIOD = "delete_period"
SERVICE_START_PERIOD = "start_period"
SERVICE_END_PERIOD = "end_period"
SERVICE_IMPORT_HISTORY = "import_history"

_TARGET = {
    vol.Optional("entity_id"): cv.entity_ids,
    vol.Optional("entry_id"): cv.string,
}

_ADD_SCHEMA = vol.Schema(
    {
        vol.Required("start"): cv.date,
        vol.Optional("end"): cv.date,
        vol.Optional("flow"): vol.In(FLOW_LEVELS),
        vol.Optional("symptoms", default=[]): [cv.string],
        **_TARGET,
    }
)

_UPDATE_SCHEMA = vol.Schema(
    {
        vol.Required("period_id"): cv.string,
        vol.Optional("start"): cv.date,
        vol.Optional("end"): vol.Any(None, cv.date),
        vol.Optional("flow"): vol.Any(None, vol.In(FLOW_LEVELS)),
        vol.Optional("symptoms"): [cv.string],
        **_TARGET,
    }
)

_DELETE_SCHEMA = vol.Schema({vol.Required("period_id"): cv.string, **_TARGET})

_START_SCHEMA = vol.Schema(
    {
        vol.Optional("date"): cv.date,
        vol.Optional("flow"): vol.In(FLOW_LEVELS),
        vol.Optional("symptoms", default=[]): [cv.string],
        **_TARGET,
    }
)

_END_SCHEMA = vol.Schema({vol.Optional("date"): cv.date, **_TARGET})

_PERIOD_ITEM = vol.Schema(
    {
        vol.Optional("id"): cv.string,
        vol.Required("start"): cv.date,
        vol.Optional("end"): cv.date,
        vol.Optional("flow"): vol.In(FLOW_LEVELS),
        vol.Optional("symptoms", default=[]): [cv.string],
    }
)

_IMPORT_SCHEMA = vol.Schema(
    {
        vol.Optional("json"): cv.string,
        vol.Optional("file"): cv.string,
        vol.Optional("periods", default=[]): [_PERIOD_ITEM],
        vol.Optional("mode", default="merge"): vol.In(["merge", "replace"]),
        **_TARGET,
    }
)


def _resolve_entry_id(hass: HomeAssistant, call: ServiceCall) -> str | None:
    """Resolve a config entry_id from a service call.

    Priority:
    1) entity_id provided -> map to config_entry_id via entity registry
    2) entry_id provided
    3) if only one entry for DOMAIN, use that
    """
    if entity_ids := call.data.get("entity_id"):
        ent_reg = er.async_get(hass)
        for entity_id in entity_ids:
            ent = ent_reg.async_get(entity_id)
            if ent and ent.config_entry_id:
                return ent.config_entry_id

    if entry_id := call.data.get("entry_id"):
        return entry_id

    entries = hass.config_entries.async_entries(DOMAIN)
    if len(entries) == 1:
        return entries[0].entry_id

    return None


def _runtime_data(hass: HomeAssistant, call: ServiceCall) -> CycleSenseData:
    target_entry_id = _resolve_entry_id(hass, call)
    if not target_entry_id:
        LOGGER.error(
            "%s: Could not resolve a config entry. Provide entity_id or entry_id",
            call.service,
        )
        raise ServiceValidationError(
            "Could not resolve a CycleSense entry; provide entity_id or entry_id"
        )
    entry = hass.config_entries.async_get_entry(target_entry_id)
    data = getattr(entry, "runtime_data", None) if entry else None
    if entry is None or entry.domain != DOMAIN or data is None:
        LOGGER.error("%s: Invalid or unknown entry_id: %s", call.service, target_entry_id)
        raise ServiceValidationError(f"Unknown CycleSense entry: {target_entry_id}")
    return data


def _check_dates(start: Any, end: Any) -> None:
    if start is not None and end is not None and end < start:
        raise ServiceValidationError(f"Period end {end} is before its start {start}")


def _record_from_item(item: dict[str, Any]) -> PeriodRecord:
    """Build a record from a service item, a native export or a web app export."""
    if "start" in item:
        item = {**item, "start_date": item["start"], "end_date": item.get("end")}
    record = PeriodRecord.from_dict(item)
    if record.flow is not None and record.flow not in FLOW_LEVELS:
        record = replace(record, flow=None)
    return record


async def _async_load_import_payload(
    hass: HomeAssistant, call: ServiceCall
) -> list[dict[str, Any]]:
    items: list[dict[str, Any]] = list(call.data.get("periods", []))

    raw_json: str | None = None
    if file_path := call.data.get("file"):
        try:
            raw_json = await hass.async_add_executor_job(
                Path(hass.config.path(file_path)).read_text, "utf-8"
            )
        except OSError as err:
            LOGGER.exception("import_history: Failed to read file: %s", file_path)
            raise HomeAssistantError(
                "Import failed: file not found or unreadable. See logs for details."
            ) from err
    if not raw_json:
        raw_json = call.data.get("json")

    if raw_json:
        try:
            obj = json.loads(raw_json)
        except ValueError as err:
            LOGGER.exception("import_history: Failed to parse json payload")
            raise HomeAssistantError("Import failed: invalid JSON. See logs for details.") from err
        # Native and web app backups share the {"periods": [...]} envelope
        if isinstance(obj, dict) and isinstance(obj.get("periods"), list):
            items.extend(obj["periods"])
        elif isinstance(obj, list):
            items.extend(obj)
        else:
            LOGGER.error("import_history: Unsupported JSON structure")
            raise HomeAssistantError(
                "Import failed: unsupported JSON structure. See logs for details."
            )
    return items


@callback
def async_register_services(hass: HomeAssistant) -> None:
    """Register integration services once."""
    if hass.services.has_service(DOMAIN, SERVICE_ADD_PERIOD):
        return

    async def _handle_add_period(call: ServiceCall) -> ServiceResponse:
        data = _runtime_data(hass, call)
        _check_dates(call.data["start"], call.data.get("end"))
        record = PeriodRecord(
            id=ulid_now(),
            start=call.data["start"],
            end=call.data.get("end"),
            flow=call.data.get("flow"),
            symptoms=list(call.data.get("symptoms", [])),
        )
        try:
            await data.storage.async_add_period(record)
        except PeriodStateError as err:
            raise ServiceValidationError(str(err)) from err
        await data.coordinator.async_request_refresh()
        return {"period_id": record.id}

    async def _handle_update_period(call: ServiceCall) -> None:
        data = _runtime_data(hass, call)
        period_id: str = call.data["period_id"]
        fields = {
            name: call.data[name]
            for name in ("start", "end", "flow", "symptoms")
            if name in call.data
        }
        try:
            updated = await data.storage.async_update_period(period_id, fields, strict=True)
        except PeriodStateError as err:
            raise ServiceValidationError(str(err)) from err
        if not updated:
            LOGGER.warning("update_period: No period with id %s", period_id)
            return
        await data.coordinator.async_request_refresh()

    async def _handle_delete_period(call: ServiceCall) -> None:
        data = _runtime_data(hass, call)
        period_id: str = call.data["period_id"]
        if not await data.storage.async_delete_period(period_id):
            LOGGER.warning("delete_period: No period with id %s", period_id)
            return
        await data.coordinator.async_request_refresh()

    async def _handle_start_period(call: ServiceCall) -> ServiceResponse:
        data = _runtime_data(hass, call)
        record = PeriodRecord(
            id=ulid_now(),
            start=call.data.get("date") or dt_util.now().date(),
            flow=call.data.get("flow"),
            symptoms=list(call.data.get("symptoms", [])),
        )
        try:
            await data.storage.async_start_period(record)
        except PeriodStateError as err:
            raise ServiceValidationError(str(err)) from err
        await data.coordinator.async_request_refresh()
        return {"period_id": record.id}

    async def _handle_end_period(call: ServiceCall) -> ServiceResponse:
        data = _runtime_data(hass, call)
        try:
            record = await data.storage.async_end_period(
                call.data.get("date") or dt_util.now().date()
            )
        except PeriodStateError as err:
            raise ServiceValidationError(str(err)) from err
        await data.coordinator.async_request_refresh()
        return {"period_id": record.id, "duration": record.duration}

    async def _handle_import_history(call: ServiceCall) -> None:
        data = _runtime_data(hass, call)
        records: list[PeriodRecord] = []
        for item in await _async_load_import_payload(hass, call):
            try:
                records.append(_record_from_item(item))
            except (AttributeError, KeyError, TypeError, ValueError):
                LOGGER.exception("import_history: Skipping invalid period entry: %s", item)

        if not records:
            LOGGER.error("import_history: No valid periods found to import")
            raise HomeAssistantError(
                "Import failed: no valid records found. See logs for details."
            )

        await data.storage.async_import_history(records, mode=call.data.get("mode", "merge"))
        LOGGER.debug("import_history: Imported %s periods", len(records))
        await data.coordinator.async_request_refresh()

    for name, handler, schema, response in (
        (SERVICE_ADD_PERIOD, _handle_add_period, _ADD_SCHEMA, SupportsResponse.OPTIONAL),
        (SERVICE_UPDATE_PERIOD, _handle_update_period, _UPDATE_SCHEMA, SupportsResponse.NONE),
        (SERVICE_DELETE_PERIOD, _handle_delete_period, _DELETE_SCHEMA, SupportsResponse.NONE),
        (SERVICE_START_PERIOD, _handle_start_period, _START_SCHEMA, SupportsResponse.OPTIONAL),
        (SERVICE_END_PERIOD, _handle_end_period, _END_SCHEMA, SupportsResponse.OPTIONAL),
        (SERVICE_IMPORT_HISTORY, _handle_import_history, _IMPORT_SCHEMA, SupportsResponse.NONE),
    ):
        hass.services.async_register(
            DOMAIN, name, handler, schema=schema, supports_response=response
        )
    LOGGER.debug("Registered %s services", DOMAIN)
