"""Persistent storage for cyclesense period history."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from datetime import date
from typing import Any

from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.storage import Store
from homeassistant.util.ulid import ulid_now

from .const import DOMAIN, LOGGER
from .models import PeriodRecord
from .stats import CycleSnapshot, compute_snapshot

STORAGE_VERSION = 1

UPDATABLE_FIELDS = frozenset({"start", "end", "flow", "symptoms"})


class PeriodStateError(HomeAssistantError):
    """Raised when a period cannot be started or ended in the current state."""


class CycleSenseStorage:
    """Manage the period history of one config entry.

    Every mutation runs under a lock: the record list is changed, the
    snapshot recomputed and the state persisted before the next mutation
    starts. The previously persisted state is copied to a backup store
    before each write so a corrupted primary file can be recovered.
    """

    def __init__(self, hass: HomeAssistant, entry_id: str) -> None:
        self.hass = hass
        self.entry_id = entry_id
        key = f"{DOMAIN}.{entry_id}.history"
        self._store: Store[dict[str, Any]] = Store(hass, STORAGE_VERSION, key)
        self._backup: Store[dict[str, Any]] = Store(hass, STORAGE_VERSION, f"{key}.backup")
        self._lock = asyncio.Lock()
        self._periods: list[PeriodRecord] = []
        self._snapshot = CycleSnapshot()
        self._persisted: dict[str, Any] | None = None

    @property
    def periods(self) -> list[PeriodRecord]:
        return list(self._periods)

    @property
    def snapshot(self) -> CycleSnapshot:
        """Return the periods and their derived averages."""
        return self._snapshot

    @property
    def active_period(self) -> PeriodRecord | None:
        """Return the open period, the most recent one if several are open."""
        open_periods = [p for p in self._periods if p.is_open]
        if not open_periods:
            return None
        return max(open_periods, key=lambda p: p.start)

    async def _async_read(self, store: Store[dict[str, Any]]) -> list[PeriodRecord] | None:
        try:
            data = await store.async_load()
        except HomeAssistantError:
            LOGGER.exception("Failed to read stored history %s", store.key)
            return None
        if data is None:
            return None
        try:
            return [PeriodRecord.from_dict(p) for p in data["periods"]]
        except (AttributeError, KeyError, TypeError, ValueError):
            LOGGER.exception("Stored history %s is corrupted", store.key)
            return None

    async def async_load(self) -> None:
        """Load history, falling back to the backup copy and then to defaults."""
        periods = await self._async_read(self._store)
        restored = False
        if periods is None:
            periods = await self._async_read(self._backup)
            restored = periods is not None
        if periods is None:
            periods = []

        self._periods = sorted(periods, key=lambda p: p.start)
        self._snapshot = compute_snapshot(self._periods)
        self._persisted = self._serialize()
        if restored:
            LOGGER.warning("Restored period history for %s from backup", self.entry_id)
            await self._store.async_save(self._persisted)
        if (open_count := sum(1 for p in self._periods if p.is_open)) > 1:
            LOGGER.warning(
                "Found %s open periods; only one period should be active at a time",
                open_count,
            )

    def _serialize(self) -> dict[str, Any]:
        return {
            "periods": [p.to_dict() for p in self._periods],
            "average_cycle_length": self._snapshot.average_cycle_length,
            "average_period_length": self._snapshot.average_period_length,
        }

    async def _async_commit(self) -> None:
        """Recompute the snapshot and persist, backing up the previous state first."""
        self._periods.sort(key=lambda p: p.start)
        self._snapshot = compute_snapshot(self._periods)
        if self._persisted is not None:
            await self._backup.async_save(self._persisted)
        data = self._serialize()
        await self._store.async_save(data)
        self._persisted = data

    def _find(self, period_id: str) -> PeriodRecord | None:
        return next((p for p in self._periods if p.id == period_id), None)

    @staticmethod
    def _check_record(record: PeriodRecord) -> None:
        if record.end is not None and record.end < record.start:
            LOGGER.warning(
                "Period %s ends (%s) before it starts (%s); it will be ignored by statistics",
                record.id,
                record.end,
                record.start,
            )

    def _check_no_open_period(self) -> None:
        if any(p.is_open for p in self._periods):
            raise PeriodStateError(
                "A period is already active; end it before starting a new one"
            )

    async def async_add_period(self, record: PeriodRecord) -> None:
        """Append a new period; the caller assigns its id.

        A period without an end is refused while another period is open.
        """
        async with self._lock:
            if self._find(record.id) is not None:
                raise ValueError(f"Period {record.id} already exists")
            if record.is_open:
                self._check_no_open_period()
            self._check_record(record)
            self._periods.append(record)
            await self._async_commit()

    async def async_update_period(
        self,
        period_id: str,
        fields: dict[str, Any],
        *,
        strict: bool = False,
    ) -> bool:
        """Merge fields into a period.

        Returns False, changing nothing, when the id is unknown. With
        ``strict`` an end before the start raises PeriodStateError instead
        of being stored.
        """
        if unknown := set(fields) - UPDATABLE_FIELDS:
            raise ValueError(f"Cannot update period fields: {', '.join(sorted(unknown))}")
        async with self._lock:
            current = self._find(period_id)
            if current is None:
                LOGGER.debug("No period with id %s to update", period_id)
                return False
            if "symptoms" in fields:
                fields = {**fields, "symptoms": list(fields["symptoms"] or [])}
            updated = replace(current, **fields)
            if strict and updated.end is not None and updated.end < updated.start:
                raise PeriodStateError(
                    f"Period end {updated.end} is before its start {updated.start}"
                )
            if updated.is_open and not current.is_open:
                self._check_no_open_period()
            self._check_record(updated)
            self._periods[self._periods.index(current)] = updated
            await self._async_commit()
            return True

    async def async_delete_period(self, period_id: str) -> bool:
        """Remove a period. Returns False when the id is unknown."""
        async with self._lock:
            remaining = [p for p in self._periods if p.id != period_id]
            if len(remaining) == len(self._periods):
                LOGGER.debug("No period with id %s to delete", period_id)
                return False
            self._periods = remaining
            await self._async_commit()
            return True

    async def async_start_period(self, record: PeriodRecord) -> None:
        """Open a new period, refusing while another one is still open."""
        async with self._lock:
            self._check_no_open_period()
            if self._find(record.id) is not None:
                raise ValueError(f"Period {record.id} already exists")
            self._periods.append(replace(record, end=None))
            await self._async_commit()

    async def async_end_period(self, end: date) -> PeriodRecord:
        """Close the active period on ``end`` and return the updated record."""
        async with self._lock:
            active = self.active_period
            if active is None:
                raise PeriodStateError("There is no active period to end")
            if end < active.start:
                raise PeriodStateError(
                    f"Period end {end} is before its start {active.start}"
                )
            updated = replace(active, end=end)
            self._periods[self._periods.index(active)] = updated
            await self._async_commit()
            return updated

    async def async_import_history(
        self,
        periods: list[PeriodRecord],
        *,
        mode: str = "merge",
    ) -> None:
        """Import periods in bulk.

        - mode="replace": overwrite existing history with the provided periods;
          repeated ids get a new id
        - mode="merge" (default): an imported period updates the stored period
          with the same id, else the first stored period with the same start,
          else it is added. An imported end date, flow or symptom list
          replaces the stored one when present.
        """
        async with self._lock:
            if mode == "replace":
                merged: list[PeriodRecord] = []
                seen: set[str] = set()
                for p in periods:
                    if p.id in seen:
                        LOGGER.debug("Assigning a new id to duplicate period %s", p.id)
                        p = replace(p, id=ulid_now())
                    seen.add(p.id)
                    merged.append(p)
            else:
                merged = list(self._periods)
                for p in periods:
                    index = next(
                        (i for i, e in enumerate(merged) if e.id == p.id),
                        None,
                    )
                    if index is None:
                        index = next(
                            (i for i, e in enumerate(merged) if e.start == p.start),
                            None,
                        )
                    if index is None:
                        merged.append(p)
                        continue
                    existing = merged[index]
                    merged[index] = replace(
                        existing,
                        start=p.start,
                        end=p.end if p.end is not None else existing.end,
                        flow=p.flow or existing.flow,
                        symptoms=list(p.symptoms) or existing.symptoms,
                    )

            self._periods = merged
            for p in self._periods:
                self._check_record(p)
            await self._async_commit()
