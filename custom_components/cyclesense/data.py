"""Custom types for cyclesense."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from homeassistant.config_entries import ConfigEntry

if TYPE_CHECKING:
    from .coordinator import CycleSenseUpdateCoordinator
    from .storage import CycleSenseStorage

type CycleSenseConfigEntry = ConfigEntry[CycleSenseData]


@dataclass
class CycleSenseData:
    """Runtime data for the integration."""

    coordinator: CycleSenseUpdateCoordinator
    storage: CycleSenseStorage
