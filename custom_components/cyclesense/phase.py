"""Cycle day, phase and fertility helpers for cyclesense."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from enum import StrEnum

from .const import (
    LUTEAL_PHASE_DAYS,
    OVULATION_PHASE_MARGIN,
)
from .models import PeriodRecord
from .prediction import PredictionResult
from .stats import completed_periods


class CyclePhase(StrEnum):
    MENSTRUAL = "menstrual"
    FOLLICULAR = "follicular"
    OVULATORY = "ovulatory"
    LUTEAL = "luteal"


def is_ovulation_phase(
    periods: Iterable[PeriodRecord], average_cycle_length: int, day: date
) -> bool:
    """Return true if ``day`` is within two days of the expected ovulation.

    Expected ovulation is ``average_cycle_length - 14`` days after the start
    of the most recent completed period.
    """
    completed = completed_periods(periods)
    if not completed:
        return False
    days_since = (day - completed[-1].start).days
    expected = average_cycle_length - LUTEAL_PHASE_DAYS
    return expected - OVULATION_PHASE_MARGIN <= days_since <= expected + OVULATION_PHASE_MARGIN


def cycle_day(periods: Iterable[PeriodRecord], today: date) -> int | None:
    """Return the 1-based day of the current cycle.

    Open periods count as the start of a new cycle; malformed records and
    periods starting in the future are ignored.
    """
    starts = [
        p.start
        for p in periods
        if p.start <= today and (p.is_open or p.is_completed)
    ]
    if not starts:
        return None
    return (today - max(starts)).days + 1


def cycle_phase(
    day_of_cycle: int, average_cycle_length: int, average_period_length: int
) -> CyclePhase:
    days_since = day_of_cycle - 1
    if days_since < average_period_length:
        return CyclePhase.MENSTRUAL
    if days_since <= average_cycle_length / 2:
        return CyclePhase.FOLLICULAR
    if days_since <= average_cycle_length / 2 + 2:
        return CyclePhase.OVULATORY
    return CyclePhase.LUTEAL


def fertility_score(prediction: PredictionResult | None, day: date) -> int:
    """Score 0-100 for how fertile ``day`` is expected to be."""
    if prediction is None:
        return 0
    if day == prediction.ovulation_date:
        return 100
    if prediction.fertile_window_start <= day <= prediction.fertile_window_end:
        distance = abs((day - prediction.ovulation_date).days)
        return max(0, 100 - distance * 20)
    return 0
