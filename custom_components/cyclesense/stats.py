"""Shared cycle statistics for cyclesense.

Every average, deviation and rounding used by the snapshot, the prediction
engine and the health classifier goes through this module so that all of
them agree on the numbers.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
import statistics

from .const import DEFAULT_CYCLE_LENGTH, DEFAULT_PERIOD_LENGTH
from .models import PeriodRecord


@dataclass(frozen=True)
class CycleSnapshot:
    """Derived averages over the whole record set."""

    periods: list[PeriodRecord] = field(default_factory=list)
    average_cycle_length: int = DEFAULT_CYCLE_LENGTH
    average_period_length: int = DEFAULT_PERIOD_LENGTH


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round half away from zero (28.5 -> 29, 0.25 -> 0.3).

    Works on the shortest decimal repr of the float, so values such as
    0.25 or 2.675 round the way they read rather than the way they are
    stored in binary.
    """
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def round_int(value: float) -> int:
    return int(round_half_up(value))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean, 0.0 for an empty sequence."""
    if not values:
        return 0.0
    return statistics.fmean(values)


def population_std(values: Sequence[float]) -> float:
    """Population standard deviation, 0.0 with fewer than two samples."""
    if len(values) < 2:
        return 0.0
    return statistics.pstdev(values)


def deviating_samples(values: Sequence[float], threshold: float) -> int:
    """Count samples further than ``threshold`` from the mean."""
    avg = mean(values)
    return sum(1 for v in values if abs(v - avg) > threshold)


def completed_periods(periods: Iterable[PeriodRecord]) -> list[PeriodRecord]:
    """Return completed periods sorted by start ascending."""
    return sorted((p for p in periods if p.is_completed), key=lambda p: p.start)


def cycle_lengths(periods: Sequence[PeriodRecord]) -> list[int]:
    """Start-to-start gaps between consecutive periods (input sorted ascending)."""
    return [
        (periods[i + 1].start - periods[i].start).days
        for i in range(len(periods) - 1)
    ]


def period_durations(periods: Iterable[PeriodRecord]) -> list[int]:
    return [p.duration for p in periods if p.duration is not None]


def compute_snapshot(periods: Iterable[PeriodRecord]) -> CycleSnapshot:
    """Recompute the averages over every completed period."""
    records = list(periods)
    completed = completed_periods(records)

    average_period_length = DEFAULT_PERIOD_LENGTH
    durations = period_durations(completed)
    if durations:
        average_period_length = round_int(mean(durations))

    average_cycle_length = DEFAULT_CYCLE_LENGTH
    lengths = cycle_lengths(completed)
    if lengths:
        average_cycle_length = round_int(mean(lengths))

    return CycleSnapshot(
        periods=records,
        average_cycle_length=average_cycle_length,
        average_period_length=average_period_length,
    )
