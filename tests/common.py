"""Helpers for building period histories in tests."""

from __future__ import annotations

from datetime import date, timedelta
from itertools import count

from custom_components.cyclesense.models import PeriodRecord

_ids = count(1)


def make_period(
    start: date,
    length: int | None = 5,
    *,
    end: date | None = None,
    period_id: str | None = None,
) -> PeriodRecord:
    """Build a period lasting ``length`` days; ``length=None`` leaves it open."""
    if end is None and length is not None:
        end = start + timedelta(days=length - 1)
    return PeriodRecord(id=period_id or f"p{next(_ids)}", start=start, end=end)


def build_history(
    first_start: date,
    cycle_lengths: list[int],
    period_length: int = 5,
) -> list[PeriodRecord]:
    """Build completed periods separated by the given cycle lengths."""
    periods = [make_period(first_start, period_length)]
    start = first_start
    for length in cycle_lengths:
        start += timedelta(days=length)
        periods.append(make_period(start, period_length))
    return periods
