"""Next period prediction for cyclesense.

Predictions use only the most recent cycles (up to six) so that a change in
the user's rhythm shows up quickly. Confidence is derived from how many
cycle lengths were available and how much they vary.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import StrEnum

from .const import (
    DEFAULT_CYCLE_LENGTH,
    FERTILE_DAYS_AFTER_OVULATION,
    FERTILE_DAYS_BEFORE_OVULATION,
    IRREGULARITY_THRESHOLD,
    LUTEAL_PHASE_DAYS,
    MAX_PREDICTION_CYCLES,
    NORMAL_CYCLE_MAX,
    NORMAL_CYCLE_MIN,
    NORMAL_PERIOD_MAX,
    NORMAL_PERIOD_MIN,
)
from .models import PeriodRecord
from .stats import (
    completed_periods,
    cycle_lengths,
    deviating_samples,
    mean,
    period_durations,
    population_std,
    round_half_up,
    round_int,
)

WARNING_FEW_CYCLES = (
    "Prediction is based on fewer than 3 cycles; "
    "accuracy will improve as you log more periods."
)
WARNING_IRREGULAR = (
    "Your cycles vary considerably. Consider discussing them with a healthcare provider."
)
WARNING_CYCLE_RANGE = (
    f"Your average cycle length is outside the typical {NORMAL_CYCLE_MIN}-{NORMAL_CYCLE_MAX} day range."
)
WARNING_PERIOD_RANGE = (
    f"Your average period length is outside the typical {NORMAL_PERIOD_MIN}-{NORMAL_PERIOD_MAX} day range."
)


class Confidence(StrEnum):
    """Trust level of a prediction."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"


@dataclass
class PredictionResult:
    """Forecast of the next period."""

    start: date
    end: date
    ovulation_date: date
    confidence: Confidence
    earliest_start: date
    latest_start: date
    fertile_window_start: date
    fertile_window_end: date
    average_cycle_length: int
    average_period_length: int
    is_irregular: bool = False
    cycles_used: int = 0
    variation: float = 0.0
    warnings: list[str] = field(default_factory=list)


def _confidence(samples: int, variation: float) -> Confidence:
    if samples >= 3 and variation <= 3:
        return Confidence.HIGH
    if samples >= 2 and variation <= 5:
        return Confidence.MODERATE
    return Confidence.LOW


def predict_next_period(periods: Iterable[PeriodRecord]) -> PredictionResult | None:
    """Predict the next period from the recent completed periods.

    Returns None when no completed period has been logged yet.
    """
    completed = completed_periods(periods)
    if not completed:
        return None

    newest_first = completed[::-1]
    last_period = newest_first[0]
    cycles_to_use = max(1, min(len(completed) - 1, MAX_PREDICTION_CYCLES))
    recent = newest_first[: cycles_to_use + 1]
    recent.reverse()

    lengths = cycle_lengths(recent)
    average_cycle = round_int(mean(lengths)) if lengths else DEFAULT_CYCLE_LENGTH
    average_period = round_int(mean(period_durations(recent)))
    variation = round_half_up(population_std(lengths), 1)

    confidence = _confidence(len(lengths), variation)
    is_irregular = (
        variation > IRREGULARITY_THRESHOLD
        or deviating_samples(lengths, IRREGULARITY_THRESHOLD) > 0
    )

    warnings: list[str] = []
    if len(lengths) < 3:
        warnings.append(WARNING_FEW_CYCLES)
    if is_irregular:
        warnings.append(WARNING_IRREGULAR)
    if not NORMAL_CYCLE_MIN <= average_cycle <= NORMAL_CYCLE_MAX:
        warnings.append(WARNING_CYCLE_RANGE)
    if not NORMAL_PERIOD_MIN <= average_period <= NORMAL_PERIOD_MAX:
        warnings.append(WARNING_PERIOD_RANGE)

    start = last_period.start + timedelta(days=average_cycle)
    ovulation = start - timedelta(days=LUTEAL_PHASE_DAYS)
    half_width = timedelta(days=3 if confidence is Confidence.HIGH else 4)

    return PredictionResult(
        start=start,
        end=start + timedelta(days=average_period - 1),
        ovulation_date=ovulation,
        confidence=confidence,
        earliest_start=start - half_width,
        latest_start=start + half_width,
        fertile_window_start=ovulation - timedelta(days=FERTILE_DAYS_BEFORE_OVULATION),
        fertile_window_end=ovulation + timedelta(days=FERTILE_DAYS_AFTER_OVULATION),
        average_cycle_length=average_cycle,
        average_period_length=average_period,
        is_irregular=is_irregular,
        cycles_used=len(lengths),
        variation=variation,
        warnings=warnings,
    )
