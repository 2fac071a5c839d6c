"""Cycle health classification for cyclesense."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import StrEnum
import math

from .const import (
    CONCERNING_CYCLE_MAX,
    HIGH_VARIABILITY_THRESHOLD,
    IRREGULARITY_THRESHOLD,
    MIN_HEALTH_PERIODS,
    NORMAL_CYCLE_MAX,
    NORMAL_CYCLE_MIN,
    NORMAL_PERIOD_MAX,
)
from .models import PeriodRecord
from .stats import (
    completed_periods,
    cycle_lengths,
    deviating_samples,
    mean,
    population_std,
    round_half_up,
)


class HealthStatus(StrEnum):
    HEALTHY = "healthy"
    IRREGULAR = "irregular"
    CONCERNING = "concerning"
    INSUFFICIENT_DATA = "insufficient_data"


class Severity(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class HealthDetails:
    """Numbers behind a health classification."""

    average_cycle_length: float = 0.0
    standard_deviation: float = 0.0
    cycle_lengths: list[int] = field(default_factory=list)
    irregularity_count: int = 0
    total_cycles: int = 0


@dataclass
class HealthAnalysis:
    """Longitudinal regularity assessment."""

    status: HealthStatus
    severity: Severity
    message: str
    details: HealthDetails = field(default_factory=HealthDetails)
    recommendations: list[str] = field(default_factory=list)


def analyze_cycle_health(periods: Iterable[PeriodRecord]) -> HealthAnalysis:
    """Classify regularity over the full completed history.

    The first matching rule wins, most severe first. Fewer than three
    completed periods yields ``insufficient_data``.
    """
    completed = completed_periods(periods)
    if len(completed) < MIN_HEALTH_PERIODS:
        return HealthAnalysis(
            status=HealthStatus.INSUFFICIENT_DATA,
            severity=Severity.LOW,
            message="Not enough data to analyze cycle health yet",
            details=HealthDetails(total_cycles=max(0, len(completed) - 1)),
            recommendations=[
                f"Keep logging your periods; at least {MIN_HEALTH_PERIODS} completed "
                "periods are needed for a health analysis.",
                "Record both the start and end date of each period.",
            ],
        )

    lengths = cycle_lengths(completed)
    average = round_half_up(mean(lengths), 1)
    std_dev = round_half_up(population_std(lengths), 1)
    irregular_count = deviating_samples(lengths, IRREGULARITY_THRESHOLD)
    long_periods = sum(1 for p in completed if (p.duration or 0) > NORMAL_PERIOD_MAX)

    details = HealthDetails(
        average_cycle_length=average,
        standard_deviation=std_dev,
        cycle_lengths=lengths,
        irregularity_count=irregular_count,
        total_cycles=len(lengths),
    )

    if average < NORMAL_CYCLE_MIN or average > CONCERNING_CYCLE_MAX:
        analysis = HealthAnalysis(
            status=HealthStatus.CONCERNING,
            severity=Severity.HIGH,
            message="Your cycle length is significantly outside the normal range",
            details=details,
            recommendations=[
                "Consult a gynecologist promptly to discuss your cycle length.",
                "Bring your logged cycle history to the appointment.",
            ],
        )
    elif std_dev > HIGH_VARIABILITY_THRESHOLD:
        analysis = HealthAnalysis(
            status=HealthStatus.CONCERNING,
            severity=Severity.MEDIUM,
            message="Your cycles show high variability",
            details=details,
            recommendations=[
                "Consider consulting a healthcare provider about your cycle variability.",
                "Track stress, sleep, diet and exercise, which can affect your cycle.",
            ],
        )
    elif (
        not NORMAL_CYCLE_MIN <= average <= NORMAL_CYCLE_MAX
        or std_dev > IRREGULARITY_THRESHOLD
        or irregular_count >= math.ceil(0.5 * len(lengths))
        or long_periods > 0
    ):
        analysis = HealthAnalysis(
            status=HealthStatus.IRREGULAR,
            severity=Severity.MEDIUM,
            message="Your cycles show some irregularity",
            details=details,
            recommendations=[
                "Keep monitoring your cycles for the next few months.",
                "Mention persistent irregularity at your next check-up.",
            ],
        )
    else:
        analysis = HealthAnalysis(
            status=HealthStatus.HEALTHY,
            severity=Severity.LOW,
            message="Your cycles look regular and healthy",
            details=details,
            recommendations=[
                "Your cycles are within the normal range. Keep tracking to stay informed.",
            ],
        )

    if long_periods > 0:
        analysis.recommendations.append(
            f"{long_periods} period(s) lasted more than {NORMAL_PERIOD_MAX} days; "
            "prolonged bleeding is worth discussing with a doctor."
        )
    if average < NORMAL_CYCLE_MIN:
        analysis.recommendations.append(
            "Short cycles may indicate hormonal issues; a hormone check can help."
        )
    elif average > NORMAL_CYCLE_MAX:
        analysis.recommendations.append(
            "Long cycles may indicate PCOS or other conditions; consider a medical evaluation."
        )
    return analysis
