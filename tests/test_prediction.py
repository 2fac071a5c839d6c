"""Tests for next period prediction."""

from __future__ import annotations

from datetime import date, timedelta

from custom_components.cyclesense.prediction import (
    WARNING_CYCLE_RANGE,
    WARNING_FEW_CYCLES,
    WARNING_IRREGULAR,
    WARNING_PERIOD_RANGE,
    Confidence,
    predict_next_period,
)

from .common import build_history, make_period


class TestNoPrediction:
    def test_no_periods(self) -> None:
        assert predict_next_period([]) is None

    def test_only_open_and_malformed_periods(self) -> None:
        periods = [
            make_period(date(2024, 1, 1), None),
            make_period(date(2024, 2, 10), end=date(2024, 2, 9)),
        ]
        assert predict_next_period(periods) is None


class TestSinglePeriod:
    def test_uses_defaults(self) -> None:
        result = predict_next_period([make_period(date(2024, 1, 1), 5)])
        assert result is not None
        assert result.start == date(2024, 1, 29)
        assert result.end == date(2024, 2, 2)
        assert result.ovulation_date == date(2024, 1, 15)
        assert result.confidence is Confidence.LOW
        assert result.cycles_used == 0
        assert result.variation == 0.0
        assert not result.is_irregular
        assert result.warnings == [WARNING_FEW_CYCLES]

    def test_window_is_four_days_when_not_high(self) -> None:
        result = predict_next_period([make_period(date(2024, 1, 1), 5)])
        assert result is not None
        assert result.earliest_start == date(2024, 1, 25)
        assert result.latest_start == date(2024, 2, 2)

    def test_fertile_window_around_ovulation(self) -> None:
        result = predict_next_period([make_period(date(2024, 1, 1), 5)])
        assert result is not None
        assert result.fertile_window_start == date(2024, 1, 10)
        assert result.fertile_window_end == date(2024, 1, 16)


class TestRegularHistory:
    def test_two_samples_round_half_up(self) -> None:
        periods = [
            make_period(date(2024, 1, 1)),
            make_period(date(2024, 1, 29)),
            make_period(date(2024, 2, 27)),
        ]
        result = predict_next_period(periods)
        assert result is not None
        assert result.average_cycle_length == 29
        assert result.variation == 0.5
        assert result.cycles_used == 2
        # Two samples can reach at most moderate confidence
        assert result.confidence is Confidence.MODERATE
        assert not result.is_irregular
        assert result.start == date(2024, 3, 27)
        assert result.warnings == [WARNING_FEW_CYCLES]

    def test_high_confidence_with_three_stable_cycles(self) -> None:
        periods = build_history(date(2024, 1, 1), [28, 29, 28])
        result = predict_next_period(periods)
        assert result is not None
        assert result.confidence is Confidence.HIGH
        assert result.warnings == []
        last_start = periods[-1].start
        assert result.start == last_start + timedelta(days=28)
        assert result.earliest_start == result.start - timedelta(days=3)
        assert result.latest_start == result.start + timedelta(days=3)

    def test_input_order_does_not_matter(self) -> None:
        periods = build_history(date(2024, 1, 1), [28, 30, 29])
        assert predict_next_period(periods) == predict_next_period(periods[::-1])

    def test_idempotent(self) -> None:
        periods = build_history(date(2024, 1, 1), [27, 31, 29, 28])
        assert predict_next_period(periods) == predict_next_period(periods)

    def test_period_length_from_recent_periods(self) -> None:
        periods = build_history(date(2024, 1, 1), [28, 28, 28], period_length=4)
        result = predict_next_period(periods)
        assert result is not None
        assert result.average_period_length == 4
        assert result.end == result.start + timedelta(days=3)


class TestRecencyWindow:
    def test_uses_at_most_six_cycles(self) -> None:
        # Two very old long cycles followed by six regular ones
        periods = build_history(date(2023, 1, 1), [60, 60, 28, 28, 28, 28, 28, 28])
        result = predict_next_period(periods)
        assert result is not None
        assert result.cycles_used == 6
        assert result.average_cycle_length == 28
        assert result.variation == 0.0
        assert result.confidence is Confidence.HIGH
        assert not result.is_irregular

    def test_ignores_open_period_as_anchor(self) -> None:
        periods = build_history(date(2024, 1, 1), [28, 28, 28])
        periods.append(make_period(periods[-1].start + timedelta(days=28), None))
        result = predict_next_period(periods)
        assert result is not None
        assert result.start == periods[-2].start + timedelta(days=28)


class TestIrregularity:
    def test_single_outlier_flags_irregular(self) -> None:
        periods = build_history(date(2024, 1, 1), [28, 28, 45, 28])
        result = predict_next_period(periods)
        assert result is not None
        assert result.is_irregular
        assert result.confidence is Confidence.LOW
        assert result.warnings == [WARNING_IRREGULAR]

    def test_high_variation_flags_irregular(self) -> None:
        periods = build_history(date(2024, 1, 1), [20, 38, 20, 38])
        result = predict_next_period(periods)
        assert result is not None
        assert result.variation == 9.0
        assert result.is_irregular

    def test_outlier_increases_variation(self) -> None:
        periods = build_history(date(2024, 1, 1), [28, 29, 28])
        before = predict_next_period(periods)
        periods.append(make_period(periods[-1].start + timedelta(days=50)))
        after = predict_next_period(periods)
        assert before is not None and after is not None
        assert after.variation > before.variation

    def test_more_stable_samples_never_lower_confidence(self) -> None:
        few = predict_next_period(build_history(date(2024, 1, 1), [26, 33]))
        many = predict_next_period(build_history(date(2024, 1, 1), [28, 29, 28, 29]))
        order = [Confidence.LOW, Confidence.MODERATE, Confidence.HIGH]
        assert few is not None and many is not None
        assert order.index(many.confidence) >= order.index(few.confidence)


class TestRangeWarnings:
    def test_short_cycles_and_long_periods(self) -> None:
        periods = build_history(date(2024, 1, 1), [18, 18, 18], period_length=9)
        result = predict_next_period(periods)
        assert result is not None
        assert result.warnings == [WARNING_CYCLE_RANGE, WARNING_PERIOD_RANGE]

    def test_warnings_keep_order(self) -> None:
        periods = build_history(date(2024, 1, 1), [40], period_length=1)
        result = predict_next_period(periods)
        assert result is not None
        assert result.warnings == [
            WARNING_FEW_CYCLES,
            WARNING_CYCLE_RANGE,
            WARNING_PERIOD_RANGE,
        ]
