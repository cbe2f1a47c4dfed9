"""
Tests for regularity classification and prediction bands.
"""

from datetime import date, timedelta

from core.config import Settings
from services.cycle_framework import (
    CyclePhase,
    CycleProfile,
    PredictionConfidenceModel,
    Regularity,
)


def history_from_lengths(first: date, lengths):
    """Period start dates from a first start and successive cycle lengths."""
    starts = [first]
    for length in lengths:
        starts.append(starts[-1] + timedelta(days=length))
    return starts


class TestClassify:
    """Regular vs irregular from logged period starts."""

    def test_consistent_history_is_regular(self, profile):
        model = PredictionConfidenceModel()
        history = [date(2023, 12, 8), date(2024, 1, 5), date(2024, 2, 2), date(2024, 3, 1)]
        assert model.classify(profile, history) == Regularity.REGULAR

    def test_spread_within_tolerance_is_regular(self, profile):
        model = PredictionConfidenceModel()
        history = history_from_lengths(date(2023, 9, 1), [27, 30, 28, 29])
        assert model.classify(profile, history) == Regularity.REGULAR

    def test_wide_spread_is_irregular(self, profile):
        model = PredictionConfidenceModel()
        history = [date(2024, 1, 1), date(2024, 1, 25), date(2024, 3, 1)]
        assert model.classify(profile, history) == Regularity.IRREGULAR

    def test_single_cycle_is_irregular(self, profile):
        """One recorded length is not enough to call a cycle regular."""
        model = PredictionConfidenceModel()
        assert model.classify(profile, [date(2024, 2, 2), date(2024, 3, 1)]) == Regularity.IRREGULAR
        assert model.classify(profile, []) == Regularity.IRREGULAR

    def test_self_reported_irregular_wins(self, anchor_date):
        model = PredictionConfidenceModel()
        profile = CycleProfile(anchor_date=anchor_date, is_irregular=True)
        history = [date(2023, 12, 8), date(2024, 1, 5), date(2024, 2, 2), date(2024, 3, 1)]
        assert model.classify(profile, history) == Regularity.IRREGULAR

    def test_only_recent_cycles_count(self, profile):
        """Old outliers beyond the lookback window are ignored."""
        model = PredictionConfidenceModel()
        history = history_from_lengths(date(2022, 10, 1), [40, 20, 28, 29, 27, 28, 30, 28])
        assert model.classify(profile, history) == Regularity.REGULAR

    def test_history_order_does_not_matter(self, profile):
        model = PredictionConfidenceModel()
        history = [date(2024, 3, 1), date(2023, 12, 8), date(2024, 2, 2), date(2024, 1, 5)]
        assert model.classify(profile, history) == Regularity.REGULAR

    def test_cycle_lengths(self):
        history = [date(2024, 1, 1), date(2024, 1, 29), date(2024, 2, 28)]
        assert PredictionConfidenceModel.cycle_lengths(history) == [28, 30]


class TestPredictionWindow:
    """Point estimate with uncertainty band."""

    def test_regular_window_is_narrow(self, profile, anchor_date):
        model = PredictionConfidenceModel()
        day = anchor_date + timedelta(days=12)
        window = model.prediction_window(day, profile, Regularity.REGULAR)
        assert window.phase == CyclePhase.OVULATORY
        assert window.cycle_day == 13
        assert window.width_days == 3
        assert window.window_start == day - timedelta(days=1)
        assert window.window_end == day + timedelta(days=1)
        assert window.is_widened is False

    def test_irregular_window_is_wide(self, profile, anchor_date):
        model = PredictionConfidenceModel()
        day = anchor_date + timedelta(days=12)
        window = model.prediction_window(day, profile, Regularity.IRREGULAR)
        assert window.width_days == 9
        assert window.is_widened is True

    def test_point_estimate_unchanged_by_regularity(self, profile, anchor_date):
        model = PredictionConfidenceModel()
        for offset in range(0, 56, 3):
            day = anchor_date + timedelta(days=offset)
            regular = model.prediction_window(day, profile, Regularity.REGULAR)
            irregular = model.prediction_window(day, profile, Regularity.IRREGULAR)
            assert regular.phase == irregular.phase
            assert regular.cycle_day == irregular.cycle_day

    def test_no_data_returns_none(self, empty_profile):
        model = PredictionConfidenceModel()
        assert model.prediction_window(date(2024, 3, 5), empty_profile, Regularity.REGULAR) is None


class TestWideningWindow:
    """Possible-period days around predicted starts."""

    def test_irregular_profile_gets_window(self, profile):
        model = PredictionConfidenceModel()
        days = model.widening_window_days(profile, Regularity.IRREGULAR)
        assert len(days) == 27
        assert date(2024, 3, 25) in days
        assert date(2024, 4, 2) in days
        assert date(2024, 5, 28) in days
        assert date(2024, 3, 24) not in days

    def test_regular_profile_gets_nothing(self, profile):
        model = PredictionConfidenceModel()
        assert model.widening_window_days(profile, Regularity.REGULAR) == set()

    def test_no_anchor_gets_nothing(self, empty_profile):
        model = PredictionConfidenceModel()
        assert model.widening_window_days(empty_profile, Regularity.IRREGULAR) == set()

    def test_radius_from_settings(self, profile):
        settings = Settings(WIDENING_WINDOW_RADIUS_DAYS=2)
        model = PredictionConfidenceModel.from_settings(settings)
        days = model.widening_window_days(profile, Regularity.IRREGULAR, num_cycles=1)
        assert days == {date(2024, 3, 29) + timedelta(days=o) for o in range(-2, 3)}
