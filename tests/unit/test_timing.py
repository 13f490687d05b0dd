"""
Unit Tests for the Time & Window Classifier

Elapsed-hours arithmetic, window banding, pressure limits and clock-time
resolution.
"""
import pytest
from datetime import datetime, timedelta, timezone

from strokecode.core.timing import (
    GENERAL_BP_LIMIT,
    THROMBOLYSIS_BP_LIMIT,
    TreatmentWindow,
    WINDOW_GUIDANCE,
    blood_pressure_limits,
    classify_window,
    elapsed_hours,
    ensure_aware,
    in_window_dependent_range,
    normalize_onset,
    pressure_exceeds,
    resolve_clock_time,
    to_24_hour,
    within_thrombolysis_window,
)


class TestElapsedHours:

    def test_unknown_onset_is_zero(self, now):
        assert elapsed_hours(None, now) == 0.0

    def test_three_hours(self, now):
        assert elapsed_hours(now - timedelta(hours=3), now) == pytest.approx(3.0)

    def test_future_onset_floored_at_zero(self, now):
        assert elapsed_hours(now + timedelta(minutes=5), now) == 0.0

    def test_never_negative_for_past_onsets(self, now):
        for minutes in range(0, 60 * 30, 37):
            assert elapsed_hours(now - timedelta(minutes=minutes), now) >= 0

    def test_naive_onset_treated_as_utc(self, now):
        naive = (now - timedelta(hours=2)).replace(tzinfo=None)
        assert elapsed_hours(naive, now) == pytest.approx(2.0)

    def test_rederived_as_now_advances(self, now):
        onset = now - timedelta(hours=1)
        first = elapsed_hours(onset, now)
        later = elapsed_hours(onset, now + timedelta(seconds=30))
        assert later > first


class TestClassifyWindow:

    @pytest.mark.parametrize("hours,expected", [
        (0.0, TreatmentWindow.WITHIN_STANDARD),
        (4.5, TreatmentWindow.WITHIN_STANDARD),
        (4.51, TreatmentWindow.EXTENDED),
        (9.0, TreatmentWindow.EXTENDED),
        (9.01, TreatmentWindow.LATE_EVT),
        (24.0, TreatmentWindow.LATE_EVT),
        (24.01, TreatmentWindow.OUTSIDE),
        (100.0, TreatmentWindow.OUTSIDE),
    ])
    def test_bands_and_boundaries(self, hours, expected):
        assert classify_window(hours) == expected

    def test_partition_is_total(self):
        hours = 0.0
        while hours < 30:
            assert classify_window(hours) in TreatmentWindow
            hours += 0.25

    def test_every_window_has_guidance(self):
        assert set(WINDOW_GUIDANCE) == set(TreatmentWindow)
        assert "24h" in WINDOW_GUIDANCE[TreatmentWindow.OUTSIDE].message


class TestWindowDependentRange:

    @pytest.mark.parametrize("hours,expected", [
        (None, False),
        (2.9, False),
        (3.0, False),
        (3.01, True),
        (4.5, True),
        (4.51, False),
    ])
    def test_half_open_range(self, hours, expected):
        assert in_window_dependent_range(hours) is expected

    def test_thrombolysis_window_excludes_zero(self):
        assert not within_thrombolysis_window(0)
        assert within_thrombolysis_window(0.1)
        assert within_thrombolysis_window(4.5)
        assert not within_thrombolysis_window(4.6)


class TestBloodPressureLimits:

    def test_known_onset_inside_window(self):
        assert blood_pressure_limits(3.0, onset_unknown=False) == THROMBOLYSIS_BP_LIMIT

    def test_known_onset_outside_window(self):
        assert blood_pressure_limits(6.0, onset_unknown=False) == GENERAL_BP_LIMIT

    def test_unknown_onset_uses_general_ceiling(self):
        assert blood_pressure_limits(0.0, onset_unknown=True) == GENERAL_BP_LIMIT

    def test_pressure_exceeds(self):
        assert pressure_exceeds(186, 90, THROMBOLYSIS_BP_LIMIT)
        assert pressure_exceeds(150, 111, THROMBOLYSIS_BP_LIMIT)
        assert not pressure_exceeds(185, 110, THROMBOLYSIS_BP_LIMIT)


class TestClockTime:

    @pytest.mark.parametrize("hour,period,expected", [
        (12, "AM", 0),
        (1, "am", 1),
        (12, "PM", 12),
        (7, "PM", 19),
    ])
    def test_to_24_hour(self, hour, period, expected):
        assert to_24_hour(hour, period) == expected

    def test_earlier_today(self, now):
        resolved = resolve_clock_time(9, 15, now)
        assert resolved == now.replace(hour=9, minute=15)

    def test_later_than_now_rolls_back_one_day(self, now):
        resolved = resolve_clock_time(18, 0, now)
        assert resolved == now.replace(hour=18) - timedelta(days=1)
        assert resolved <= now

    def test_normalize_future_onset(self, now):
        assert normalize_onset(now + timedelta(hours=2), now) == now + timedelta(hours=2) - timedelta(days=1)
        assert normalize_onset(now - timedelta(hours=2), now) == now - timedelta(hours=2)
        assert normalize_onset(None, now) is None

    def test_ensure_aware(self):
        naive = datetime(2026, 1, 1, 8, 0)
        assert ensure_aware(naive).tzinfo == timezone.utc
