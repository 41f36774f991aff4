"""
Tests for period presets and selectable month options.
"""

from datetime import date

import pytest

from progress_panel.analytics.errors import AnalysisValidationError, ValidationCode
from progress_panel.analytics.periods import (
    Period,
    PeriodPreset,
    default_period,
    period_options,
    resolve_period,
)


class TestResolvePeriod:
    """Test preset resolution against a fixed day."""

    def test_current_year(self, today):
        assert resolve_period("current-year", today=today) == Period("2024-01", "2024-06")

    def test_last_quarter(self, today):
        assert resolve_period(PeriodPreset.LAST_QUARTER, today=today) == Period("2024-01", "2024-03")

    def test_last_quarter_rolls_back_year(self):
        assert resolve_period("last-quarter", today=date(2024, 2, 10)) == Period("2023-10", "2023-12")

    def test_last_quarter_from_q4(self):
        assert resolve_period("last-quarter", today=date(2024, 11, 1)) == Period("2024-07", "2024-09")

    def test_last_6_months(self, today):
        assert resolve_period("last-6-months", today=today) == Period("2024-01", "2024-06")

    def test_last_12_months(self, today):
        assert resolve_period("last-12-months", today=today) == Period("2023-07", "2024-06")

    def test_custom(self, today):
        assert resolve_period("custom", "2023-04", "2024-03", today=today) == Period("2023-04", "2024-03")

    def test_custom_missing_end(self, today):
        with pytest.raises(AnalysisValidationError) as exc_info:
            resolve_period("custom", "2023-04", None, today=today)
        assert exc_info.value.code == ValidationCode.MISSING_PERIOD

    def test_custom_inverted(self, today):
        with pytest.raises(AnalysisValidationError) as exc_info:
            resolve_period("custom", "2024-05", "2024-04", today=today)
        assert exc_info.value.code == ValidationCode.INVERTED_PERIOD

    def test_custom_malformed(self, today):
        with pytest.raises(AnalysisValidationError) as exc_info:
            resolve_period("custom", "2024-13", "2024-12", today=today)
        assert exc_info.value.code == ValidationCode.INVALID_PERIOD

    def test_unknown_preset(self, today):
        with pytest.raises(AnalysisValidationError) as exc_info:
            resolve_period("last-decade", today=today)
        assert exc_info.value.code == ValidationCode.INVALID_PRESET


class TestPeriodOptions:
    """Test the month selector options."""

    def test_default_length(self, today):
        options = period_options(today)
        assert len(options) == 25

    def test_oldest_first(self, today):
        options = period_options(today)
        assert options[0] == {"value": "2022-06", "label": "2022年6月"}
        assert options[-1] == {"value": "2024-06", "label": "2024年6月"}

    def test_default_period(self, today):
        assert default_period(today) == Period("2023-07", "2024-06")
        assert default_period(today, months=3).to_dict() == {"start": "2024-04", "end": "2024-06"}
