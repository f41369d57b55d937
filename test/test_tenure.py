# Test type: unit
# Validation: years + months tenure conversion, formatting and validation
# Command: pytest test/test_tenure.py -v

import pytest

from fincalc import config
from fincalc.utils.tenure import (
    MSG_MONTHS_NEGATIVE,
    MSG_MONTHS_RANGE,
    MSG_TENURE_EMPTY,
    MSG_YEARS_NEGATIVE,
    format_tenure,
    legacy_to_years_months,
    max_tenure_message,
    normalize_years_months,
    resolve_fd_tenure,
    validate_years_months,
    years_months_to_months,
    years_months_to_years,
)


class TestConversion:
    def test_to_years(self):
        assert years_months_to_years(2, 6) == pytest.approx(2.5)

    def test_to_months(self):
        assert years_months_to_months(2, 6) == 30

    def test_missing_and_blank_count_as_zero(self):
        assert years_months_to_months(None, "") == 0
        assert years_months_to_months("3", None) == 36

    def test_normalize(self):
        assert normalize_years_months(0, 15) == (1, 3)
        assert normalize_years_months(2, 0) == (2, 0)

    @pytest.mark.parametrize(
        "tenure, unit, expected",
        [
            (18, "months", (1, 6)),
            (12, "months", (1, 0)),
            (2.5, "years", (2, 6)),
            (3, "years", (3, 0)),
            (0, "years", (0, 0)),
            (None, "months", (0, 0)),
        ],
    )
    def test_legacy(self, tenure, unit, expected):
        assert legacy_to_years_months(tenure, unit) == expected


class TestFormatting:
    @pytest.mark.parametrize(
        "years, months, text",
        [
            (0, 0, "0 months"),
            (0, 1, "1 month"),
            (0, 6, "6 months"),
            (1, 0, "1 year"),
            (5, 0, "5 years"),
            (1, 1, "1 year 1 month"),
            (2, 6, "2 years 6 months"),
        ],
    )
    def test_format(self, years, months, text):
        assert format_tenure(years, months) == text

    def test_max_tenure_message(self):
        assert max_tenure_message(120) == "Maximum tenure is 10 years (120 months)"
        assert max_tenure_message(30) == "Maximum tenure is 2 years 6 months (30 months)"


class TestValidation:
    def test_valid(self):
        assert validate_years_months(1, 6) is None

    @pytest.mark.parametrize(
        "years, months, message",
        [
            (-1, 0, MSG_YEARS_NEGATIVE),
            (1, -1, MSG_MONTHS_NEGATIVE),
            (1, 12, MSG_MONTHS_RANGE),
            (0, 0, MSG_TENURE_EMPTY),
            (None, None, MSG_TENURE_EMPTY),
        ],
    )
    def test_invalid(self, years, months, message):
        assert validate_years_months(years, months) == message

    def test_months_field_limit_from_config(self):
        assert validate_years_months(0, config.MAX_MONTHS_FIELD) is None
        assert validate_years_months(0, config.MAX_MONTHS_FIELD + 1) == MSG_MONTHS_RANGE
        assert MSG_MONTHS_RANGE == "Months must be between 0 and 11"

    def test_maximum(self):
        assert validate_years_months(10, 0, max_months=120) is None
        assert validate_years_months(10, 1, max_months=120) == "Maximum tenure is 10 years (120 months)"


class TestResolveFdTenure:
    def test_new_fields_normalised(self):
        assert resolve_fd_tenure({"tenureYears": 0, "tenureMonths": 15}) == (1, 3)

    def test_legacy_fallback(self):
        assert resolve_fd_tenure({"tenure": 18, "tenureUnit": "months"}) == (1, 6)

    def test_new_fields_win_over_legacy(self):
        assert resolve_fd_tenure({"tenureYears": 2, "tenure": 18, "tenureUnit": "months"}) == (2, 0)

    def test_no_tenure(self):
        assert resolve_fd_tenure({}) is None
        assert resolve_fd_tenure({"tenure": 5}) is None
