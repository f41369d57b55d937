# Test type: unit
# Validation: CII lookup/projection and indexed LTCG
# Command: pytest test/test_indexation.py -v

from datetime import date

import pytest

from fincalc.utils.indexation import (
    cii_for_year,
    current_financial_year,
    indexed_cost,
    tax_with_indexation,
)


class TestCii:
    def test_notified_years(self):
        assert cii_for_year(2001) == 100
        assert cii_for_year(2024) == 363

    def test_before_base_year_uses_base(self):
        assert cii_for_year(1995) == 100

    def test_projected_years(self):
        assert cii_for_year(2027) == 409
        assert cii_for_year(2028) > cii_for_year(2027)

    @pytest.mark.parametrize(
        "today, fy",
        [(date(2025, 3, 31), 2024), (date(2025, 4, 1), 2025), (date(2026, 12, 1), 2026)],
    )
    def test_financial_year_starts_in_april(self, today, fy):
        assert current_financial_year(today) == fy


class TestIndexedCost:
    def test_factor_and_cost(self):
        result = indexed_cost(100000, 2015, 2024)
        assert result["purchaseCII"] == 254
        assert result["saleCII"] == 363
        assert result["indexationFactor"] == pytest.approx(1.4291)
        assert result["indexedCost"] == pytest.approx(142913.39, abs=0.01)

    def test_same_year(self):
        assert indexed_cost(50000, 2020, 2020)["indexedCost"] == 50000


class TestTaxWithIndexation:
    def test_savings(self):
        result = tax_with_indexation(100000, 160000, 2015, 2024)
        assert result["taxableGains"] == pytest.approx(17086.61, abs=0.01)
        assert result["taxAmount"] == pytest.approx(3417.32, abs=0.01)
        assert result["taxWithoutIndexation"] == pytest.approx(12000.0)
        assert result["savings"] == pytest.approx(8582.68, abs=0.01)

    def test_indexed_cost_above_maturity_means_no_tax(self):
        result = tax_with_indexation(100000, 120000, 2005, 2024)
        assert result["taxableGains"] == 0.0
        assert result["taxAmount"] == 0.0
