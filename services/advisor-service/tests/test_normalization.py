"""Tests for normalization.py - frequency multipliers, income periods, and category buckets."""

import pytest
from budget_model import IncomeConfig
from normalization import (
    frequency_multiplier,
    income_monthly_amount,
    is_known_frequency,
    monthly_equivalent,
    normalize_category,
)


class TestMonthlyEquivalent:
    def test_weekly_uses_433_multiplier(self):
        assert monthly_equivalent(100.0, "weekly") == pytest.approx(433.0)

    def test_daily_counts_thirty_days(self):
        assert monthly_equivalent(10.0, "daily") == pytest.approx(300.0)

    def test_biweekly_counts_twice(self):
        assert monthly_equivalent(250.0, "biweekly") == pytest.approx(500.0)

    def test_monthly_is_unchanged(self):
        assert monthly_equivalent(1200.0, "monthly") == pytest.approx(1200.0)

    def test_yearly_is_spread_over_twelve_months(self):
        assert monthly_equivalent(1200.0, "yearly") == pytest.approx(100.0)

    def test_unknown_frequency_is_treated_as_monthly(self):
        assert monthly_equivalent(75.0, "fortnightly-ish") == pytest.approx(75.0)
        assert frequency_multiplier(None) == 1.0

    def test_tags_are_matched_case_insensitively(self):
        assert monthly_equivalent(100.0, " Weekly ") == pytest.approx(433.0)
        assert is_known_frequency("DAILY")

    def test_no_rounding_is_applied(self):
        assert monthly_equivalent(33.33, "weekly") == pytest.approx(33.33 * 4.33)

    def test_zero_and_negative_amounts_produce_defined_numbers(self):
        assert monthly_equivalent(0.0, "daily") == 0.0
        assert monthly_equivalent(-10.0, "weekly") == pytest.approx(-43.3)


class TestIncomeMonthlyAmount:
    def test_no_income_is_zero(self):
        assert income_monthly_amount(None) == 0.0

    def test_monthly_income_uses_frequency_multiplier(self):
        assert income_monthly_amount(IncomeConfig(type="monthly", amount=3500.0, frequency=1)) == pytest.approx(3500.0)
        assert income_monthly_amount(IncomeConfig(type="monthly", amount=1000.0, frequency=3)) == pytest.approx(3000.0)

    def test_biweekly_income_is_paid_twice_a_month(self):
        assert income_monthly_amount(IncomeConfig(type="biweekly", amount=1500.0, frequency=1)) == pytest.approx(3000.0)
        assert income_monthly_amount(IncomeConfig(type="biweekly", amount=500.0, frequency=2)) == pytest.approx(2000.0)

    def test_unknown_income_type_falls_back_to_monthly(self):
        assert income_monthly_amount(IncomeConfig(type="weekly", amount=800.0, frequency=1)) == pytest.approx(800.0)


class TestNormalizeCategory:
    def test_known_category_is_kept(self):
        assert normalize_category("housing") == "housing"

    def test_known_category_is_lowercased(self):
        assert normalize_category("  Food ") == "food"

    @pytest.mark.parametrize("raw", ["", None, "pets", "Misc stuff"])
    def test_unknown_or_empty_category_falls_into_other(self, raw):
        assert normalize_category(raw) == "other"
