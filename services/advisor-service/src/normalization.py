from __future__ import annotations

from budget_model import Expense, IncomeConfig

FREQUENCY_MULTIPLIERS = {
    "daily": 30.0,
    "weekly": 4.33,
    "biweekly": 2.0,
    "monthly": 1.0,
    "yearly": 1.0 / 12.0,
}

# Paychecks per month for each income type
INCOME_PERIODS_PER_MONTH = {"monthly": 1.0, "biweekly": 2.0}

KNOWN_CATEGORIES = frozenset(
    {
        "housing",
        "food",
        "transport",
        "health",
        "education",
        "entertainment",
        "shopping",
        "services",
        "savings",
        "debt",
        "other",
    }
)
FALLBACK_CATEGORY = "other"


def _normalize_tag(tag: str | None) -> str:
    return (tag or "").strip().lower()


def is_known_frequency(frequency: str | None) -> bool:
    return _normalize_tag(frequency) in FREQUENCY_MULTIPLIERS


def frequency_multiplier(frequency: str | None) -> float:
    """
    Map a frequency tag to its monthly multiplier.

    Unrecognized tags fall back to 1.0 so that the entry counts as a monthly
    amount instead of disappearing from totals.
    """
    return FREQUENCY_MULTIPLIERS.get(_normalize_tag(frequency), 1.0)


def monthly_equivalent(amount: float, frequency: str | None) -> float:
    """
    Convert an amount paid at `frequency` into its per-month figure.

    No rounding is applied; formatting belongs to the presentation layer.
    """
    return float(amount) * frequency_multiplier(frequency)


def expense_monthly_amount(expense: Expense) -> float:
    return monthly_equivalent(expense.amount, expense.frequency)


def income_monthly_amount(income: IncomeConfig | None) -> float:
    """
    Monthly income for the configured stream, or 0.0 when nothing is configured.

    Biweekly pay counts twice per month; unknown income types are treated as monthly.
    """
    if income is None:
        return 0.0
    periods = INCOME_PERIODS_PER_MONTH.get(_normalize_tag(income.type), 1.0)
    return float(income.amount) * income.frequency * periods


def normalize_category(category: str | None) -> str:
    """Return the canonical category label, bucketing unknown tags into "other"."""
    normalized = _normalize_tag(category)
    if normalized in KNOWN_CATEGORIES:
        return normalized
    return FALLBACK_CATEGORY
