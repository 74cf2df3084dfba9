from __future__ import annotations

from typing import Dict, Iterable

from budget_model import Expense, FinancialSnapshot, IncomeConfig
from normalization import expense_monthly_amount, income_monthly_amount, normalize_category


def compute_monthly_expenses(expenses: Iterable[Expense]) -> float:
    """Sum the monthly-equivalent amount of every expense."""
    return float(sum(expense_monthly_amount(expense) for expense in expenses))


def aggregate(income: IncomeConfig | None, expenses: Iterable[Expense]) -> FinancialSnapshot:
    """
    Calculate monthly income, expenses, disposable income, and debt ratio.

    Args:
        income: The configured income stream, or None when the household has not set one.
        expenses: Expense entries in any frequency; each is normalized to a monthly figure.
    Returns:
        FinancialSnapshot with finite values only. A deficit shows up as negative
        disposable income, and the debt ratio is 0 when there is no income.
    Assumptions:
        Function is pure and does not mutate its inputs.
    """
    monthly_income = income_monthly_amount(income)
    monthly_expenses = compute_monthly_expenses(expenses)
    disposable_income = monthly_income - monthly_expenses
    debt_ratio = monthly_expenses / monthly_income * 100 if monthly_income > 0 else 0.0

    return FinancialSnapshot(
        monthly_income=monthly_income,
        monthly_expenses=monthly_expenses,
        disposable_income=disposable_income,
        debt_ratio=debt_ratio,
    )


def compute_category_totals(expenses: Iterable[Expense]) -> Dict[str, float]:
    """
    Sum monthly-equivalent spend per category.

    Args:
        expenses: Expense entries; unknown categories are bucketed under "other".
    Returns:
        Dict keyed by category label in first-occurrence order. Values add up to the
        monthly expense total.
    """
    category_totals: Dict[str, float] = {}
    for expense in expenses:
        category = normalize_category(expense.category)
        category_totals[category] = category_totals.get(category, 0.0) + expense_monthly_amount(expense)
    return category_totals


def compute_category_shares(expenses: Iterable[Expense]) -> Dict[str, float]:
    """
    Derive each category's share of total monthly expenses as a 0..1 ratio.

    Returns an empty dict when total expenses are zero.
    """
    category_totals = compute_category_totals(expenses)
    total_expenses = float(sum(category_totals.values()))
    if total_expenses == 0:
        return {}

    return {category: amount / total_expenses for category, amount in category_totals.items()}
