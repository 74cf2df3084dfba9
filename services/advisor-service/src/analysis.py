from __future__ import annotations

import calendar
from datetime import date
from typing import List, Mapping

from budget_model import (
    AnalysisMetrics,
    AnalysisRecommendation,
    CategoryBreakdown,
    FinancialSnapshot,
    MetricStatus,
    ProjectionMonth,
)

DEFAULT_PROJECTION_MONTHS = 6

LOW_SAVINGS_RATE = 10.0
HIGH_DEBT_RATIO = 50.0
MIN_EMERGENCY_FUND_MONTHS = 3.0
DOMINANT_CATEGORY_PERCENTAGE = 40.0
# Rent or mortgage is expected to dominate spending, so it never triggers the category rule.
DOMINANT_CATEGORY_EXEMPT = "housing"


def compute_savings_rate(snapshot: FinancialSnapshot) -> float:
    if snapshot.monthly_income <= 0:
        return 0.0
    return snapshot.disposable_income / snapshot.monthly_income * 100


def compute_emergency_fund_months(snapshot: FinancialSnapshot) -> float:
    """
    Approximate how many months of expenses the monthly surplus would cover.

    The surplus stands in for an emergency fund balance; deficits count as zero.
    """
    if snapshot.monthly_expenses <= 0:
        return 0.0
    return max(0.0, snapshot.disposable_income) / snapshot.monthly_expenses


def rank_expense_categories(
    expenses_by_category: Mapping[str, float],
    monthly_expenses: float,
) -> List[CategoryBreakdown]:
    """
    Sort category totals by amount (largest first) and attach their share of spend.

    The sort is stable, so categories with equal totals keep first-occurrence order.
    """
    ranked = sorted(expenses_by_category.items(), key=lambda item: item[1], reverse=True)
    return [
        CategoryBreakdown(
            category=category,
            amount=amount,
            percentage=amount / monthly_expenses * 100 if monthly_expenses > 0 else 0.0,
        )
        for category, amount in ranked
    ]


def _month_label(start: date, offset: int) -> str:
    month_index = start.month - 1 + offset
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    return f"{calendar.month_name[month]} {year}"


def build_monthly_projection(
    snapshot: FinancialSnapshot,
    months: int,
    *,
    start: date | None = None,
) -> List[ProjectionMonth]:
    """
    Repeat the current monthly figures for `months` calendar months.

    The first entry is the month containing `start` (today by default). There is no
    growth or seasonality model; every month carries the same income, expenses, and
    balance, and `cumulative_balance` is the running total of balances.
    """
    start = start or date.today()
    projection: List[ProjectionMonth] = []
    cumulative_balance = 0.0
    for offset in range(max(0, months)):
        cumulative_balance += snapshot.disposable_income
        projection.append(
            ProjectionMonth(
                month_label=_month_label(start, offset),
                income=snapshot.monthly_income,
                expenses=snapshot.monthly_expenses,
                balance=snapshot.disposable_income,
                cumulative_balance=cumulative_balance,
            )
        )
    return projection


def analyze(
    snapshot: FinancialSnapshot,
    expenses_by_category: Mapping[str, float],
    horizon_months: int = DEFAULT_PROJECTION_MONTHS,
    *,
    start: date | None = None,
) -> AnalysisMetrics:
    """Compute the analysis dashboard metrics for a snapshot and its category totals."""
    return AnalysisMetrics(
        savings_rate=compute_savings_rate(snapshot),
        debt_to_income_ratio=snapshot.debt_ratio,
        emergency_fund_months=compute_emergency_fund_months(snapshot),
        top_expense_categories=rank_expense_categories(expenses_by_category, snapshot.monthly_expenses),
        monthly_projection=build_monthly_projection(snapshot, horizon_months, start=start),
    )


def classify_savings_rate(rate: float) -> MetricStatus:
    if rate >= 20:
        return "excellent"
    if rate >= 10:
        return "good"
    if rate >= 5:
        return "warning"
    return "danger"


def classify_debt_ratio(ratio: float) -> MetricStatus:
    if ratio <= 30:
        return "excellent"
    if ratio <= 50:
        return "good"
    if ratio <= 70:
        return "warning"
    return "danger"


def classify_emergency_fund(months: float) -> MetricStatus:
    if months >= 6:
        return "excellent"
    if months >= 3:
        return "good"
    if months >= 1:
        return "warning"
    return "danger"


def classify_metrics(metrics: AnalysisMetrics) -> dict[str, MetricStatus]:
    return {
        "savings_rate": classify_savings_rate(metrics.savings_rate),
        "debt_to_income_ratio": classify_debt_ratio(metrics.debt_to_income_ratio),
        "emergency_fund_months": classify_emergency_fund(metrics.emergency_fund_months),
    }


def generate_analysis_recommendations(metrics: AnalysisMetrics) -> List[AnalysisRecommendation]:
    """
    Collect the message of every rule the metrics trigger, in rule order.
    """
    recommendations: List[AnalysisRecommendation] = []

    if metrics.savings_rate < LOW_SAVINGS_RATE:
        recommendations.append(
            AnalysisRecommendation(
                kind="savings",
                text="Your savings rate is low. Try to save more by cutting non-essential expenses.",
                impact="Impact: better long-term financial stability",
            )
        )

    if metrics.debt_to_income_ratio > HIGH_DEBT_RATIO:
        recommendations.append(
            AnalysisRecommendation(
                kind="debt",
                text="Your debt ratio is high. Consider ways to reduce expenses or increase income.",
                impact="Impact: less financial stress and more room to save",
            )
        )

    if metrics.emergency_fund_months < MIN_EMERGENCY_FUND_MONTHS:
        recommendations.append(
            AnalysisRecommendation(
                kind="emergency_fund",
                text="Your emergency fund is insufficient. Aim to cover at least 3-6 months of expenses.",
                impact="Impact: more security against unexpected costs",
            )
        )

    if metrics.top_expense_categories:
        top_category = metrics.top_expense_categories[0]
        if (
            top_category.percentage > DOMINANT_CATEGORY_PERCENTAGE
            and top_category.category != DOMINANT_CATEGORY_EXEMPT
        ):
            recommendations.append(
                AnalysisRecommendation(
                    kind="top_category",
                    text=(
                        f"Spending on {top_category.category} makes up {top_category.percentage:.1f}% "
                        "of your expenses. Check whether this category can be trimmed."
                    ),
                    impact="Impact: potential for a significant cut in monthly expenses",
                )
            )

    return recommendations
