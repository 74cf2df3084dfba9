from __future__ import annotations

from typing import List, Mapping, Sequence

from analysis import rank_expense_categories
from budget_model import AnalysisRecommendation, FinancialSnapshot, Goal, HealthAssessment
from goal_tracking import progress_percentage

REPORT_TITLE = "Personal Financial Report"
REPORT_FOOTER = "Personal Financial Advisor - automatically generated report"


def format_currency(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.0f}"


def format_percentage(value: float) -> str:
    return f"{value:.1f}%"


def build_text_report(
    snapshot: FinancialSnapshot,
    health: HealthAssessment,
    category_totals: Mapping[str, float],
    *,
    analysis_recommendations: Sequence[AnalysisRecommendation] = (),
    goals: Sequence[Goal] = (),
) -> str:
    """
    Render a plain-text report: summary, health assessment, spending breakdown,
    recommendations, and goal progress.
    """
    lines: List[str] = [REPORT_TITLE, "=" * len(REPORT_TITLE), ""]

    lines.append("Financial summary")
    lines.append(f"  Monthly income:      {format_currency(snapshot.monthly_income)}")
    lines.append(f"  Monthly expenses:    {format_currency(snapshot.monthly_expenses)}")
    lines.append(f"  Disposable income:   {format_currency(snapshot.disposable_income)}")
    lines.append(f"  Debt ratio:          {format_percentage(snapshot.debt_ratio)}")
    lines.append("")

    lines.append("Financial health")
    lines.append(f"  Score:  {health.score}/100")
    lines.append(f"  Status: {health.status.upper()}")
    lines.append("")

    if category_totals:
        lines.append("Expense breakdown")
        for entry in rank_expense_categories(category_totals, snapshot.monthly_expenses):
            lines.append(
                f"  {entry.category:<15} {format_currency(entry.amount):>12}  ({format_percentage(entry.percentage)})"
            )
        lines.append("")

    recommendations = [*health.recommendations, *(item.text for item in analysis_recommendations)]
    if recommendations:
        lines.append("Recommendations")
        for index, recommendation in enumerate(recommendations, start=1):
            lines.append(f"  {index}. {recommendation}")
        lines.append("")

    if goals:
        lines.append("Goals")
        for goal in goals:
            progress = min(progress_percentage(goal.current_amount, goal.target_amount), 100.0)
            lines.append(
                f"  {goal.name}: {format_currency(goal.current_amount)} / "
                f"{format_currency(goal.target_amount)} ({format_percentage(progress)})"
            )
        lines.append("")

    lines.append(REPORT_FOOTER)
    return "\n".join(lines)


def build_financial_context(
    snapshot: FinancialSnapshot,
    health: HealthAssessment,
    category_totals: Mapping[str, float],
    goals: Sequence[Goal] = (),
) -> str:
    """
    Summarize the household's numbers as plain text for a conversational assistant.

    Goal percentages are unclamped so the assistant can see over-funded goals.
    """
    category_lines = [f"- {category}: {format_currency(amount)}" for category, amount in category_totals.items()]
    goal_lines = [
        f"- {goal.name}: {format_currency(goal.current_amount)}/{format_currency(goal.target_amount)} "
        f"({format_percentage(progress_percentage(goal.current_amount, goal.target_amount))})"
        for goal in goals
    ]

    sections = [
        "CURRENT FINANCIAL SITUATION:",
        f"- Monthly income: {format_currency(snapshot.monthly_income)}",
        f"- Monthly expenses: {format_currency(snapshot.monthly_expenses)}",
        f"- Available money: {format_currency(snapshot.disposable_income)}",
        f"- Financial health: {health.score}/100 ({health.status})",
        "",
        "EXPENSES BY CATEGORY:",
        *(category_lines or ["- none"]),
        "",
        "FINANCIAL GOALS:",
        *(goal_lines or ["- none"]),
    ]
    return "\n".join(sections)
