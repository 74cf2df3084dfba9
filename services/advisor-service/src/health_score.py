from __future__ import annotations

import math
from typing import List

from budget_model import FinancialSnapshot, HealthAssessment, HealthStatus

REDUCE_SPENDING = "Your debt ratio is very high. Consider reducing spending."
SEEK_MORE_INCOME = "Look for additional sources of income."
REVIEW_NON_ESSENTIALS = "Your debt ratio is moderate. Review non-essential spending."
CONSIDER_SAVING_MORE = "You are in a good financial position. Consider saving more."
EXCELLENT_MANAGEMENT = "Excellent financial management! Consider investing your surplus."
DEFICIT_WARNING = "You are running a monthly deficit. Review your expenses urgently."
LOW_MARGIN_WARNING = "Your savings margin is very low. Try to increase income or reduce expenses."

LOW_MARGIN_FRACTION = 0.1


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _score_debt_ratio(debt_ratio: float) -> tuple[float, HealthStatus, List[str]]:
    # Bands are checked from the highest ratio down; only the first match applies.
    if debt_ratio > 80:
        return max(0.0, 100 - (debt_ratio - 80) * 5), "poor", [REDUCE_SPENDING, SEEK_MORE_INCOME]
    if debt_ratio > 60:
        return max(20.0, 100 - (debt_ratio - 60) * 2), "fair", [REVIEW_NON_ESSENTIALS]
    if debt_ratio > 40:
        return max(60.0, 100 - (debt_ratio - 40) * 1), "good", [CONSIDER_SAVING_MORE]
    return 100.0, "excellent", [EXCELLENT_MANAGEMENT]


def score_financial_health(snapshot: FinancialSnapshot) -> HealthAssessment:
    """
    Turn a financial snapshot into a 0-100 health score, status tier, and advice.

    The score depends only on the debt ratio. Margin checks run afterwards and
    append warnings without touching the score.
    """
    raw_score, status, recommendations = _score_debt_ratio(snapshot.debt_ratio)

    if snapshot.disposable_income < 0:
        recommendations.append(DEFICIT_WARNING)
    elif snapshot.disposable_income < snapshot.monthly_income * LOW_MARGIN_FRACTION:
        recommendations.append(LOW_MARGIN_WARNING)

    return HealthAssessment(
        score=_round_half_up(raw_score),
        status=status,
        recommendations=recommendations,
    )
