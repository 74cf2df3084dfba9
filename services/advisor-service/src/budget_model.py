from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

# Income pay period
IncomeType = Literal["monthly", "biweekly"]

# How often an expense is paid
Frequency = Literal["daily", "weekly", "biweekly", "monthly", "yearly"]

# Essential (fixed) versus variable spending
ExpenseType = Literal["essential", "variable"]

GoalCategory = Literal["savings", "debt", "investment", "purchase", "emergency"]

GoalPriority = Literal["high", "medium", "low"]

# Ordered best to worst
HealthStatus = Literal["excellent", "good", "fair", "poor"]

# Ordered best to worst
MetricStatus = Literal["excellent", "good", "warning", "danger"]

DeadlineStatus = Literal["urgent", "soon", "normal"]


@dataclass
class IncomeConfig:
    """
    The single recurring income stream a household has configured.

    `frequency` is a plain multiplier (how many paychecks of `amount` arrive per
    pay period), not a period tag.
    """

    type: IncomeType
    amount: float
    frequency: int = 1


@dataclass
class Expense:
    id: str
    name: str
    amount: float
    category: str
    type: ExpenseType
    frequency: Frequency


@dataclass
class Goal:
    id: str
    name: str
    target_amount: float
    current_amount: float
    target_date: str  # ISO date, e.g. "2027-06-30"
    category: GoalCategory
    priority: GoalPriority
    description: str | None = None
    created_at: str | None = None


@dataclass
class BudgetSnapshot:
    """Everything the calculators need; supplied whole by the persistence adapter."""

    income: IncomeConfig | None = None
    expenses: list[Expense] = field(default_factory=list)
    goals: list[Goal] = field(default_factory=list)


@dataclass(frozen=True)
class FinancialSnapshot:
    monthly_income: float
    monthly_expenses: float
    disposable_income: float
    debt_ratio: float


@dataclass(frozen=True)
class HealthAssessment:
    score: int
    status: HealthStatus
    recommendations: list[str]


@dataclass(frozen=True)
class CategoryBreakdown:
    category: str
    amount: float
    percentage: float


@dataclass(frozen=True)
class ProjectionMonth:
    month_label: str
    income: float
    expenses: float
    balance: float
    cumulative_balance: float


@dataclass(frozen=True)
class AnalysisMetrics:
    savings_rate: float
    debt_to_income_ratio: float
    emergency_fund_months: float
    top_expense_categories: list[CategoryBreakdown]
    monthly_projection: list[ProjectionMonth]


@dataclass(frozen=True)
class AnalysisRecommendation:
    kind: str
    text: str
    impact: str


@dataclass(frozen=True)
class GoalProgress:
    goal_id: str
    progress_pct: float
    remaining: float
    days_remaining: int
    is_completed: bool
    deadline_status: DeadlineStatus


@dataclass(frozen=True)
class GoalSummary:
    total_goals: int
    completed_goals: int
    total_target: float
    total_current: float
    overall_progress: float
