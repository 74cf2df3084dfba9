"""
Preset households used to demo the dashboard or seed a new snapshot.

Loading cycles through the profiles in order. Goal deadlines are kept as month
offsets and resolved against the day a profile is loaded, so sample goals always
start in the future.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Tuple

from budget_model import BudgetSnapshot, Expense, Goal, IncomeConfig
from snapshot import new_entry_id


@dataclass(frozen=True)
class SampleGoal:
    name: str
    target_amount: float
    current_amount: float
    months_ahead: int
    category: str
    priority: str
    description: str


@dataclass(frozen=True)
class SampleProfile:
    name: str
    monthly_income: float
    # (name, monthly amount, category, expense type)
    expenses: Tuple[Tuple[str, float, str, str], ...]
    goals: Tuple[SampleGoal, ...]


SAMPLE_PROFILES: Tuple[SampleProfile, ...] = (
    SampleProfile(
        name="Average employee",
        monthly_income=3500.0,
        expenses=(
            ("Rent", 1200.0, "housing", "essential"),
            ("Groceries", 400.0, "food", "variable"),
            ("Public transport", 80.0, "transport", "essential"),
            ("Health insurance", 150.0, "health", "essential"),
            ("Streaming", 15.0, "entertainment", "essential"),
        ),
        goals=(
            SampleGoal("Emergency fund", 10000.0, 2500.0, 12, "emergency", "high", "Cover 6 months of expenses"),
            SampleGoal("Trip to Europe", 5000.0, 1200.0, 18, "purchase", "medium", "Two weeks travelling"),
        ),
    ),
    SampleProfile(
        name="Family with children",
        monthly_income=5000.0,
        expenses=(
            ("Mortgage", 1800.0, "housing", "essential"),
            ("Food", 600.0, "food", "variable"),
            ("Car", 300.0, "transport", "essential"),
            ("School", 400.0, "education", "essential"),
            ("Gym", 50.0, "health", "essential"),
        ),
        goals=(
            SampleGoal("New car", 15000.0, 3000.0, 14, "purchase", "high", "Replace the family car"),
            SampleGoal("College fund", 20000.0, 5000.0, 44, "savings", "high", "University for the kids"),
        ),
    ),
    SampleProfile(
        name="Young professional",
        monthly_income=2500.0,
        expenses=(
            ("Rent", 900.0, "housing", "essential"),
            ("Food", 350.0, "food", "variable"),
            ("Transport", 60.0, "transport", "essential"),
            ("Internet", 40.0, "services", "essential"),
            ("Cinema", 30.0, "entertainment", "variable"),
        ),
        goals=(
            SampleGoal("Holiday savings", 2000.0, 500.0, 10, "savings", "medium", "Family holiday"),
            SampleGoal("New laptop", 1200.0, 200.0, 9, "purchase", "low", "Upgrade work equipment"),
        ),
    ),
    SampleProfile(
        name="Freelancer",
        monthly_income=4200.0,
        expenses=(
            ("Coworking space", 800.0, "housing", "essential"),
            ("Food", 500.0, "food", "variable"),
            ("Software subscriptions", 150.0, "services", "essential"),
            ("Online marketing", 300.0, "services", "variable"),
            ("Online courses", 120.0, "education", "variable"),
            ("Health insurance", 180.0, "health", "essential"),
            ("Fuel", 200.0, "transport", "variable"),
            ("Entertainment", 80.0, "entertainment", "variable"),
        ),
        goals=(
            SampleGoal("Business expansion", 25000.0, 8000.0, 17, "investment", "high", "Hire and add services"),
            SampleGoal("Emergency fund", 15000.0, 4500.0, 11, "emergency", "high", "Six months of security"),
            SampleGoal("New equipment", 8000.0, 2000.0, 8, "purchase", "medium", "Computer and peripherals"),
        ),
    ),
)


def next_profile_index(previous: int | None) -> int:
    """Index of the profile to load after `previous` (the first one when nothing was loaded)."""
    if previous is None:
        return 0
    return (previous + 1) % len(SAMPLE_PROFILES)


def _add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def build_sample_snapshot(index: int, today: date | None = None) -> BudgetSnapshot:
    """
    Materialize profile `index` as a fresh snapshot with new entry ids.

    Raises:
        IndexError: `index` does not name a profile.
    """
    profile = SAMPLE_PROFILES[index]
    today = today or date.today()
    created_at = datetime.combine(today, time.min, tzinfo=timezone.utc).isoformat()

    expenses = [
        Expense(
            id=new_entry_id(),
            name=name,
            amount=amount,
            category=category,
            type=expense_type,
            frequency="monthly",
        )
        for name, amount, category, expense_type in profile.expenses
    ]
    goals = [
        Goal(
            id=new_entry_id(),
            name=goal.name,
            target_amount=goal.target_amount,
            current_amount=goal.current_amount,
            target_date=_add_months(today, goal.months_ahead).isoformat(),
            category=goal.category,
            priority=goal.priority,
            description=goal.description,
            created_at=created_at,
        )
        for goal in profile.goals
    ]
    return BudgetSnapshot(
        income=IncomeConfig(type="monthly", amount=profile.monthly_income, frequency=1),
        expenses=expenses,
        goals=goals,
    )
