from __future__ import annotations

import math
from datetime import date, datetime, time, timezone
from typing import Iterable, List

from budget_model import DeadlineStatus, Goal, GoalProgress, GoalSummary

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}

URGENT_DAYS = 30
SOON_DAYS = 90

_SECONDS_PER_DAY = 86400


def parse_target_date(value: str) -> datetime:
    """Interpret an ISO date (or datetime) string as a UTC instant; plain dates mean midnight."""
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        parsed = datetime.combine(date.fromisoformat(value[:10]), time.min)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _deadline_status(days_remaining: int) -> DeadlineStatus:
    if days_remaining <= URGENT_DAYS:
        return "urgent"
    if days_remaining <= SOON_DAYS:
        return "soon"
    return "normal"


def progress_percentage(current: float, target: float) -> float:
    """Unclamped share of the target saved so far; a non-positive target counts as 100 once met."""
    if target <= 0:
        return 100.0 if current >= target else 0.0
    return current / target * 100


def _progress_pct(current: float, target: float) -> float:
    return max(0.0, min(progress_percentage(current, target), 100.0))


def track_goal(goal: Goal, now: datetime | None = None) -> GoalProgress:
    """
    Compute display progress for a single goal.

    Progress is clamped to 0-100 for display, while completion compares the raw
    amounts, so a goal funded past its target still reads as completed.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    seconds_left = (parse_target_date(goal.target_date) - now).total_seconds()
    days_remaining = math.ceil(seconds_left / _SECONDS_PER_DAY)

    return GoalProgress(
        goal_id=goal.id,
        progress_pct=_progress_pct(goal.current_amount, goal.target_amount),
        remaining=max(0.0, goal.target_amount - goal.current_amount),
        days_remaining=days_remaining,
        is_completed=goal.current_amount >= goal.target_amount,
        deadline_status=_deadline_status(days_remaining),
    )


def sort_goals(goals: Iterable[Goal]) -> List[Goal]:
    """Order goals by priority (high first), then by the nearest target date."""
    return sorted(
        goals,
        key=lambda goal: (
            _PRIORITY_ORDER.get(goal.priority, len(_PRIORITY_ORDER)),
            parse_target_date(goal.target_date),
        ),
    )


def summarize_goals(goals: Iterable[Goal]) -> GoalSummary:
    goals = list(goals)
    total_target = float(sum(goal.target_amount for goal in goals))
    total_current = float(sum(goal.current_amount for goal in goals))
    overall_progress = total_current / total_target * 100 if total_target > 0 else 0.0

    return GoalSummary(
        total_goals=len(goals),
        completed_goals=sum(1 for goal in goals if goal.current_amount >= goal.target_amount),
        total_target=total_target,
        total_current=total_current,
        overall_progress=overall_progress,
    )
