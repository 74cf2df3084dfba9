"""
Conversion between stored JSON snapshots and the calculator dataclasses.

The persistence layer hands over whatever JSON blob it has for a household; this
module turns it into a `BudgetSnapshot` (filling defaults for anything missing) and
applies the small set of lifecycle edits the service supports. Every edit returns a
new snapshot instead of mutating the one it was given.
"""

from __future__ import annotations

import dataclasses
import logging
import math
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping
from uuid import uuid4

from budget_model import BudgetSnapshot, Expense, Goal, IncomeConfig
from goal_tracking import parse_target_date
from normalization import is_known_frequency, normalize_category

logger = logging.getLogger(__name__)


class SnapshotValidationError(ValueError):
    """Raised when a requested edit would break a snapshot invariant."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code


class EntryNotFoundError(LookupError):
    """Raised when an edit references an expense or goal id that is not in the snapshot."""

    def __init__(self, code: str, entry_id: str):
        super().__init__(f"No entry with id '{entry_id}'")
        self.code = code
        self.entry_id = entry_id


def new_entry_id() -> str:
    return uuid4().hex


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_float(value: Any, default: float = 0.0) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    # Non-finite numbers are treated like unparseable ones.
    return number if math.isfinite(number) else default


def _is_positive_amount(value: float) -> bool:
    return math.isfinite(value) and value > 0


def _load_income(raw: Any) -> IncomeConfig | None:
    if not isinstance(raw, Mapping):
        return None
    frequency = raw.get("frequency", 1)
    try:
        frequency = int(frequency)
    except (TypeError, ValueError, OverflowError):
        frequency = 1
    return IncomeConfig(
        type=str(raw.get("type") or "monthly").strip().lower(),
        amount=_as_float(raw.get("amount")),
        frequency=frequency,
    )


def _load_expense(raw: Mapping[str, Any]) -> Expense:
    expense = Expense(
        id=str(raw.get("id") or new_entry_id()),
        name=str(raw.get("name") or ""),
        amount=_as_float(raw.get("amount")),
        category=str(raw.get("category") or ""),
        type=str(raw.get("type") or "variable").strip().lower(),
        frequency=str(raw.get("frequency") or "monthly").strip().lower(),
    )
    if not is_known_frequency(expense.frequency):
        logger.warning(
            {
                "event": "unrecognized_frequency",
                "expense_id": expense.id,
                "frequency": expense.frequency,
                "fallback_multiplier": 1.0,
            }
        )
    return expense


def _load_goal(raw: Mapping[str, Any]) -> Goal:
    return Goal(
        id=str(raw.get("id") or new_entry_id()),
        name=str(raw.get("name") or ""),
        target_amount=_as_float(raw.get("target_amount")),
        current_amount=_as_float(raw.get("current_amount")),
        target_date=str(raw.get("target_date") or ""),
        category=str(raw.get("category") or "savings").strip().lower(),
        priority=str(raw.get("priority") or "medium").strip().lower(),
        description=raw.get("description"),
        created_at=raw.get("created_at"),
    )


def load_snapshot(payload: Mapping[str, Any] | None) -> BudgetSnapshot:
    """
    Build a BudgetSnapshot from a possibly missing or partial JSON document.

    Missing income means "not configured"; missing lists are empty. Goals without a
    target date cannot be tracked and are dropped with a warning.
    """
    if not payload:
        return BudgetSnapshot()

    expenses = [_load_expense(item) for item in payload.get("expenses") or [] if isinstance(item, Mapping)]

    goals = []
    for item in payload.get("goals") or []:
        if not isinstance(item, Mapping):
            continue
        goal = _load_goal(item)
        try:
            parse_target_date(goal.target_date)
        except ValueError:
            logger.warning({"event": "goal_without_valid_target_date", "goal_id": goal.id})
            continue
        goals.append(goal)

    return BudgetSnapshot(
        income=_load_income(payload.get("income")),
        expenses=expenses,
        goals=goals,
    )


def dump_snapshot(snapshot: BudgetSnapshot) -> dict[str, Any]:
    """Serialize a snapshot into the JSON-ready dict the store persists."""
    return dataclasses.asdict(snapshot)


def replace_income(snapshot: BudgetSnapshot, income: IncomeConfig) -> BudgetSnapshot:
    if not _is_positive_amount(income.amount):
        raise SnapshotValidationError("invalid_income_amount", "Income amount must be a finite number greater than 0.")
    return dataclasses.replace(snapshot, income=income)


def add_expense(
    snapshot: BudgetSnapshot,
    *,
    name: str,
    amount: float,
    category: str,
    type: str,
    frequency: str,
) -> tuple[BudgetSnapshot, Expense]:
    """Append a new expense with a generated id; returns the new snapshot and the entry."""
    if not _is_positive_amount(amount):
        raise SnapshotValidationError("invalid_amount", "Expense amount must be a finite number greater than 0.")
    expense = Expense(
        id=new_entry_id(),
        name=name.strip(),
        amount=float(amount),
        category=category.strip().lower(),
        type=type,
        frequency=frequency,
    )
    return dataclasses.replace(snapshot, expenses=[*snapshot.expenses, expense]), expense


def remove_expense(snapshot: BudgetSnapshot, expense_id: str) -> BudgetSnapshot:
    remaining = [expense for expense in snapshot.expenses if expense.id != expense_id]
    if len(remaining) == len(snapshot.expenses):
        raise EntryNotFoundError("expense_not_found", expense_id)
    return dataclasses.replace(snapshot, expenses=remaining)


def filter_expenses(
    expenses: Iterable[Expense],
    *,
    category: str | None = None,
    expense_type: str | None = None,
) -> List[Expense]:
    """
    Keep the expenses matching every filter that is set, in their original order.

    Categories are compared after normalization, so "Food" matches "food" and any
    unknown tag matches "other". Empty filters match everything.
    """
    wanted_category = normalize_category(category) if category else None
    wanted_type = expense_type.strip().lower() if expense_type else None
    return [
        expense
        for expense in expenses
        if (wanted_category is None or normalize_category(expense.category) == wanted_category)
        and (wanted_type is None or expense.type == wanted_type)
    ]


def add_goal(
    snapshot: BudgetSnapshot,
    *,
    name: str,
    target_amount: float,
    target_date: str,
    category: str,
    priority: str,
    current_amount: float = 0.0,
    description: str | None = None,
    now: datetime | None = None,
) -> tuple[BudgetSnapshot, Goal]:
    """
    Create a goal after enforcing the creation rules.

    Raises:
        SnapshotValidationError: target is not positive, the saved amount already
            exceeds the target, or the target date is not in the future.
    """
    now = now or _utc_now()
    if not _is_positive_amount(target_amount):
        raise SnapshotValidationError(
            "invalid_target_amount", "Target amount must be a finite number greater than 0."
        )
    if not math.isfinite(current_amount) or current_amount < 0:
        raise SnapshotValidationError("invalid_current_amount", "Current amount cannot be negative.")
    if current_amount > target_amount:
        raise SnapshotValidationError(
            "current_exceeds_target", "Current amount cannot be greater than the target amount."
        )
    try:
        deadline = parse_target_date(target_date)
    except ValueError as exc:
        raise SnapshotValidationError("invalid_target_date", f"Unrecognized target date '{target_date}'.") from exc
    if deadline <= now:
        raise SnapshotValidationError("target_date_not_in_future", "Target date must be in the future.")

    goal = Goal(
        id=new_entry_id(),
        name=name.strip(),
        target_amount=float(target_amount),
        current_amount=float(current_amount),
        target_date=target_date,
        category=category,
        priority=priority,
        description=(description or "").strip() or None,
        created_at=now.isoformat(),
    )
    return dataclasses.replace(snapshot, goals=[*snapshot.goals, goal]), goal


def update_goal_amount(
    snapshot: BudgetSnapshot,
    goal_id: str,
    amount: float,
    *,
    confirm_over_target: bool = False,
) -> tuple[BudgetSnapshot, Goal]:
    """
    Set a goal's saved amount.

    Amounts above the target are accepted only when the caller confirms it, since
    doing so marks the goal as completed.
    """
    if not math.isfinite(amount) or amount < 0:
        raise SnapshotValidationError(
            "invalid_current_amount", "Current amount must be a finite number and cannot be negative."
        )

    for index, goal in enumerate(snapshot.goals):
        if goal.id != goal_id:
            continue
        if amount > goal.target_amount and not confirm_over_target:
            raise SnapshotValidationError(
                "confirmation_required",
                f"Amount {amount:,.2f} exceeds the target {goal.target_amount:,.2f}; confirm to continue.",
            )
        updated = dataclasses.replace(goal, current_amount=float(amount))
        goals = [*snapshot.goals[:index], updated, *snapshot.goals[index + 1 :]]
        return dataclasses.replace(snapshot, goals=goals), updated

    raise EntryNotFoundError("goal_not_found", goal_id)


def remove_goal(snapshot: BudgetSnapshot, goal_id: str) -> BudgetSnapshot:
    remaining = [goal for goal in snapshot.goals if goal.id != goal_id]
    if len(remaining) == len(snapshot.goals):
        raise EntryNotFoundError("goal_not_found", goal_id)
    return dataclasses.replace(snapshot, goals=remaining)
