"""Pytest configuration for advisor-service tests.

Ensures the service's own src directory takes precedence in sys.path and points
the snapshot store at a throwaway SQLite file before any service module is imported.
"""

import os
import sys
import tempfile
from pathlib import Path

import pytest

SERVICES_ROOT = Path(__file__).resolve().parents[2]

# Ensure this service's src is first in sys.path
SERVICE_SRC = Path(__file__).resolve().parents[1] / "src"
if str(SERVICE_SRC) not in sys.path:
    sys.path.insert(0, str(SERVICE_SRC))

# Shared package (settings, observability)
if str(SERVICES_ROOT) not in sys.path:
    sys.path.insert(1, str(SERVICES_ROOT))

_TEST_DB_DIR = tempfile.mkdtemp(prefix="advisor-tests-")
os.environ["ADVISOR_DB_URL"] = f"sqlite:///{Path(_TEST_DB_DIR) / 'advisor-test.db'}"

from budget_model import Expense  # noqa: E402


def _monthly_expense(id_suffix: str, name: str, category: str, amount: float, expense_type: str) -> Expense:
    return Expense(
        id=f"expense-{id_suffix}",
        name=name,
        amount=amount,
        category=category,
        type=expense_type,
        frequency="monthly",
    )


@pytest.fixture
def sample_expenses() -> list[Expense]:
    """The five monthly expenses from the 3500/month sample household."""
    return [
        _monthly_expense("rent", "Rent", "housing", 1200.0, "essential"),
        _monthly_expense("groceries", "Groceries", "food", 400.0, "variable"),
        _monthly_expense("transit", "Public transport", "transport", 80.0, "essential"),
        _monthly_expense("insurance", "Health insurance", "health", 150.0, "essential"),
        _monthly_expense("streaming", "Streaming", "entertainment", 15.0, "variable"),
    ]
