"""
Advisor Service normalizes a household's income and expenses into monthly figures,
scores its financial health, projects cash flow, tracks savings goals, and keeps
each household's snapshot in a small JSON store.
"""

import dataclasses
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

SRC_DIR = Path(__file__).resolve().parent
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

SERVICES_ROOT = SRC_DIR.parents[1]
if str(SERVICES_ROOT) not in sys.path:
    sys.path.insert(0, str(SERVICES_ROOT))

from analysis import analyze, classify_metrics, generate_analysis_recommendations
from budget_model import BudgetSnapshot, IncomeConfig
from compute_summary import aggregate, compute_category_shares, compute_category_totals, compute_monthly_expenses
from goal_tracking import sort_goals, summarize_goals, track_goal
from health_score import score_financial_health
from persistence.database import get_session, init_db
from persistence.repository import SnapshotAction, SnapshotConflictError, SnapshotRepository
from report import build_financial_context, build_text_report
from sample_profiles import SAMPLE_PROFILES, build_sample_snapshot, next_profile_index
from shared.observability.logging_setup import setup_logging
from shared.observability.privacy import hash_payload, redact_fields
from shared.settings import AdvisorSettings, AdvisorSettingsError, load_advisor_settings
import snapshot as snapshot_codec

logger = logging.getLogger(__name__)

try:
    ADVISOR_SETTINGS: AdvisorSettings = load_advisor_settings()
except AdvisorSettingsError as exc:
    logger.error("Failed to load advisor settings: %s", exc)
    raise

app = FastAPI(title="Advisor Service")
setup_logging(app, service_name="advisor-service", level=ADVISOR_SETTINGS.log_level)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(ADVISOR_SETTINGS.cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

SAFE_ENTRY_KEYS = frozenset({"id", "category", "type", "frequency", "priority"})


def reload_settings_for_tests() -> None:
    """
    Refresh settings after tests mutate environment variables.
    """

    global ADVISOR_SETTINGS
    ADVISOR_SETTINGS = load_advisor_settings()


class _FiniteModel(BaseModel):
    """Request body base that rejects NaN and infinite numbers."""

    model_config = ConfigDict(allow_inf_nan=False)


class IncomeModel(_FiniteModel):
    type: Literal["monthly", "biweekly"]
    amount: float = Field(gt=0)
    frequency: int = Field(default=1, ge=1)


class NewExpenseModel(_FiniteModel):
    name: str = Field(min_length=1)
    amount: float = Field(gt=0)
    category: str = Field(min_length=1)
    type: Literal["essential", "variable"] = "variable"
    frequency: Literal["daily", "weekly", "biweekly", "monthly", "yearly"] = "monthly"


class NewGoalModel(_FiniteModel):
    name: str = Field(min_length=1)
    target_amount: float
    current_amount: float = 0.0
    target_date: date
    category: Literal["savings", "debt", "investment", "purchase", "emergency"]
    priority: Literal["high", "medium", "low"]
    description: str | None = None


class GoalAmountUpdateModel(_FiniteModel):
    current_amount: float
    confirm_over_target: bool = False


class SnapshotPayload(BaseModel):
    """
    Raw household snapshot as stored by clients. Every field is optional; entries are
    loaded leniently so partial or older snapshots can still be analyzed.
    """

    income: Optional[Dict[str, Any]] = None
    expenses: List[Dict[str, Any]] = Field(default_factory=list)
    goals: List[Dict[str, Any]] = Field(default_factory=list)

    def to_snapshot(self) -> BudgetSnapshot:
        """Convert the payload into the internal dataclass representation."""
        return snapshot_codec.load_snapshot(self.model_dump())


class ExpenseModel(BaseModel):
    id: str
    name: str
    amount: float
    category: str
    type: str
    frequency: str


class ExpenseListResponseModel(BaseModel):
    expenses: list[ExpenseModel]
    monthly_total: float


class SampleProfileModel(BaseModel):
    index: int
    name: str
    monthly_income: float
    expense_count: int
    goal_count: int


class FinancialSnapshotModel(BaseModel):
    monthly_income: float
    monthly_expenses: float
    disposable_income: float
    debt_ratio: float


class HealthAssessmentModel(BaseModel):
    score: int
    status: Literal["excellent", "good", "fair", "poor"]
    recommendations: list[str]


class CategoryBreakdownModel(BaseModel):
    category: str
    amount: float
    percentage: float


class ProjectionMonthModel(BaseModel):
    month_label: str
    income: float
    expenses: float
    balance: float
    cumulative_balance: float


class AnalysisRecommendationModel(BaseModel):
    kind: str
    text: str
    impact: str


class AnalysisResponseModel(BaseModel):
    savings_rate: float
    debt_to_income_ratio: float
    emergency_fund_months: float
    top_expense_categories: list[CategoryBreakdownModel]
    monthly_projection: list[ProjectionMonthModel]
    statuses: dict[str, Literal["excellent", "good", "warning", "danger"]]
    recommendations: list[AnalysisRecommendationModel]


class GoalProgressModel(BaseModel):
    goal_id: str
    name: str
    category: str
    priority: str
    target_amount: float
    current_amount: float
    target_date: str
    progress_pct: float
    remaining: float
    days_remaining: int
    is_completed: bool
    deadline_status: Literal["urgent", "soon", "normal"]


class GoalSummaryModel(BaseModel):
    total_goals: int
    completed_goals: int
    total_target: float
    total_current: float
    overall_progress: float


class GoalsResponseModel(BaseModel):
    goals: list[GoalProgressModel]
    summary: GoalSummaryModel


class SummarizeResponseModel(BaseModel):
    summary: FinancialSnapshotModel
    category_totals: dict[str, float]
    category_shares: dict[str, float]


class ReportResponseModel(BaseModel):
    report: str
    assistant_context: str


class DashboardResponseModel(BaseModel):
    summary: FinancialSnapshotModel
    category_totals: dict[str, float]
    health: HealthAssessmentModel
    analysis: AnalysisResponseModel
    goals: GoalsResponseModel


def error_response(status_code: int, error_code: str, details: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error_code, "details": details},
    )


def _log_snapshot_event(event: str, key: str | None, budget: BudgetSnapshot, **extra: Any) -> None:
    # Amounts and names never reach the logs; the hash correlates events for one snapshot.
    logger.info(
        {
            "event": event,
            "snapshot_key_hash": hash_payload(key) if key else None,
            "snapshot_hash": hash_payload(snapshot_codec.dump_snapshot(budget)),
            "expense_count": len(budget.expenses),
            "goal_count": len(budget.goals),
            **extra,
        }
    )


def _summary_model(budget: BudgetSnapshot) -> FinancialSnapshotModel:
    return FinancialSnapshotModel(**dataclasses.asdict(aggregate(budget.income, budget.expenses)))


def _build_health(budget: BudgetSnapshot) -> HealthAssessmentModel:
    assessment = score_financial_health(aggregate(budget.income, budget.expenses))
    return HealthAssessmentModel(**dataclasses.asdict(assessment))


def _build_analysis(budget: BudgetSnapshot, months: int) -> AnalysisResponseModel:
    financial = aggregate(budget.income, budget.expenses)
    metrics = analyze(financial, compute_category_totals(budget.expenses), months)
    recommendations = generate_analysis_recommendations(metrics)
    return AnalysisResponseModel(
        **dataclasses.asdict(metrics),
        statuses=classify_metrics(metrics),
        recommendations=[dataclasses.asdict(item) for item in recommendations],
    )


def _build_goals(budget: BudgetSnapshot) -> GoalsResponseModel:
    goal_models = []
    for goal in sort_goals(budget.goals):
        progress = track_goal(goal)
        goal_models.append(
            GoalProgressModel(
                **dataclasses.asdict(progress),
                name=goal.name,
                category=goal.category,
                priority=goal.priority,
                target_amount=goal.target_amount,
                current_amount=goal.current_amount,
                target_date=goal.target_date,
            )
        )
    summary = summarize_goals(budget.goals)
    return GoalsResponseModel(goals=goal_models, summary=GoalSummaryModel(**dataclasses.asdict(summary)))


def _resolve_months(months: int | None) -> int:
    return months if months is not None else ADVISOR_SETTINGS.projection_months


def _load_stored(repo: SnapshotRepository, key: str) -> tuple[BudgetSnapshot, int]:
    payload, version = repo.load(key)
    return snapshot_codec.load_snapshot(payload), version


def _persist(
    repo: SnapshotRepository,
    key: str,
    budget: BudgetSnapshot,
    version: int,
    action: SnapshotAction,
    *,
    entry_id: str | None = None,
    details: dict[str, Any] | None = None,
    **log_extra: Any,
):
    """Save `budget` over the version it was read at and answer with the stored snapshot."""
    payload = snapshot_codec.dump_snapshot(budget)
    try:
        repo.save_payload(
            key,
            payload,
            expected_version=version,
            action=action,
            entry_id=entry_id,
            details=details,
        )
    except SnapshotConflictError as exc:
        logger.warning(
            {
                "event": "snapshot_conflict",
                "snapshot_key_hash": hash_payload(key),
                "action": action.value,
                "expected_version": exc.expected_version,
            }
        )
        return error_response(409, "snapshot_conflict", str(exc))

    _log_snapshot_event(action.value, key, budget, **log_extra)
    return SnapshotPayload(**payload)


@app.on_event("startup")
def on_startup() -> None:
    """Initialize persistence before serving requests."""
    init_db()


@app.get("/health")
def health_check() -> dict:
    """
    Report Advisor Service readiness; expects no payload.
    Returns a static status document for load balancers and uptime checks.
    """
    return {"status": "ok", "service": "advisor-service"}


@app.post("/summarize", response_model=SummarizeResponseModel)
def summarize_budget(payload: SnapshotPayload) -> SummarizeResponseModel:
    """
    Compute monthly income, expenses, disposable income, and debt ratio.
    Returns the totals plus per-category monthly amounts and their 0..1 shares.
    """
    budget = payload.to_snapshot()
    _log_snapshot_event("summarize", None, budget)
    return SummarizeResponseModel(
        summary=_summary_model(budget),
        category_totals=compute_category_totals(budget.expenses),
        category_shares=compute_category_shares(budget.expenses),
    )


@app.post("/assess", response_model=HealthAssessmentModel)
def assess_health(payload: SnapshotPayload) -> HealthAssessmentModel:
    """Score the snapshot's financial health (0-100) with a status tier and recommendations."""
    budget = payload.to_snapshot()
    return _build_health(budget)


@app.post("/analyze", response_model=AnalysisResponseModel)
def analyze_budget(
    payload: SnapshotPayload,
    months: Optional[int] = Query(default=None, ge=1, le=60),
) -> AnalysisResponseModel:
    """
    Compute savings rate, emergency-fund coverage, ranked categories, and a flat
    `months`-long projection (configured default when omitted).
    """
    budget = payload.to_snapshot()
    return _build_analysis(budget, _resolve_months(months))


@app.post("/goals/progress", response_model=GoalsResponseModel)
def goals_progress(payload: SnapshotPayload) -> GoalsResponseModel:
    """Return per-goal progress sorted by priority and deadline, plus aggregate goal stats."""
    budget = payload.to_snapshot()
    return _build_goals(budget)


@app.post("/report", response_model=ReportResponseModel)
def build_report(payload: SnapshotPayload) -> ReportResponseModel:
    """Render the plain-text report and the assistant context for a snapshot."""
    budget = payload.to_snapshot()
    financial = aggregate(budget.income, budget.expenses)
    health = score_financial_health(financial)
    category_totals = compute_category_totals(budget.expenses)
    metrics = analyze(financial, category_totals, ADVISOR_SETTINGS.projection_months)
    goals = sort_goals(budget.goals)

    return ReportResponseModel(
        report=build_text_report(
            financial,
            health,
            category_totals,
            analysis_recommendations=generate_analysis_recommendations(metrics),
            goals=goals,
        ),
        assistant_context=build_financial_context(financial, health, category_totals, goals),
    )


@app.get("/sample-profiles", response_model=list[SampleProfileModel])
def list_sample_profiles() -> list[SampleProfileModel]:
    """List the preset households that can be loaded into a snapshot."""
    return [
        SampleProfileModel(
            index=index,
            name=profile.name,
            monthly_income=profile.monthly_income,
            expense_count=len(profile.expenses),
            goal_count=len(profile.goals),
        )
        for index, profile in enumerate(SAMPLE_PROFILES)
    ]


@app.get("/snapshots/{key}", response_model=SnapshotPayload)
def get_snapshot(key: str, db: Session = Depends(get_session)) -> SnapshotPayload:
    """Return the stored snapshot; unknown keys yield an empty snapshot."""
    budget, _ = _load_stored(SnapshotRepository(db), key)
    return SnapshotPayload(**snapshot_codec.dump_snapshot(budget))


@app.get("/snapshots/{key}/dashboard", response_model=DashboardResponseModel)
def snapshot_dashboard(
    key: str,
    months: Optional[int] = Query(default=None, ge=1, le=60),
    db: Session = Depends(get_session),
) -> DashboardResponseModel:
    """Everything the dashboard shows for a stored snapshot in one response."""
    budget, _ = _load_stored(SnapshotRepository(db), key)
    return DashboardResponseModel(
        summary=_summary_model(budget),
        category_totals=compute_category_totals(budget.expenses),
        health=_build_health(budget),
        analysis=_build_analysis(budget, _resolve_months(months)),
        goals=_build_goals(budget),
    )


@app.get("/snapshots/{key}/expenses", response_model=ExpenseListResponseModel)
def list_expenses(
    key: str,
    category: Optional[str] = Query(default=None),
    expense_type: Optional[Literal["essential", "variable"]] = Query(default=None, alias="type"),
    db: Session = Depends(get_session),
) -> ExpenseListResponseModel:
    """
    List stored expenses, optionally narrowed to one category and/or type.
    `monthly_total` is the monthly-equivalent sum of the listed entries.
    """
    budget, _ = _load_stored(SnapshotRepository(db), key)
    matches = snapshot_codec.filter_expenses(budget.expenses, category=category, expense_type=expense_type)
    return ExpenseListResponseModel(
        expenses=[ExpenseModel(**dataclasses.asdict(expense)) for expense in matches],
        monthly_total=compute_monthly_expenses(matches),
    )


@app.post("/snapshots/{key}/sample", response_model=None)
def load_sample_profile(
    key: str,
    profile: Optional[int] = Query(default=None, ge=0, lt=len(SAMPLE_PROFILES)),
    db: Session = Depends(get_session),
):
    """
    Replace the snapshot with a preset household. Without `profile`, the preset
    after the one this key loaded last is used, starting from the first.
    """
    repo = SnapshotRepository(db)
    if profile is None:
        previous = repo.last_event(key, SnapshotAction.SAMPLE_LOADED)
        profile = next_profile_index(previous.details.get("profile") if previous and previous.details else None)

    _, version = _load_stored(repo, key)
    budget = build_sample_snapshot(profile)
    return _persist(
        repo,
        key,
        budget,
        version,
        SnapshotAction.SAMPLE_LOADED,
        details={"profile": profile},
        profile=profile,
    )


@app.put("/snapshots/{key}/income", response_model=None)
def configure_income(key: str, payload: IncomeModel, db: Session = Depends(get_session)):
    """Replace the snapshot's income configuration wholesale."""
    repo = SnapshotRepository(db)
    budget, version = _load_stored(repo, key)
    try:
        budget = snapshot_codec.replace_income(
            budget,
            IncomeConfig(type=payload.type, amount=payload.amount, frequency=payload.frequency),
        )
    except snapshot_codec.SnapshotValidationError as exc:
        return error_response(400, exc.code, str(exc))

    return _persist(repo, key, budget, version, SnapshotAction.INCOME_CONFIGURED, details={"type": payload.type})


@app.post("/snapshots/{key}/expenses", status_code=201, response_model=None)
def create_expense(key: str, payload: NewExpenseModel, db: Session = Depends(get_session)):
    """Append an expense with a generated id."""
    repo = SnapshotRepository(db)
    budget, version = _load_stored(repo, key)
    try:
        budget, expense = snapshot_codec.add_expense(budget, **payload.model_dump())
    except snapshot_codec.SnapshotValidationError as exc:
        return error_response(400, exc.code, str(exc))

    return _persist(
        repo,
        key,
        budget,
        version,
        SnapshotAction.EXPENSE_ADDED,
        entry_id=expense.id,
        details=redact_fields(dataclasses.asdict(expense), SAFE_ENTRY_KEYS),
    )


@app.delete("/snapshots/{key}/expenses/{expense_id}", response_model=None)
def delete_expense(key: str, expense_id: str, db: Session = Depends(get_session)):
    """Remove an expense by id."""
    repo = SnapshotRepository(db)
    budget, version = _load_stored(repo, key)
    try:
        budget = snapshot_codec.remove_expense(budget, expense_id)
    except snapshot_codec.EntryNotFoundError as exc:
        return error_response(404, exc.code, str(exc))

    return _persist(repo, key, budget, version, SnapshotAction.EXPENSE_REMOVED, entry_id=expense_id)


@app.post("/snapshots/{key}/goals", status_code=201, response_model=None)
def create_goal(key: str, payload: NewGoalModel, db: Session = Depends(get_session)):
    """Add a goal; the target must be positive and in the future, and not already exceeded."""
    repo = SnapshotRepository(db)
    budget, version = _load_stored(repo, key)
    try:
        budget, goal = snapshot_codec.add_goal(
            budget,
            name=payload.name,
            target_amount=payload.target_amount,
            current_amount=payload.current_amount,
            target_date=payload.target_date.isoformat(),
            category=payload.category,
            priority=payload.priority,
            description=payload.description,
        )
    except snapshot_codec.SnapshotValidationError as exc:
        return error_response(400, exc.code, str(exc))

    return _persist(
        repo,
        key,
        budget,
        version,
        SnapshotAction.GOAL_ADDED,
        entry_id=goal.id,
        details=redact_fields(dataclasses.asdict(goal), SAFE_ENTRY_KEYS),
    )


@app.patch("/snapshots/{key}/goals/{goal_id}", response_model=None)
def update_goal(key: str, goal_id: str, payload: GoalAmountUpdateModel, db: Session = Depends(get_session)):
    """
    Update a goal's saved amount. Going past the target requires
    `confirm_over_target=true` and otherwise answers 409.
    """
    repo = SnapshotRepository(db)
    budget, version = _load_stored(repo, key)
    try:
        budget, goal = snapshot_codec.update_goal_amount(
            budget,
            goal_id,
            payload.current_amount,
            confirm_over_target=payload.confirm_over_target,
        )
    except snapshot_codec.EntryNotFoundError as exc:
        return error_response(404, exc.code, str(exc))
    except snapshot_codec.SnapshotValidationError as exc:
        status_code = 409 if exc.code == "confirmation_required" else 400
        return error_response(status_code, exc.code, str(exc))

    completed = goal.current_amount >= goal.target_amount
    return _persist(
        repo,
        key,
        budget,
        version,
        SnapshotAction.GOAL_AMOUNT_UPDATED,
        entry_id=goal_id,
        details={"completed": completed},
        goal_completed=completed,
    )


@app.delete("/snapshots/{key}/goals/{goal_id}", response_model=None)
def delete_goal(key: str, goal_id: str, db: Session = Depends(get_session)):
    """Remove a goal by id."""
    repo = SnapshotRepository(db)
    budget, version = _load_stored(repo, key)
    try:
        budget = snapshot_codec.remove_goal(budget, goal_id)
    except snapshot_codec.EntryNotFoundError as exc:
        return error_response(404, exc.code, str(exc))

    return _persist(repo, key, budget, version, SnapshotAction.GOAL_REMOVED, entry_id=goal_id)
