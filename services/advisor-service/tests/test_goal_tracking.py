from datetime import datetime, timezone

import pytest
from budget_model import Goal
from goal_tracking import parse_target_date, sort_goals, summarize_goals, track_goal

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def make_goal(
    id_suffix: str,
    target: float,
    current: float,
    target_date: str = "2026-12-31",
    priority: str = "medium",
    category: str = "savings",
) -> Goal:
    return Goal(
        id=f"goal-{id_suffix}",
        name=f"Goal {id_suffix}",
        target_amount=target,
        current_amount=current,
        target_date=target_date,
        category=category,
        priority=priority,
    )


class TestTrackGoal:
    def test_partial_progress(self):
        progress = track_goal(make_goal("trip", 4000.0, 1000.0), now=NOW)

        assert progress.goal_id == "goal-trip"
        assert progress.progress_pct == pytest.approx(25.0)
        assert progress.remaining == pytest.approx(3000.0)
        assert progress.is_completed is False

    def test_over_funded_goal_is_clamped_but_completed(self):
        progress = track_goal(make_goal("car", 10000.0, 12000.0), now=NOW)

        assert progress.progress_pct == 100.0
        assert progress.remaining == 0.0
        assert progress.is_completed is True

    def test_exactly_funded_goal_is_completed(self):
        progress = track_goal(make_goal("fund", 500.0, 500.0), now=NOW)

        assert progress.progress_pct == pytest.approx(100.0)
        assert progress.is_completed is True

    def test_days_remaining_rounds_partial_days_up(self):
        # 2026-01-11T00:00Z is 9.5 days after NOW
        progress = track_goal(make_goal("soon", 100.0, 0.0, target_date="2026-01-11"), now=NOW)

        assert progress.days_remaining == 10
        assert progress.deadline_status == "urgent"

    def test_past_deadline_is_negative_and_urgent(self):
        progress = track_goal(make_goal("late", 100.0, 0.0, target_date="2025-12-01"), now=NOW)

        assert progress.days_remaining < 0
        assert progress.deadline_status == "urgent"

    @pytest.mark.parametrize(
        ("target_date", "expected"),
        [
            ("2026-01-31", "urgent"),  # 30 days
            ("2026-02-01", "soon"),  # 31 days
            ("2026-04-01", "soon"),  # 90 days
            ("2026-04-02", "normal"),  # 91 days
        ],
    )
    def test_deadline_status_thresholds(self, target_date, expected):
        now = datetime(2026, 1, 1, tzinfo=timezone.utc)

        assert track_goal(make_goal("deadline", 100.0, 0.0, target_date=target_date), now=now).deadline_status == expected

    def test_zero_target_goal(self):
        progress = track_goal(make_goal("empty", 0.0, 0.0), now=NOW)

        assert progress.progress_pct == 100.0
        assert progress.remaining == 0.0
        assert progress.is_completed is True

    def test_naive_now_is_treated_as_utc(self):
        naive = datetime(2026, 1, 1)
        aware = datetime(2026, 1, 1, tzinfo=timezone.utc)
        goal = make_goal("naive", 100.0, 0.0, target_date="2026-03-01")

        assert track_goal(goal, now=naive).days_remaining == track_goal(goal, now=aware).days_remaining


class TestParseTargetDate:
    def test_plain_date_is_midnight_utc(self):
        assert parse_target_date("2027-06-30") == datetime(2027, 6, 30, tzinfo=timezone.utc)

    def test_datetime_with_offset_is_kept(self):
        parsed = parse_target_date("2027-06-30T10:00:00+02:00")

        assert parsed == datetime(2027, 6, 30, 8, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["2027-06-30T12:00:00Z", "2027-06-30T12:00:00z", "2027-06-30T12:00:00.000Z"])
    def test_zulu_suffix_means_utc(self, value):
        assert parse_target_date(value) == datetime(2027, 6, 30, 12, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", ["", "next summer", "2027-13-01"])
    def test_unparseable_dates_raise(self, value):
        with pytest.raises(ValueError):
            parse_target_date(value)


class TestSortGoals:
    def test_priority_then_nearest_deadline(self):
        goals = [
            make_goal("low", 100.0, 0.0, target_date="2026-02-01", priority="low"),
            make_goal("high-late", 100.0, 0.0, target_date="2027-01-01", priority="high"),
            make_goal("medium", 100.0, 0.0, target_date="2026-03-01", priority="medium"),
            make_goal("high-early", 100.0, 0.0, target_date="2026-06-01", priority="high"),
        ]

        ordered = [goal.id for goal in sort_goals(goals)]

        assert ordered == ["goal-high-early", "goal-high-late", "goal-medium", "goal-low"]

    def test_sort_does_not_reorder_input(self):
        goals = [
            make_goal("b", 100.0, 0.0, priority="low"),
            make_goal("a", 100.0, 0.0, priority="high"),
        ]

        sort_goals(goals)

        assert [goal.id for goal in goals] == ["goal-b", "goal-a"]

    def test_ties_keep_input_order(self):
        goals = [
            make_goal("third", 100.0, 0.0, target_date="2026-05-01", priority="high"),
            make_goal("first", 300.0, 50.0, target_date="2026-05-01", priority="high"),
            make_goal("later", 100.0, 0.0, target_date="2026-09-01", priority="high"),
            make_goal("second", 200.0, 10.0, target_date="2026-05-01T00:00:00Z", priority="high"),
        ]

        ordered = [goal.id for goal in sort_goals(goals)]

        assert ordered == ["goal-third", "goal-first", "goal-second", "goal-later"]

    def test_unknown_priority_sorts_last(self):
        goals = [
            make_goal("odd", 100.0, 0.0, target_date="2026-02-01", priority="someday"),
            make_goal("low", 100.0, 0.0, target_date="2026-09-01", priority="low"),
        ]

        assert [goal.id for goal in sort_goals(goals)] == ["goal-low", "goal-odd"]


class TestSummarizeGoals:
    def test_totals_and_overall_progress(self):
        goals = [
            make_goal("car", 10000.0, 12000.0),
            make_goal("trip", 4000.0, 1000.0),
            make_goal("fund", 6000.0, 0.0),
        ]

        summary = summarize_goals(goals)

        assert summary.total_goals == 3
        assert summary.completed_goals == 1
        assert summary.total_target == pytest.approx(20000.0)
        assert summary.total_current == pytest.approx(13000.0)
        assert summary.overall_progress == pytest.approx(65.0)

    def test_no_goals(self):
        summary = summarize_goals([])

        assert summary.total_goals == 0
        assert summary.completed_goals == 0
        assert summary.overall_progress == 0.0
