from __future__ import annotations

from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from persistence.database import build_engine
from persistence.models import Base
from persistence.repository import MISSING_VERSION, SnapshotAction, SnapshotConflictError, SnapshotRepository


@pytest.fixture()
def session_factory(tmp_path: Path):
    engine = build_engine(f"sqlite:///{tmp_path / 'store.db'}")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, expire_on_commit=False, future=True)
    engine.dispose()


def test_snapshot_survives_new_engine(tmp_path: Path) -> None:
    """Stored snapshots persist even after a new engine/session is created."""
    url = f"sqlite:///{tmp_path / 'advisor.db'}"

    engine_one = create_engine(url, connect_args={"check_same_thread": False}, future=True)
    Base.metadata.create_all(bind=engine_one)
    SessionOne = sessionmaker(bind=engine_one, expire_on_commit=False, future=True)

    with SessionOne() as session:
        repo = SnapshotRepository(session)
        repo.save_payload(
            "household-1",
            {"income": {"type": "monthly", "amount": 3500.0, "frequency": 1}, "expenses": [], "goals": []},
            expected_version=MISSING_VERSION,
            action=SnapshotAction.INCOME_CONFIGURED,
        )

    engine_one.dispose()

    engine_two = create_engine(url, connect_args={"check_same_thread": False}, future=True)
    SessionTwo = sessionmaker(bind=engine_two, expire_on_commit=False, future=True)

    with SessionTwo() as session:
        restored, version = SnapshotRepository(session).load("household-1")

    assert restored is not None
    assert restored["income"]["amount"] == 3500.0
    assert version == 1
    engine_two.dispose()


def test_missing_key_returns_none(session_factory) -> None:
    with session_factory() as session:
        repo = SnapshotRepository(session)
        assert repo.get_payload("nobody") is None
        assert repo.load("nobody") == (None, MISSING_VERSION)


def test_audit_events_record_each_mutation(tmp_path: Path) -> None:
    engine = build_engine(f"sqlite:///{tmp_path / 'nested' / 'audit.db'}")
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False, future=True)

    with factory() as session:
        repo = SnapshotRepository(session)
        first = repo.save_payload(
            "household-2",
            {"expenses": [{"id": "e1"}]},
            expected_version=MISSING_VERSION,
            action=SnapshotAction.EXPENSE_ADDED,
            entry_id="e1",
            details={"expense_count": 1},
        )
        second = repo.save_payload(
            "household-2",
            {"expenses": []},
            expected_version=first,
            action=SnapshotAction.EXPENSE_REMOVED,
            entry_id="e1",
        )
        payload, version = repo.load("household-2")
        events = repo.list_events("household-2")

    assert (first, second) == (1, 2)
    assert payload == {"expenses": []}
    assert version == 2
    assert [event.action for event in events] == ["expense_added", "expense_removed"]
    assert events[0].entry_id == "e1"
    assert events[0].details == {"expense_count": 1}
    assert events[1].details is None
    engine.dispose()


def test_stale_writer_is_rejected_and_first_write_kept(session_factory) -> None:
    with session_factory() as session:
        SnapshotRepository(session).save_payload(
            "household-3",
            {"expenses": []},
            expected_version=MISSING_VERSION,
            action=SnapshotAction.INCOME_CONFIGURED,
        )

    with session_factory() as first_session, session_factory() as second_session:
        first, second = SnapshotRepository(first_session), SnapshotRepository(second_session)
        _, first_version = first.load("household-3")
        _, second_version = second.load("household-3")
        assert first_version == second_version == 1

        first.save_payload(
            "household-3",
            {"expenses": [{"id": "rent"}]},
            expected_version=first_version,
            action=SnapshotAction.EXPENSE_ADDED,
            entry_id="rent",
        )
        with pytest.raises(SnapshotConflictError) as excinfo:
            second.save_payload(
                "household-3",
                {"expenses": [{"id": "food"}]},
                expected_version=second_version,
                action=SnapshotAction.EXPENSE_ADDED,
                entry_id="food",
            )

        assert excinfo.value.expected_version == 1
        payload, version = second.load("household-3")
        assert payload == {"expenses": [{"id": "rent"}]}
        assert version == 2
        assert [event.entry_id for event in second.list_events("household-3")] == [None, "rent"]


def test_concurrent_first_writes_conflict(session_factory) -> None:
    with session_factory() as first_session, session_factory() as second_session:
        first, second = SnapshotRepository(first_session), SnapshotRepository(second_session)
        assert first.load("household-4")[1] == MISSING_VERSION
        assert second.load("household-4")[1] == MISSING_VERSION

        first.save_payload(
            "household-4",
            {"expenses": [{"id": "rent"}]},
            expected_version=MISSING_VERSION,
            action=SnapshotAction.EXPENSE_ADDED,
        )
        with pytest.raises(SnapshotConflictError):
            second.save_payload(
                "household-4",
                {"expenses": [{"id": "food"}]},
                expected_version=MISSING_VERSION,
                action=SnapshotAction.EXPENSE_ADDED,
            )

        assert second.load("household-4") == ({"expenses": [{"id": "rent"}]}, 1)


def test_last_event_returns_newest_matching_action(session_factory) -> None:
    with session_factory() as session:
        repo = SnapshotRepository(session)
        version = repo.save_payload(
            "household-5",
            {},
            expected_version=MISSING_VERSION,
            action=SnapshotAction.SAMPLE_LOADED,
            details={"profile": 0},
        )
        version = repo.save_payload(
            "household-5",
            {},
            expected_version=version,
            action=SnapshotAction.SAMPLE_LOADED,
            details={"profile": 1},
        )
        repo.save_payload("household-5", {}, expected_version=version, action=SnapshotAction.GOAL_REMOVED)

        latest = repo.last_event("household-5", SnapshotAction.SAMPLE_LOADED)
        assert latest is not None
        assert latest.details == {"profile": 1}
        assert repo.last_event("household-5", SnapshotAction.EXPENSE_ADDED) is None
