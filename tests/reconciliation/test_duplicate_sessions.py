from __future__ import annotations

from dataclasses import replace
from datetime import datetime

import pytest

from src.presence_core.presence_core.attendance.model import AttendanceSession
from src.presence_core.presence_core.core.enums import ReconciliationMode
from src.presence_core.presence_core.reconciliation.service import ReconciliationEngine

DAY = "2026-02-02"


def _open(session_id, employee_id, hour, minute):
    return AttendanceSession(
        session_id=session_id,
        employee_id=employee_id,
        day_key=DAY,
        check_in_time=datetime(2026, 2, 2, hour, minute),
    )


@pytest.fixture
def engine(directory, index, sessions):
    return ReconciliationEngine(directory, index, sessions)


def test_keeps_latest_open_session(engine, sessions):
    for sid, minute in (("s900", 0), ("s903", 3), ("s907", 7)):
        sessions.seed(_open(sid, "SRM001", 9, minute))
    sessions.seed(_open("other", "SRM002", 9, 1))

    report = engine.find_and_resolve_duplicate_open_sessions(DAY, ReconciliationMode.ENFORCE)

    assert [s.session_id for s in sessions.list_open_for_day(DAY) if s.employee_id == "SRM001"] == ["s907"]
    assert sessions.get("other").is_open
    (resolution,) = report.resolutions
    assert resolution.kept == "s907"
    assert resolution.removed == ("s900", "s903")
    assert report.deleted_count == 2


def test_enforce_is_idempotent(engine, sessions):
    sessions.seed(_open("a", "SRM001", 9, 0))
    sessions.seed(_open("b", "SRM001", 9, 3))

    engine.find_and_resolve_duplicate_open_sessions(DAY, ReconciliationMode.ENFORCE)
    again = engine.find_and_resolve_duplicate_open_sessions(DAY, ReconciliationMode.ENFORCE)

    assert again.resolutions == ()
    assert again.duplicate_count == 0


def test_audit_only_reports(engine, sessions):
    sessions.seed(_open("a", "SRM001", 9, 0))
    sessions.seed(_open("b", "SRM001", 9, 3))

    report = engine.find_and_resolve_duplicate_open_sessions(DAY)

    assert report.duplicate_count == 1
    assert report.deleted_count == 0
    assert len(sessions.list_open_for_day(DAY)) == 2


def test_tied_latest_checkin_is_a_conflict(engine, sessions):
    sessions.seed(_open("a", "SRM001", 9, 0))
    sessions.seed(_open("b", "SRM001", 9, 5))
    sessions.seed(_open("c", "SRM001", 9, 5))

    report = engine.find_and_resolve_duplicate_open_sessions(DAY, ReconciliationMode.ENFORCE)

    assert len(report.conflicts) == 1
    assert report.conflicts[0].kept is None
    assert report.deleted_count == 0
    assert len(sessions.list_open_for_day(DAY)) == 3


def test_closed_sessions_are_ignored(engine, sessions):
    sessions.seed(_open("a", "SRM001", 9, 0))
    closed = _open("b", "SRM001", 8, 0)
    sessions.seed(replace(closed, check_out_time=datetime(2026, 2, 2, 8, 30)))

    report = engine.find_and_resolve_duplicate_open_sessions(DAY, ReconciliationMode.ENFORCE)

    assert report.resolutions == ()
    assert sessions.get("b") is not None
