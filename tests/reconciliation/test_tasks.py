from __future__ import annotations

from datetime import datetime

import pytest

from src.presence_core.presence_core.attendance.model import AttendanceSession
from src.presence_core.presence_core.container import wire
from src.presence_core.presence_core.reconciliation import tasks


@pytest.fixture
def container(directory, index, sessions, monkeypatch):
    c = wire(directory=directory, sessions=sessions, index=index)
    monkeypatch.setattr(tasks, "get_container", lambda: c)
    return c


def test_ghost_task_returns_report(container, index):
    index.enroll(b"x", "LEFT")

    audit = tasks.run_ghost_reconciliation()
    enforce = tasks.run_ghost_reconciliation("enforce")

    assert audit["mode"] == "audit"
    assert audit["ghosts"] == {"LEFT": ["face-001"]}
    assert enforce["deleted_count"] == 1
    assert index.external_ids() == []


def test_session_task_uses_given_day(container, sessions):
    for sid, minute in (("a", 0), ("b", 4)):
        sessions.seed(
            AttendanceSession(
                session_id=sid,
                employee_id="SRM001",
                day_key="2026-02-02",
                check_in_time=datetime(2026, 2, 2, 9, minute),
            )
        )

    result = tasks.run_duplicate_session_reconciliation("2026-02-02", "enforce")

    assert result["day_key"] == "2026-02-02"
    assert result["resolutions"][0]["kept"] == "b"
    assert sessions.get("a") is None
