from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest

from src.presence_core.presence_core.attendance.model import AttendanceSession, Location
from src.presence_core.presence_core.core.enums import AttendanceStatus, CheckInType
from src.presence_core.presence_core.core.exceptions import (
    DuplicateSessionError,
    NoOpenSessionError,
    NotFoundError,
    ValidationError,
    VerificationFailedError,
)

from tests.conftest import FACE_A, FACE_B

HERE = Location(12.9716, 77.5946)


def test_checkin_then_checkout_leaves_one_closed_session(manager, sessions, fixed_now):
    opened = manager.check_in("SRM001", FACE_A, HERE)
    closed = manager.check_out("SRM001", FACE_A, HERE, now=datetime(2026, 2, 2, 18, 30))

    rows = sessions.query_by_employee_and_day("SRM001", "2026-02-02")
    assert len(rows) == 1
    assert rows[0].session_id == opened.session_id == closed.session_id
    assert rows[0].check_out_time > rows[0].check_in_time
    assert closed.work_duration.total_seconds() == (9 * 60 + 10) * 60


def test_checkin_after_grace_is_late(manager):
    session = manager.check_in("SRM001", FACE_A, HERE)

    assert session.status == AttendanceStatus.LATE
    assert session.is_late
    assert session.note == "Late by 20 min"


def test_checkin_on_time_then_early_leave(manager, sessions):
    manager.check_in("SRM001", FACE_A, HERE, now=datetime(2026, 2, 2, 8, 55))
    closed = manager.check_out("SRM001", FACE_A, now=datetime(2026, 2, 2, 16, 0))

    assert closed.status == AttendanceStatus.EARLY_LEAVE
    assert closed.note == "Left 120 min early"
    assert sessions.get(closed.session_id).status == AttendanceStatus.EARLY_LEAVE


def test_second_checkin_same_day_is_duplicate(manager):
    manager.check_in("SRM001", FACE_A, HERE)
    with pytest.raises(DuplicateSessionError) as exc:
        manager.check_in("SRM001", FACE_A, HERE)
    assert exc.value.day_key == "2026-02-02"


def test_concurrent_checkins_yield_exactly_one_session(manager, sessions):
    attempts = 12

    def attempt(_):
        try:
            manager.check_in("SRM001", FACE_A, HERE)
            return "ok"
        except DuplicateSessionError:
            return "duplicate"

    with ThreadPoolExecutor(max_workers=attempts) as pool:
        results = list(pool.map(attempt, range(attempts)))

    assert results.count("ok") == 1
    assert results.count("duplicate") == attempts - 1
    assert len(sessions.list_open_for_day("2026-02-02")) == 1


def test_checkin_after_checkout_opens_a_new_session(manager, sessions):
    manager.check_in("SRM001", FACE_A, HERE)
    manager.check_out("SRM001", FACE_A, now=datetime(2026, 2, 2, 12, 0))
    manager.check_in("SRM001", FACE_A, HERE, now=datetime(2026, 2, 2, 13, 0))

    rows = sessions.query_by_employee_and_day("SRM001", "2026-02-02")
    assert len(rows) == 2
    assert [r.is_open for r in rows] == [False, True]


def test_checkout_without_open_session_mutates_nothing(manager, sessions):
    with pytest.raises(NoOpenSessionError):
        manager.check_out("SRM001", FACE_A)
    assert sessions.all() == []


def test_checkout_twice_reports_no_open_session(manager, sessions):
    manager.check_in("SRM001", FACE_A, HERE)
    manager.check_out("SRM001", FACE_A, now=datetime(2026, 2, 2, 18, 0))
    before = sessions.all()

    with pytest.raises(NoOpenSessionError):
        manager.check_out("SRM001", FACE_A, now=datetime(2026, 2, 2, 18, 5))
    assert sessions.all() == before


def test_checkin_with_someone_elses_face_is_rejected(manager, sessions):
    with pytest.raises(VerificationFailedError) as exc:
        manager.check_in("SRM001", FACE_B, HERE)
    assert exc.value.employee_id == "SRM001"
    assert sessions.all() == []


def test_checkout_with_wrong_face_keeps_session_open(manager, sessions):
    opened = manager.check_in("SRM001", FACE_A, HERE)
    with pytest.raises(VerificationFailedError):
        manager.check_out("SRM001", FACE_B)
    assert sessions.get(opened.session_id).is_open


def test_checkin_unknown_or_inactive_employee(manager, directory):
    with pytest.raises(NotFoundError):
        manager.check_in("NOPE", FACE_A, HERE)

    directory.deactivate("SRM001")
    with pytest.raises(ValidationError):
        manager.check_in("SRM001", FACE_A, HERE)


def test_checkin_employee_without_binding_is_not_found(manager):
    with pytest.raises(NotFoundError):
        manager.check_in("SRM004", b"anything", HERE)


def test_kiosk_checkin_needs_no_location(manager):
    session = manager.check_in("SRM001", FACE_A, check_in_type=CheckInType.KIOSK)
    assert session.check_in_type == CheckInType.KIOSK
    assert session.check_in_location is None


def test_stale_session_from_previous_day_is_closed_at_checkin_time(manager, sessions, fixed_now):
    sessions.seed(
        AttendanceSession(
            session_id="old",
            employee_id="SRM001",
            day_key="2026-02-01",
            check_in_time=datetime(2026, 2, 1, 9, 0),
        )
    )

    manager.check_in("SRM001", FACE_A, HERE)

    old = sessions.get("old")
    assert not old.is_open
    assert old.check_out_time == fixed_now
    assert len(sessions.list_open_for_employee("SRM001")) == 1
    assert old.note == "Auto-closed: no checkout recorded"


def test_checkout_closes_latest_of_legacy_duplicates(manager, sessions):
    for sid, minute in (("a", 0), ("b", 5)):
        sessions.seed(
            AttendanceSession(
                session_id=sid,
                employee_id="SRM001",
                day_key="2026-02-02",
                check_in_time=datetime(2026, 2, 2, 9, minute),
            )
        )

    closed = manager.check_out("SRM001", FACE_A, now=datetime(2026, 2, 2, 18, 0))

    assert closed.session_id == "b"
    assert sessions.get("a").is_open


def test_status_reports_sessions_and_total_minutes(manager):
    empty = manager.get_status("SRM001")
    assert not empty.is_checked_in
    assert empty.sessions == ()

    manager.check_in("SRM001", FACE_A, HERE, now=datetime(2026, 2, 2, 9, 0))
    manager.check_out("SRM001", FACE_A, now=datetime(2026, 2, 2, 12, 0))
    manager.check_in("SRM001", FACE_A, HERE, now=datetime(2026, 2, 2, 13, 0))

    status = manager.get_status("SRM001", now=datetime(2026, 2, 2, 14, 30))
    assert status.is_checked_in
    assert status.has_open_session
    assert status.check_in_time == datetime(2026, 2, 2, 13, 0)
    assert status.total_minutes_today == 270
    assert len(status.sessions) == 2


def test_status_unknown_employee(manager):
    with pytest.raises(NotFoundError):
        manager.get_status("NOPE")


def test_close_all_open_sessions(manager, sessions):
    sessions.seed(
        AttendanceSession(
            session_id="old",
            employee_id="SRM001",
            day_key="2026-01-30",
            check_in_time=datetime(2026, 1, 30, 9, 0),
        )
    )
    manager.check_in("SRM001", FACE_A, HERE)

    assert manager.close_all_open_sessions("SRM001") == 1
    assert sessions.list_open_for_employee("SRM001") == []
    assert manager.close_all_open_sessions("SRM001") == 0
